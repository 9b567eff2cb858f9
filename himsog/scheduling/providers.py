from himsog import db
from himsog.errors import NotFoundError, AuthorizationError
from himsog.models.provider import Provider


def get_provider(provider_id):
    provider = db.session.get(Provider, provider_id)
    if provider is None:
        raise NotFoundError('Provider not found')
    return provider


def get_owned_provider(actor):
    """The provider profile owned by actor"""
    if actor is None or not actor.is_provider():
        raise AuthorizationError('Only providers can manage schedules')
    provider = Provider.query.filter_by(user_id=actor.id).first()
    if provider is None:
        raise NotFoundError('Provider profile not found')
    return provider


def lock_provider(provider_id):
    """
    Take a row lock on the provider for the rest of the transaction.

    Serializes bookings for one provider; other providers are unaffected.
    SQLite has no row locks and serializes writers on its own.
    """
    return db.session.query(Provider).filter_by(id=provider_id).with_for_update().one()
