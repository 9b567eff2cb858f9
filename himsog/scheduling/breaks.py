from flask import current_app

from himsog import db
from himsog.errors import NotFoundError, AuthorizationError, ValidationError
from himsog.models.availability import BreakTime
from himsog.scheduling.providers import get_provider, get_owned_provider
from himsog.scheduling.timeutils import parse_time, normalize_time
from himsog.utils.audit import audit_log_decorator


def get_break_times(provider_id, day_of_week):
    return BreakTime.query.filter_by(
        provider_id=provider_id,
        day_of_week=day_of_week
    ).order_by(BreakTime.start_time).all()


def list_break_times(provider_id):
    get_provider(provider_id)
    return BreakTime.query.filter_by(
        provider_id=provider_id
    ).order_by(BreakTime.day_of_week, BreakTime.start_time).all()


def _validate(name, day_of_week, start_time, end_time):
    if not name or not name.strip():
        raise ValidationError('Break name is required')
    if day_of_week is None or not 0 <= int(day_of_week) <= 6:
        raise ValidationError('Day of week must be between 0 (Sunday) and 6 (Saturday)')
    if parse_time(end_time) <= parse_time(start_time):
        raise ValidationError('End time must be after start time')


def _get_owned_break_time(actor, break_time_id):
    break_time = db.session.get(BreakTime, break_time_id)
    if break_time is None:
        raise NotFoundError('Break time not found')
    if not break_time.provider.is_owned_by(actor):
        raise AuthorizationError('You can only manage your own break times')
    return break_time


@audit_log_decorator(
    action='create',
    entity_type='break_time',
    get_entity_id=lambda result, *args, **kwargs: result.id,
    get_details=lambda result, *args, **kwargs: result.to_dict()
)
def create_break_time(actor, name, day_of_week, start_time, end_time):
    provider = get_owned_provider(actor)
    _validate(name, day_of_week, start_time, end_time)

    break_time = BreakTime(
        provider_id=provider.id,
        day_of_week=int(day_of_week),
        start_time=normalize_time(start_time),
        end_time=normalize_time(end_time),
        name=name.strip()
    )
    db.session.add(break_time)
    db.session.commit()
    current_app.logger.info(f"Break time {break_time.id} created for provider {provider.id}")
    return break_time


@audit_log_decorator(
    action='update',
    entity_type='break_time',
    get_entity_id=lambda result, *args, **kwargs: result.id,
    get_details=lambda result, *args, **kwargs: result.to_dict()
)
def update_break_time(actor, break_time_id, name=None, day_of_week=None, start_time=None, end_time=None):
    """Apply the given changes in one write; nothing changes if any value is invalid"""
    break_time = _get_owned_break_time(actor, break_time_id)

    new_name = name if name is not None else break_time.name
    new_day = day_of_week if day_of_week is not None else break_time.day_of_week
    new_start = start_time or break_time.start_time
    new_end = end_time or break_time.end_time
    _validate(new_name, new_day, new_start, new_end)

    break_time.name = new_name.strip()
    break_time.day_of_week = int(new_day)
    break_time.start_time = normalize_time(new_start)
    break_time.end_time = normalize_time(new_end)
    db.session.commit()
    return break_time


@audit_log_decorator(
    action='delete',
    entity_type='break_time',
    get_entity_id=lambda result, *args, **kwargs: result
)
def delete_break_time(actor, break_time_id):
    break_time = _get_owned_break_time(actor, break_time_id)
    deleted_id = break_time.id
    db.session.delete(break_time)
    db.session.commit()
    return deleted_id
