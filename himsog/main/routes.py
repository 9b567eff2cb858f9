from flask import Blueprint, redirect, url_for
from flask_login import current_user
from himsog.models.provider import Provider, PROVIDER_VERIFIED
from himsog.models.user import ROLE_USER, ROLE_PROVIDER
from himsog.utils.responses import success

main_bp = Blueprint('main', __name__)

# Landing endpoint per role
DASHBOARDS = {
    ROLE_USER: 'booking.my_appointments',
    ROLE_PROVIDER: 'provider.appointments',
}

@main_bp.route('/')
def index():
    """Directory of providers accepting appointments"""
    providers = Provider.query.filter_by(status=PROVIDER_VERIFIED).order_by(Provider.healthcare_name).all()
    return success([
        {
            'id': p.id,
            'healthcareName': p.healthcare_name,
            'address': p.address,
            'slotDuration': p.slot_duration
        }
        for p in providers
    ])

@main_bp.route('/dashboard')
def dashboard():
    """Redirect to appropriate dashboard based on user role"""
    if not current_user.is_authenticated:
        return redirect(url_for('main.index'))
    return redirect(url_for(DASHBOARDS.get(current_user.role, 'main.index')))
