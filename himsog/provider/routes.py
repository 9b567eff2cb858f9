from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from himsog.models.appointment import Appointment
from himsog.models.availability import OperatingHours
from himsog.provider.forms import (
    BreakTimeForm, BreakTimeUpdateForm, AppointmentStatusForm, BulkStatusForm, RescheduleForm
)
from himsog.booking.forms import CancelAppointmentForm
from himsog.errors import ValidationError
from himsog.scheduling import breaks, lifecycle
from himsog.scheduling.booking import reschedule_appointment as reschedule_action
from himsog.scheduling.hours import set_operating_hours
from himsog.scheduling.providers import get_owned_provider
from himsog.scheduling.timeutils import local_now
from himsog.utils.responses import success, form_error
from functools import wraps

provider_bp = Blueprint('provider', __name__, url_prefix='/provider')

# Custom decorator to ensure only providers can access these routes
def provider_required(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated or not current_user.is_provider():
            return jsonify({'success': False, 'error': 'Access denied. This area is for providers only.'}), 403
        return f(*args, **kwargs)
    return decorated_function

@provider_bp.route('/operating-hours', methods=['GET'])
@login_required
@provider_required
def operating_hours():
    """Weekly schedule of the current provider"""
    provider = get_owned_provider(current_user)
    rows = OperatingHours.query.filter_by(provider_id=provider.id).order_by(OperatingHours.day_of_week).all()
    return success([row.to_dict() for row in rows])

@provider_bp.route('/operating-hours', methods=['PUT'])
@login_required
@provider_required
def update_operating_hours():
    """Replace the weekly schedule; body is {"hours": [{day_of_week, start_time, end_time, is_closed}]}"""
    data = request.get_json(silent=True) or {}
    entries = data.get('hours')
    if not isinstance(entries, list) or not entries:
        raise ValidationError('Provide the operating hours to update')

    rows = set_operating_hours(current_user, entries)
    return success([row.to_dict() for row in rows], message='Operating hours updated successfully')

@provider_bp.route('/break-times', methods=['GET'])
@login_required
@provider_required
def break_times():
    provider = get_owned_provider(current_user)
    return success([b.to_dict() for b in breaks.list_break_times(provider.id)])

@provider_bp.route('/break-times', methods=['POST'])
@login_required
@provider_required
def create_break_time():
    form = BreakTimeForm()
    if not form.validate_on_submit():
        return form_error(form)

    break_time = breaks.create_break_time(
        current_user,
        name=form.name.data,
        day_of_week=form.day_of_week.data,
        start_time=form.start_time.data,
        end_time=form.end_time.data
    )
    return success(break_time.to_dict(), message='Break time created successfully', status=201)

@provider_bp.route('/break-times/<int:break_time_id>', methods=['PATCH'])
@login_required
@provider_required
def update_break_time(break_time_id):
    form = BreakTimeUpdateForm()
    if not form.validate_on_submit():
        return form_error(form)

    break_time = breaks.update_break_time(
        current_user,
        break_time_id,
        name=form.name.data or None,
        day_of_week=form.day_of_week.data,
        start_time=form.start_time.data or None,
        end_time=form.end_time.data or None
    )
    return success(break_time.to_dict(), message='Break time updated successfully')

@provider_bp.route('/break-times/<int:break_time_id>', methods=['DELETE'])
@login_required
@provider_required
def delete_break_time(break_time_id):
    breaks.delete_break_time(current_user, break_time_id)
    return success(message='Break time deleted successfully')

@provider_bp.route('/appointments')
@login_required
@provider_required
def appointments():
    """Appointments of the current provider, optionally filtered by ?status="""
    provider = get_owned_provider(current_user)
    query = Appointment.query.filter_by(provider_id=provider.id)

    status_filter = request.args.get('status', 'all')
    if status_filter != 'all':
        query = query.filter_by(status=status_filter.upper())

    return success([a.to_dict() for a in query.order_by(Appointment.start_time).all()])

@provider_bp.route('/appointments/<int:appointment_id>/status', methods=['POST'])
@login_required
@provider_required
def update_appointment_status(appointment_id):
    form = AppointmentStatusForm()
    if not form.validate_on_submit():
        return form_error(form)

    appointment = lifecycle.update_appointment_status(
        current_user, appointment_id, form.status.data, form.activity_notes.data
    )
    return success(appointment.to_dict(), message=f'Appointment {appointment.status.lower()} successfully')

@provider_bp.route('/appointments/<int:appointment_id>/cancel', methods=['POST'])
@login_required
@provider_required
def cancel_appointment(appointment_id):
    form = CancelAppointmentForm()
    if not form.validate_on_submit():
        return form_error(form)

    appointment = lifecycle.cancel_appointment(current_user, appointment_id, form.reason.data, form.notes.data)
    return success(appointment.to_dict(), message='Appointment cancelled')

@provider_bp.route('/appointments/bulk-status', methods=['POST'])
@login_required
@provider_required
def bulk_update_status():
    form = BulkStatusForm()
    if not form.validate_on_submit():
        return form_error(form)

    result = lifecycle.bulk_update_status(
        current_user, form.appointment_ids.data, form.status.data, form.reason.data or None
    )
    return success(result)

@provider_bp.route('/appointments/<int:appointment_id>/reschedule', methods=['POST'])
@login_required
@provider_required
def reschedule_appointment(appointment_id):
    form = RescheduleForm()
    if not form.validate_on_submit():
        return form_error(form)

    appointment = reschedule_action(current_user, appointment_id, form.date.data, form.time.data, local_now())
    return success(appointment.to_dict(), message='Appointment rescheduled')
