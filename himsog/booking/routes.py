from flask import Blueprint, request, jsonify, current_app
from flask_login import login_required, current_user
from himsog.models.appointment import Appointment
from himsog.models.service import Service
from himsog.booking.forms import BookingForm, CancelAppointmentForm
from himsog.errors import SlotUnavailableError
from himsog.scheduling.booking import book_slot, get_available_slots
from himsog.scheduling.hours import get_operating_days
from himsog.scheduling.lifecycle import cancel_appointment as cancel_appointment_action
from himsog.scheduling.timeutils import local_now, parse_date
from himsog.utils.responses import success, form_error

booking_bp = Blueprint('booking', __name__)

@booking_bp.route('/providers/<int:provider_id>/availability')
def availability(provider_id):
    """Available time slots for a provider on ?date=YYYY-MM-DD"""
    day = parse_date(request.args.get('date'))
    return success(get_available_slots(provider_id, day, local_now()))

@booking_bp.route('/providers/<int:provider_id>/operating-days')
def operating_days(provider_id):
    """Weekdays the provider is open, used to disable calendar days"""
    return success(sorted(get_operating_days(provider_id)))

@booking_bp.route('/providers/<int:provider_id>/appointments', methods=['POST'])
@login_required
def book_appointment(provider_id):
    """Book a new appointment"""
    form = BookingForm()

    # Populate service choices from the provider's active services
    services = Service.query.filter_by(provider_id=provider_id, is_active=True).all()
    form.service_ids.choices = [(s.id, s.name) for s in services]

    if not form.validate_on_submit():
        return form_error(form)

    now = local_now()
    try:
        appointment = book_slot(
            provider_id=provider_id,
            user_id=current_user.id,
            day=form.date.data,
            time=form.time.data,
            service_ids=form.service_ids.data,
            patient_info=form.patient_info(),
            now=now
        )
    except SlotUnavailableError as e:
        current_app.logger.warning(f"Booking rejected for provider {provider_id}: {e.reason}")

        # The world changed since the client's last read, send fresh slots back
        payload = e.to_dict()
        payload['availability'] = get_available_slots(provider_id, form.date.data, now)
        return jsonify(payload), e.status_code

    return success(appointment.to_dict(), message='Appointment created successfully!', status=201)

@booking_bp.route('/appointments')
@login_required
def my_appointments():
    """All appointments booked by the current user"""
    appointments = Appointment.query.filter_by(
        user_id=current_user.id
    ).order_by(Appointment.start_time.desc()).all()
    return success([a.to_dict() for a in appointments])

@booking_bp.route('/appointments/<int:appointment_id>/cancel', methods=['POST'])
@login_required
def cancel_appointment(appointment_id):
    """Cancel one of the current user's appointments"""
    form = CancelAppointmentForm()
    if not form.validate_on_submit():
        return form_error(form)

    appointment = cancel_appointment_action(current_user, appointment_id, form.reason.data, form.notes.data)
    return success(appointment.to_dict(), message='Appointment cancelled')
