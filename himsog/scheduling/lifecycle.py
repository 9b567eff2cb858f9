"""
Appointment status changes.

PENDING -> CONFIRMED | CANCELLED
CONFIRMED -> COMPLETED | CANCELLED | NO_SHOW
COMPLETED, CANCELLED and NO_SHOW are terminal.
"""
from flask import current_app

from himsog import db
from himsog.errors import NotFoundError, AuthorizationError, ValidationError, InvalidTransitionError
from himsog.models.appointment import (
    Appointment, ALL_STATUSES,
    STATUS_CONFIRMED, STATUS_COMPLETED, STATUS_CANCELLED, STATUS_NO_SHOW
)
from himsog.models import notification as notification_types
from himsog.scheduling.providers import get_owned_provider
from himsog.scheduling.timeutils import format_display, local_now
from himsog.utils.audit import log_audit
from himsog.utils.notifications import notify

USER_CANCELLATION_REASONS = {
    'SCHEDULE_CONFLICT': 'Schedule conflict',
    'FEELING_BETTER': 'Feeling better',
    'FINANCIAL_REASONS': 'Financial reasons',
    'FOUND_ANOTHER_PROVIDER': 'Found another provider',
    'TRANSPORTATION_ISSUES': 'Transportation issues',
    'PERSONAL_EMERGENCY': 'Personal emergency',
    'OTHER': 'Other',
}

PROVIDER_CANCELLATION_REASONS = {
    'PROVIDER_UNAVAILABLE': 'Provider unavailable',
    'EMERGENCY_SITUATION': 'Emergency situation',
    'SCHEDULING_ERROR': 'Scheduling error',
    'FACILITY_ISSUES': 'Facility issues',
    'WEATHER_SAFETY_CONCERNS': 'Weather/safety concerns',
    'OTHER': 'Other',
}

DEFAULT_PROVIDER_CANCELLATION = 'Cancelled by provider'


def get_appointment(appointment_id):
    appointment = db.session.get(Appointment, appointment_id)
    if appointment is None:
        raise NotFoundError('Appointment not found')
    return appointment


def cancellation_text(reason, notes, by_provider):
    """Reason code to its label, with notes appended when given"""
    labels = PROVIDER_CANCELLATION_REASONS if by_provider else USER_CANCELLATION_REASONS
    label = labels.get(reason, reason)
    return f"{label}: {notes}" if notes else label


def _apply_status(appointment, new_status, actor, activity_notes=None, reason=None):
    if new_status == STATUS_CONFIRMED:
        appointment.confirm()
    elif new_status == STATUS_COMPLETED:
        appointment.complete(activity_notes)
    elif new_status == STATUS_NO_SHOW:
        appointment.mark_no_show()
    elif new_status == STATUS_CANCELLED:
        appointment.cancel(reason or DEFAULT_PROVIDER_CANCELLATION, cancelled_by=actor.id)
    else:
        raise InvalidTransitionError(appointment.status, new_status)


def _notify_patient(appointment, provider, new_status):
    when = format_display(appointment.start_time)
    name = provider.healthcare_name
    if new_status == STATUS_CONFIRMED:
        kind, title = notification_types.APPOINTMENT_CONFIRMED, 'Appointment Confirmed'
        message = f"Your appointment at {name} on {when} has been confirmed!"
    elif new_status == STATUS_COMPLETED:
        kind, title = notification_types.APPOINTMENT_COMPLETED, 'Appointment Completed'
        message = f"Your appointment at {name} has been marked as completed. Thank you!"
        if appointment.activity_notes:
            message += f"\n\nActivity Summary: {appointment.activity_notes}"
    elif new_status == STATUS_NO_SHOW:
        kind, title = notification_types.APPOINTMENT_NO_SHOW, 'Missed Appointment'
        message = f"You were marked as a no-show for your appointment at {name} on {when}."
    else:
        kind, title = notification_types.APPOINTMENT_CANCELLED, 'Appointment Cancelled'
        message = f"Your appointment at {name} on {when} was cancelled: {appointment.cancellation_reason}"
    notify(appointment.user_id, kind, title, message, appointment_id=appointment.id, provider_id=provider.id)


def update_appointment_status(actor, appointment_id, new_status, activity_notes=None):
    """
    Provider-side status change; activity notes are kept only on completion.

    Cancelling goes through cancel_appointment() so the reason is recorded.
    """
    if new_status not in ALL_STATUSES:
        raise ValidationError(f'Unknown appointment status: {new_status}')
    if new_status == STATUS_CANCELLED:
        raise ValidationError('Use the cancel endpoint to cancel an appointment')

    provider = get_owned_provider(actor)
    appointment = get_appointment(appointment_id)
    if appointment.provider_id != provider.id:
        raise AuthorizationError('You can only update appointments for your practice')

    old_status = appointment.status
    _apply_status(appointment, new_status, actor, activity_notes=activity_notes)
    db.session.commit()
    current_app.logger.info(f"Appointment {appointment.id} changed from {old_status} to {new_status}")

    _notify_patient(appointment, provider, new_status)
    log_audit('update', 'appointment_status', entity_id=appointment.id, user_id=actor.id, details={
        'old_status': old_status,
        'new_status': new_status
    })
    return appointment


def cancel_appointment(actor, appointment_id, reason, notes=None):
    """Cancel on behalf of the patient who booked it or of the provider"""
    appointment = get_appointment(appointment_id)
    provider = appointment.provider

    by_provider = provider.is_owned_by(actor)
    by_patient = actor is not None and appointment.user_id == actor.id
    if not (by_provider or by_patient):
        raise AuthorizationError('You can only cancel your own appointments')

    old_status = appointment.status
    appointment.cancel(
        cancellation_text(reason, notes, by_provider),
        cancelled_by=actor.id,
        cancelled_at=local_now()
    )
    db.session.commit()
    current_app.logger.info(f"Appointment {appointment.id} cancelled by user {actor.id}")

    if by_provider:
        _notify_patient(appointment, provider, STATUS_CANCELLED)
    else:
        notify(
            provider.user_id,
            notification_types.APPOINTMENT_CANCELLED,
            'Appointment Cancelled',
            f"{appointment.patient_name} cancelled the appointment on {format_display(appointment.start_time)}",
            appointment_id=appointment.id,
            provider_id=provider.id
        )
    log_audit('cancel', 'appointment', entity_id=appointment.id, user_id=actor.id, details={
        'old_status': old_status,
        'reason': appointment.cancellation_reason
    })
    return appointment


def bulk_update_status(actor, appointment_ids, new_status, reason=None):
    """
    Apply one status change to several appointments of the actor's provider.

    Each appointment is checked on its own; ones that are missing, belong to
    another provider or cannot make the transition are reported in errors
    and left untouched.
    """
    if new_status not in ALL_STATUSES:
        raise ValidationError(f'Unknown appointment status: {new_status}')
    if not appointment_ids:
        raise ValidationError('No appointments selected')

    provider = get_owned_provider(actor)
    cancel_reason = cancellation_text(reason, None, by_provider=True) if reason else None

    updated, errors = [], []
    for appointment_id in appointment_ids:
        appointment = Appointment.query.filter_by(id=appointment_id, provider_id=provider.id).first()
        if appointment is None:
            errors.append(f'Appointment {appointment_id} was not found')
            continue
        try:
            _apply_status(appointment, new_status, actor, reason=cancel_reason)
        except InvalidTransitionError as e:
            errors.append(f'Appointment {appointment_id}: {e.message}')
            continue
        updated.append(appointment)

    db.session.commit()

    for appointment in updated:
        _notify_patient(appointment, provider, new_status)
    log_audit('bulk_update', 'appointment_status', user_id=actor.id, details={
        'new_status': new_status,
        'updated': [a.id for a in updated],
        'errors': errors
    })
    return {'updated': len(updated), 'failed': len(errors), 'errors': errors}
