"""
Availability queries and the booking transaction.

Nothing is held between an availability query and a booking: book_slot()
recomputes availability itself, then inserts under a provider row lock and
re-checks for overlaps before committing. The partial unique index on
appointments catches anything that slips past on databases without row
locks.
"""
from datetime import datetime, timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from himsog import db
from himsog.errors import NotFoundError, ValidationError, SlotUnavailableError
from himsog.models.appointment import Appointment, AppointmentService, ACTIVE_STATUSES
from himsog.models.notification import APPOINTMENT_CREATED, APPOINTMENT_RESCHEDULED
from himsog.models.service import Service
from himsog.scheduling.breaks import get_break_times
from himsog.scheduling.hours import is_operating_on
from himsog.scheduling.providers import get_provider, get_owned_provider, lock_provider
from himsog.scheduling.slots import (
    generate_slots, filter_availability, REASON_BOOKED, REASON_NOT_OPERATING
)
from himsog.scheduling.timeutils import (
    parse_date, parse_time, format_time, combine, day_of_week, format_display
)
from himsog.utils.audit import log_audit
from himsog.utils.notifications import notify


# Fresh appointment numbers tried when a generated one is already taken
NUMBER_ATTEMPTS = 3


def _is_number_collision(error):
    # Both SQLite and PostgreSQL name the offending column in the message
    return 'appointment_number' in str(error.orig)


def slot_duration_for(provider):
    return provider.slot_duration or current_app.config['DEFAULT_SLOT_DURATION']


def _appointments_on(provider_id, day, exclude_id=None):
    day_start = datetime.combine(day, datetime.min.time())
    day_end = day_start + timedelta(days=1)
    query = Appointment.query.filter(
        Appointment.provider_id == provider_id,
        Appointment.status.in_(ACTIVE_STATUSES),
        Appointment.start_time < day_end,
        Appointment.end_time > day_start
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.all()


def _find_conflict(provider_id, start_time, end_time, exclude_id=None):
    query = Appointment.query.filter(
        Appointment.provider_id == provider_id,
        Appointment.status.in_(ACTIVE_STATUSES),
        Appointment.start_time < end_time,
        Appointment.end_time > start_time
    )
    if exclude_id is not None:
        query = query.filter(Appointment.id != exclude_id)
    return query.first()


def _compute(provider, day, now, exclude_id=None):
    operating_day = is_operating_on(provider.id, day)
    if not operating_day.is_operating:
        return operating_day, [], []

    break_times = get_break_times(provider.id, day_of_week(day))
    duration = slot_duration_for(provider)
    slots = generate_slots(operating_day, duration, break_times)
    slots = filter_availability(slots, _appointments_on(provider.id, day, exclude_id), day, now, duration)
    return operating_day, break_times, slots


def get_available_slots(provider_id, day, now):
    """Availability payload for one provider and date"""
    provider = get_provider(provider_id)
    day = parse_date(day)
    operating_day, break_times, slots = _compute(provider, day, now)

    result = {
        'date': day.isoformat(),
        'dayOfWeek': day_of_week(day),
        'isOperating': operating_day.is_operating,
        'breakTimes': [
            {'name': b.name, 'startTime': b.start_time, 'endTime': b.end_time}
            for b in break_times
        ],
        'timeSlots': [slot.to_dict() for slot in slots]
    }
    if operating_day.is_operating:
        result['operatingHours'] = {
            'startTime': operating_day.start_time,
            'endTime': operating_day.end_time
        }
    return result


def _check_slot(provider, day, time, now, exclude_id=None):
    """Raise SlotUnavailableError unless time is a free slot start on day"""
    operating_day, _, slots = _compute(provider, day, now, exclude_id)
    slot = next((s for s in slots if s.time == time), None)
    if not operating_day.is_operating or slot is None:
        raise SlotUnavailableError(REASON_NOT_OPERATING)
    if not slot.available:
        raise SlotUnavailableError(slot.reason)


def _validate_patient(patient_info):
    name = (patient_info.get('patient_name') or '').strip()
    email = (patient_info.get('patient_email') or '').strip()
    if not name:
        raise ValidationError('Patient name is required')
    if not email:
        raise ValidationError('Patient email is required')
    return {
        'patient_name': name,
        'patient_email': email,
        'patient_phone': patient_info.get('patient_phone') or None,
        'notes': patient_info.get('notes') or None
    }


def _resolve_services(provider, service_ids):
    service_ids = set(service_ids or [])
    if not service_ids:
        raise ValidationError('Select at least one service')
    services = Service.query.filter(
        Service.provider_id == provider.id,
        Service.id.in_(service_ids),
        Service.is_active.is_(True)
    ).order_by(Service.id).all()
    if len(services) != len(service_ids):
        raise ValidationError('Some selected services are not available')
    return services


def book_slot(provider_id, user_id, day, time, service_ids, patient_info, now):
    """
    Reserve a slot and create a PENDING appointment.

    patient_info holds patient_name, patient_email and optional patient_phone
    and notes. Raises SlotUnavailableError with the slot's reason when the
    slot is no longer free.
    """
    provider = get_provider(provider_id)
    if not provider.is_verified():
        raise NotFoundError('Provider not found or not available for appointments')

    patient = _validate_patient(patient_info)
    services = _resolve_services(provider, service_ids)
    day = parse_date(day)
    time = format_time(parse_time(time))

    _check_slot(provider, day, time, now)

    start_time = combine(day, time)
    end_time = start_time + timedelta(minutes=slot_duration_for(provider))

    prices = [(s.id, s.price) for s in services]

    for attempt in range(1, NUMBER_ATTEMPTS + 1):
        try:
            lock_provider(provider.id)
            if _find_conflict(provider.id, start_time, end_time):
                raise SlotUnavailableError(REASON_BOOKED)

            appointment = Appointment(
                user_id=user_id,
                provider_id=provider.id,
                start_time=start_time,
                end_time=end_time,
                total_price=sum(price for _, price in prices),
                **patient
            )
            for service_id, price in prices:
                appointment.services.append(AppointmentService(service_id, price))
            db.session.add(appointment)
            db.session.flush()
            db.session.commit()
            break
        except IntegrityError as e:
            db.session.rollback()
            if not _is_number_collision(e):
                current_app.logger.warning(f"Concurrent booking rejected for provider {provider_id} at {start_time}")
                raise SlotUnavailableError(REASON_BOOKED)
            if attempt == NUMBER_ATTEMPTS:
                raise
            current_app.logger.warning(f"Appointment number collision, retrying ({attempt}/{NUMBER_ATTEMPTS})")
        except Exception:
            db.session.rollback()
            raise

    current_app.logger.info(f"Appointment {appointment.appointment_number} booked for provider {provider.id} at {start_time}")

    notify(
        user_id=provider.user_id,
        type=APPOINTMENT_CREATED,
        title='New Appointment Request',
        message=f"{appointment.patient_name} has requested an appointment on {format_display(start_time)}",
        appointment_id=appointment.id,
        provider_id=provider.id
    )
    log_audit('create', 'appointment', entity_id=appointment.id, user_id=user_id, details={
        'provider_id': provider.id,
        'appointment_time': start_time,
        'services': [s.id for s in services],
        'total_price': appointment.total_price
    })
    return appointment


def reschedule_appointment(actor, appointment_id, day, time, now):
    """Move an active appointment of the actor's provider to another free slot"""
    provider = get_owned_provider(actor)
    appointment = Appointment.query.filter_by(id=appointment_id, provider_id=provider.id).first()
    if appointment is None:
        raise NotFoundError('Appointment not found')
    if not appointment.is_active():
        raise ValidationError(f'Cannot reschedule a {appointment.status.lower()} appointment')

    day = parse_date(day)
    time = format_time(parse_time(time))
    _check_slot(provider, day, time, now, exclude_id=appointment.id)

    old_start = appointment.start_time
    start_time = combine(day, time)
    end_time = start_time + timedelta(minutes=slot_duration_for(provider))

    try:
        lock_provider(provider.id)
        if _find_conflict(provider.id, start_time, end_time, exclude_id=appointment.id):
            raise SlotUnavailableError(REASON_BOOKED)
        appointment.start_time = start_time
        appointment.end_time = end_time
        db.session.flush()
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        raise SlotUnavailableError(REASON_BOOKED)
    except Exception:
        db.session.rollback()
        raise

    notify(
        user_id=appointment.user_id,
        type=APPOINTMENT_RESCHEDULED,
        title='Appointment Rescheduled',
        message=f"Your appointment at {provider.healthcare_name} has been rescheduled to {format_display(start_time)}",
        appointment_id=appointment.id,
        provider_id=provider.id
    )
    log_audit('reschedule', 'appointment', entity_id=appointment.id, user_id=actor.id, details={
        'old_time': old_start,
        'new_time': start_time
    })
    return appointment
