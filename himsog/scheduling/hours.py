from collections import namedtuple

from flask import current_app

from himsog import db
from himsog.errors import ValidationError
from himsog.models.availability import OperatingHours
from himsog.scheduling.providers import get_provider, get_owned_provider
from himsog.scheduling.timeutils import parse_time, parse_date, day_of_week, normalize_time
from himsog.utils.audit import audit_log_decorator

OperatingDay = namedtuple('OperatingDay', ['is_operating', 'start_time', 'end_time'])

CLOSED = OperatingDay(False, None, None)


def get_operating_days(provider_id):
    """Weekdays (0 = Sunday) on which the provider is open"""
    get_provider(provider_id)
    rows = OperatingHours.query.filter_by(provider_id=provider_id).all()
    return {row.day_of_week for row in rows if row.is_open()}


def is_operating_on(provider_id, day):
    get_provider(provider_id)
    day = parse_date(day)
    row = OperatingHours.query.filter_by(provider_id=provider_id, day_of_week=day_of_week(day)).first()

    # No row for the weekday means closed
    if row is None or not row.is_open():
        return CLOSED
    return OperatingDay(True, row.start_time, row.end_time)


def is_valid_booking_date(provider_id, day, today):
    day = parse_date(day)
    if day < today:
        return False
    return is_operating_on(provider_id, day).is_operating


def _validate_entry(entry):
    try:
        day = int(entry['day_of_week'])
    except (KeyError, TypeError, ValueError):
        raise ValidationError('Each entry needs a day_of_week between 0 and 6')
    if day < 0 or day > 6:
        raise ValidationError('Day of week must be between 0 (Sunday) and 6 (Saturday)')

    is_closed = bool(entry.get('is_closed', False))
    start_time = entry.get('start_time') or None
    end_time = entry.get('end_time') or None
    if is_closed:
        return day, None, None, True

    if not start_time or not end_time:
        raise ValidationError('Open days need both a start and an end time')
    if parse_time(end_time) <= parse_time(start_time):
        raise ValidationError('End time must be after start time')
    return day, normalize_time(start_time), normalize_time(end_time), False


@audit_log_decorator(
    action='update',
    entity_type='operating_hours',
    get_details=lambda result, *args, **kwargs: {'hours': [row.to_dict() for row in result]}
)
def set_operating_hours(actor, entries):
    """Create or update the weekly schedule of the actor's provider in one commit"""
    provider = get_owned_provider(actor)

    validated = [_validate_entry(entry) for entry in entries]
    days = [v[0] for v in validated]
    if len(days) != len(set(days)):
        raise ValidationError('Each day of the week may appear only once')

    existing = {row.day_of_week: row for row in OperatingHours.query.filter_by(provider_id=provider.id)}
    for day, start_time, end_time, is_closed in validated:
        row = existing.get(day)
        if row is None:
            row = OperatingHours(provider.id, day)
            db.session.add(row)
            existing[day] = row
        row.start_time = start_time
        row.end_time = end_time
        row.is_closed = is_closed

    db.session.commit()
    current_app.logger.info(f"Operating hours updated for provider {provider.id}")
    return sorted(existing.values(), key=lambda row: row.day_of_week)
