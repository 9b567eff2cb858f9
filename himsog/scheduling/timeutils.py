import re
from datetime import date, datetime, timedelta, timezone

from flask import current_app

from himsog.errors import ValidationError

TIME_PATTERN = r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$'
_TIME_RE = re.compile(TIME_PATTERN)


def parse_time(value):
    """Minutes since midnight for an "HH:MM" string"""
    if not isinstance(value, str) or not _TIME_RE.match(value):
        raise ValidationError('Invalid time format. Use HH:MM format')
    hours, minutes = value.split(':')
    return int(hours) * 60 + int(minutes)


def format_time(minutes):
    return f'{minutes // 60:02d}:{minutes % 60:02d}'


def normalize_time(value):
    """Zero-padded "HH:MM" form, so stored times sort correctly as strings"""
    return format_time(parse_time(value))


def parse_date(value):
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(value, '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError('Invalid date. Use YYYY-MM-DD format')


def day_of_week(day):
    """0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % 7


def combine(day, hhmm):
    return datetime.combine(day, datetime.min.time()) + timedelta(minutes=parse_time(hhmm))


def local_now(offset_hours=None):
    """Current provider-local wall clock time as a naive datetime"""
    if offset_hours is None:
        offset_hours = current_app.config['PROVIDER_UTC_OFFSET_HOURS']
    return datetime.now(timezone(timedelta(hours=offset_hours))).replace(tzinfo=None)


def format_display(moment):
    # Manual formatting, %-I is not portable
    hour = moment.strftime('%I').lstrip('0')
    return f"{moment.strftime('%b %d, %Y')} at {hour}:{moment.strftime('%M %p')}"
