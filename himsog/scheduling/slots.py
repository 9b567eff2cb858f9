"""
Slot generation and availability annotation.

Both functions are pure: they read only their arguments, so the same inputs
always give the same ordered slots.
"""
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Optional

from himsog.errors import ValidationError
from himsog.models.appointment import ACTIVE_STATUSES
from himsog.scheduling.timeutils import parse_time, format_time

REASON_BOOKED = 'Already booked'
REASON_BREAK = 'Break time'
REASON_PAST = 'Past time'
REASON_NOT_OPERATING = 'Not operating'


@dataclass(frozen=True)
class Slot:
    time: str
    available: bool = True
    reason: Optional[str] = None

    def to_dict(self):
        result = {'time': self.time, 'available': self.available}
        if self.reason:
            result['reason'] = self.reason
        return result


def _break_windows(break_times, open_minutes, close_minutes):
    """Break intervals clipped to the operating window; empty ones are dropped"""
    windows = []
    for break_time in break_times:
        start = max(parse_time(break_time.start_time), open_minutes)
        end = min(parse_time(break_time.end_time), close_minutes)
        if start < end:
            windows.append((start, end))
    return windows


def generate_slots(operating_hours, slot_duration, break_times=()):
    """
    Build the candidate slots for one operating window.

    operating_hours needs start_time and end_time ("HH:MM"). A slot starts at
    opening time and every slot_duration minutes after, as long as it ends
    no later than closing time. Slots touching any break are marked
    unavailable with reason "Break time".
    """
    if slot_duration is None or slot_duration <= 0:
        raise ValidationError('Slot duration must be a positive number of minutes')

    open_minutes = parse_time(operating_hours.start_time)
    close_minutes = parse_time(operating_hours.end_time)
    breaks = _break_windows(break_times, open_minutes, close_minutes)

    slots = []
    current = open_minutes
    while current + slot_duration <= close_minutes:
        slot_end = current + slot_duration
        in_break = any(current < end and slot_end > start for start, end in breaks)
        if in_break:
            slots.append(Slot(format_time(current), available=False, reason=REASON_BREAK))
        else:
            slots.append(Slot(format_time(current)))
        current += slot_duration
    return slots


def filter_availability(slots, appointments, day, now, slot_duration):
    """
    Annotate slots against existing appointments and the current time.

    Only PENDING and CONFIRMED appointments block a slot. When several
    reasons apply the reported one is, in order: "Already booked",
    "Break time", "Past time". now is the provider-local wall clock.
    """
    active = [a for a in appointments if a.status in ACTIVE_STATUSES]
    midnight = datetime.combine(day, datetime.min.time())

    annotated = []
    for slot in slots:
        slot_start = midnight + timedelta(minutes=parse_time(slot.time))
        slot_end = slot_start + timedelta(minutes=slot_duration)

        if any(a.start_time < slot_end and a.end_time > slot_start for a in active):
            annotated.append(replace(slot, available=False, reason=REASON_BOOKED))
        elif slot.reason == REASON_BREAK:
            annotated.append(slot)
        elif slot_start <= now:
            annotated.append(replace(slot, available=False, reason=REASON_PAST))
        else:
            annotated.append(replace(slot, available=True, reason=None))
    return annotated
