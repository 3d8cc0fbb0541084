# apps/core/timeutils.py
"""
Helpers for "HH:MM" clock times and half-open minute ranges.

Every weekly interval in the timetable is compared as ``[start, start + duration)``
in minutes since midnight, so two classes that merely touch (one ends at 17:00,
the next starts at 17:00) never overlap.
"""

import re
from collections import namedtuple
from datetime import time

from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

HHMM_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$')

MinuteRange = namedtuple('MinuteRange', ['start', 'end'])


def parse_hhmm(value):
    """Return a ``datetime.time`` for an "HH:MM" string (or pass a time through)."""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    if not isinstance(value, str):
        raise ValidationError(_('Time must be given as HH:MM.'), code='invalid_time')
    match = HHMM_PATTERN.match(value.strip())
    if not match:
        raise ValidationError(
            _('"%(value)s" is not a valid HH:MM time.'),
            code='invalid_time',
            params={'value': value},
        )
    return time(int(match.group(1)), int(match.group(2)))


def to_minutes(value):
    parsed = parse_hhmm(value)
    return parsed.hour * 60 + parsed.minute


def format_hhmm(value):
    return parse_hhmm(value).strftime('%H:%M')


def format_12h(value):
    """Display form used in generated class names, e.g. "4:30pm"."""
    parsed = parse_hhmm(value)
    period = 'pm' if parsed.hour >= 12 else 'am'
    hours = parsed.hour % 12 or 12
    return f"{hours}:{parsed.minute:02d}{period}"


def minute_range(start, duration_minutes):
    start_minutes = to_minutes(start)
    return MinuteRange(start_minutes, start_minutes + int(duration_minutes))


def overlaps(first, second):
    """Half-open overlap test between two ``MinuteRange`` values."""
    return first.start < second.end and first.end > second.start
