# apps/detentions/slots.py
"""
Maps a (term, week, weekday, slot number) coordinate onto the concrete date
and clock window of a detention session.

Terms start on a Saturday and weeks run Saturday to Friday, so a weekday
(0=Sunday .. 6=Saturday) sits ``(day_of_week + 1) % 7`` days into its week.
"""

from collections import namedtuple
from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.core.timeutils import parse_hhmm

SlotWindow = namedtuple('SlotWindow', ['date', 'start_time', 'end_time'])

DEFAULT_SLOT_WINDOWS = {
    'school_term': [('16:00', '18:30'), ('18:30', '21:00')],
    'holiday': [('09:00', '12:00'), ('12:30', '15:30')],
}


def slot_windows(term_type):
    """Configured ``(start, end)`` windows for ``term_type``, indexed by slot number."""
    windows = getattr(settings, 'DETENTION_SLOT_WINDOWS', None) or DEFAULT_SLOT_WINDOWS
    return [(parse_hhmm(start), parse_hhmm(end)) for start, end in windows.get(term_type, [])]


def day_offset(day_of_week):
    return (day_of_week + 1) % 7


def resolve(term, week, day_of_week, slot_number):
    """
    Return the ``SlotWindow`` for a coordinate.

    ``term`` is anything exposing ``term_type`` and ``start_date``.
    """
    if not isinstance(week, int) or week < 1:
        raise ValidationError(_('Week must be a positive whole number.'), code='invalid_week')
    if not isinstance(day_of_week, int) or not 0 <= day_of_week <= 6:
        raise ValidationError(_('Weekday must be between 0 (Sunday) and 6 (Saturday).'), code='invalid_day_of_week')

    windows = slot_windows(term.term_type)
    if not isinstance(slot_number, int) or not 0 <= slot_number < len(windows):
        raise ValidationError(
            _('Invalid slot number %(slot)s for a %(term_type)s term.'),
            code='invalid_slot_number',
            params={'slot': slot_number, 'term_type': term.term_type},
        )

    start_time, end_time = windows[slot_number]
    slot_date = term.start_date + timedelta(days=(week - 1) * 7 + day_offset(day_of_week))
    return SlotWindow(slot_date, start_time, end_time)
