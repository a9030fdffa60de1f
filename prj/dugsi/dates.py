"""
dugsi/dates.py
──────────────
Named registration periods ("Today", "This Week", ...) as half-open
[start, end) instant ranges.  Weeks start on Sunday.

Day boundaries are local midnights in settings.TIME_ZONE.
"""

from datetime import datetime, time, timedelta

from django.conf import settings
from django.utils import timezone

from .types import DateFilter


def _local_now(now=None):
    if now is None:
        return timezone.localtime() if settings.USE_TZ else datetime.now()
    if timezone.is_aware(now):
        return timezone.localtime(now)
    return now


def _midnight(day, tzinfo):
    if tzinfo is None:
        return datetime.combine(day, time.min)
    return timezone.make_aware(datetime.combine(day, time.min), tzinfo)


def days_since_sunday(day):
    """0 for Sunday, 1 for Monday ... 6 for Saturday."""
    return (day.weekday() + 1) % 7


def get_date_range(date_filter, now=None):
    """
    Return (start, end) for *date_filter*, or None for 'all' and for values
    outside DateFilter.

        today      [midnight today, midnight tomorrow)
        yesterday  [midnight yesterday, midnight today)
        thisWeek   [last Sunday's midnight, 24h from now)
        lastWeek   [the Sunday before that, last Sunday's midnight)
    """
    now = _local_now(now)
    tz = now.tzinfo
    today = now.date()

    if date_filter == DateFilter.TODAY:
        return _midnight(today, tz), _midnight(today + timedelta(days=1), tz)

    if date_filter == DateFilter.YESTERDAY:
        return _midnight(today - timedelta(days=1), tz), _midnight(today, tz)

    week_start = today - timedelta(days=days_since_sunday(today))

    if date_filter == DateFilter.THIS_WEEK:
        return _midnight(week_start, tz), now + timedelta(days=1)

    if date_filter == DateFilter.LAST_WEEK:
        return _midnight(week_start - timedelta(days=7), tz), _midnight(week_start, tz)

    return None


def _align(moment, reference):
    """
    Give *moment* the same awareness as *reference*.  Naive values are read
    as settings.TIME_ZONE wall-clock time.
    """
    if reference is None or not isinstance(reference, datetime):
        return moment
    if timezone.is_aware(reference) and timezone.is_naive(moment):
        return timezone.make_aware(moment)
    if timezone.is_naive(reference) and timezone.is_aware(moment):
        return timezone.make_naive(moment)
    return moment


def in_range(moment, date_range):
    """Half-open membership test; a missing range matches everything."""
    if date_range is None:
        return True
    start, end = date_range
    moment = _align(moment, start)
    return start <= moment < end


def in_picked_range(moment, date_range):
    """
    Inclusive test for a calendar-picked (start, end) pair.  Plain dates cover
    the whole day; either bound may be None for an open end.
    """
    if date_range is None:
        return True
    start, end = date_range
    if start is not None and not isinstance(start, datetime):
        start = _midnight(start, moment.tzinfo)
    if end is not None and not isinstance(end, datetime):
        end = _midnight(end + timedelta(days=1), moment.tzinfo) - timedelta(microseconds=1)
    if start is not None and _align(moment, start) < start:
        return False
    if end is not None and _align(moment, end) > end:
        return False
    return True
