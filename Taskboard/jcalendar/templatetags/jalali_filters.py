"""
Jalali date filters.

Django's built-in ``date`` filter always formats in the Gregorian calendar,
even with ``LANGUAGE_CODE = 'fa'``.  Load this module to show stored
Gregorian dates as Jalali ones:

    {% load jalali_filters %}
    {{ task.date|to_jalali }}
    {{ task.date|to_jalali:"%A %d %B %Y"|persian_digits }}

The conversion itself is done by :mod:`jcalendar.jalali`; ``jdatetime`` is
only used for its ``strftime`` directives (Persian month and weekday names).
"""

from __future__ import annotations

import datetime

import jdatetime
from django import template
from django.utils import timezone

from jcalendar.exceptions import InvalidDateError
from jcalendar.jalali import month_name, to_jalali, to_persian_digits

register = template.Library()


@register.filter(name="to_jalali")
def to_jalali_filter(value: object, fmt: str = "%Y/%m/%d") -> str:
    """Format a Gregorian ``date`` or ``datetime`` as a Jalali date string.

    :param value: A ``datetime.date`` or ``datetime.datetime`` instance.
                  Empty values give ``''``; anything else that is not a
                  date is returned as ``str(value)``.
    :param fmt:   ``jdatetime`` strftime pattern, ``%Y/%m/%d`` by default.
    """
    if not value:
        return ""
    if isinstance(value, datetime.datetime):
        # Aware datetimes are shown in the project time zone (Asia/Tehran),
        # otherwise late-evening UTC values land on the previous day.
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        value = value.date()
    if not isinstance(value, datetime.date):
        return str(value)
    try:
        j = to_jalali(value)
        return jdatetime.date(j.year, j.month, j.day).strftime(fmt)
    except (InvalidDateError, ValueError):
        return str(value)


@register.filter(name="persian_digits")
def persian_digits(value: object) -> str:
    if value is None:
        return ""
    return to_persian_digits(str(value))


@register.filter(name="jalali_month_name")
def jalali_month_name(value: object) -> str:
    try:
        return month_name(int(value))
    except (TypeError, ValueError):
        return ""
