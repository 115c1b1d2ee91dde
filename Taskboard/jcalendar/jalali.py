# PATH: /Taskboard/jcalendar/jalali.py
"""Jalali (Persian solar Hijri) calendar arithmetic.

Gregorian dates are handled as plain ``datetime.date`` values; Jalali dates
as the immutable :class:`JalaliDate` triple.  Both conversions run through a
single running day number:

* a Gregorian date becomes a day number using the cumulative month table
  (with the leap day counted once February is over);
* the day number is split into 33-year blocks of 12053 days, 4-year
  sub-cycles of 1461 days and 365-day years, which yields the Jalali year;
* the remaining day of year gives the month (six 31-day months, five 30-day
  months, then a 29 or 30 day Esfand) and the day.

The inverse builds the same day number from the Jalali side, so the two
directions agree with :func:`is_leap_year` and round-trip exactly.

Nothing here touches Django or the clock; callers pass dates in.
"""

from __future__ import annotations

import datetime
import re
from dataclasses import dataclass
from typing import Tuple, Union

from .exceptions import InvalidDateError

# Days elapsed before each month (Gregorian common year / Jalali year).
GREGORIAN_MONTH_OFFSETS = (0, 31, 59, 90, 120, 151, 181, 212, 243, 273, 304, 334)
JALALI_MONTH_OFFSETS = (0, 31, 62, 93, 124, 155, 186, 216, 246, 276, 306, 336)

# Remainders of ``year % 33`` that mark a leap year (30-day Esfand).
LEAP_YEAR_BREAKS = (1, 5, 9, 13, 17, 22, 26, 30)

_CYCLE_DAYS = 12053      # 33 years
_QUAD_DAYS = 1461        # 4 years, leading leap year
_YEAR_BASE = -1595       # Jalali year at day number 0
_GREGORIAN_SHIFT = 355666
# Difference between the running day number and ``date.toordinal()``.
_ORDINAL_SHIFT = 356032

MONTH_NAMES = [
    'فروردین', 'اردیبهشت', 'خرداد', 'تیر', 'مرداد', 'شهریور',
    'مهر', 'آبان', 'آذر', 'دی', 'بهمن', 'اسفند',
]
WEEKDAY_NAMES = ['شنبه', 'یکشنبه', 'دوشنبه', 'سه‌شنبه', 'چهارشنبه', 'پنج‌شنبه', 'جمعه']
WEEKDAY_SHORT_NAMES = ['ش', 'ی', 'د', 'س', 'چ', 'پ', 'ج']

_PERSIAN_DIGITS = '۰۱۲۳۴۵۶۷۸۹'
_ARABIC_DIGITS = '٠١٢٣٤٥٦٧٨٩'
_TO_PERSIAN = str.maketrans('0123456789', _PERSIAN_DIGITS)
_TO_ASCII = str.maketrans(_PERSIAN_DIGITS + _ARABIC_DIGITS, '0123456789' * 2)

_JALALI_TEXT_RE = re.compile(r"^(\d{1,4})[\-/](\d{1,2})[\-/](\d{1,2})$")


def is_leap_year(year: int) -> bool:
    """Return True when Jalali ``year`` has a 30-day twelfth month."""
    return year % 33 in LEAP_YEAR_BREAKS


def month_length(year: int, month: int) -> int:
    """Number of days in Jalali ``month`` of ``year``."""
    if not 1 <= month <= 12:
        raise InvalidDateError(f"Jalali month must be in 1..12, got {month!r}")
    if month <= 6:
        return 31
    if month <= 11:
        return 30
    return 30 if is_leap_year(year) else 29


@dataclass(frozen=True, order=True)
class JalaliDate:
    """Immutable Jalali calendar date.  Derived from a Gregorian date, never stored."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        for part in (self.year, self.month, self.day):
            if not isinstance(part, int) or isinstance(part, bool):
                raise InvalidDateError(f"Jalali date parts must be integers, got {part!r}")
        if self.year < 1:
            raise InvalidDateError(f"Jalali year must be >= 1, got {self.year!r}")
        max_day = month_length(self.year, self.month)
        if not 1 <= self.day <= max_day:
            raise InvalidDateError(
                f"day must be in 1..{max_day} for {self.year}/{self.month}, got {self.day!r}"
            )

    def isoformat(self, sep: str = '-') -> str:
        return f"{self.year:04d}{sep}{self.month:02d}{sep}{self.day:02d}"

    def to_gregorian(self) -> datetime.date:
        return to_gregorian(self)

    def weekday(self) -> int:
        """Weekday index with Saturday as 0."""
        return weekday_index(self.to_gregorian())

    @property
    def month_name(self) -> str:
        return month_name(self.month)

    def __str__(self) -> str:
        return format_jalali(self)


def _gregorian_day_number(g: datetime.date) -> int:
    gy2 = g.year + 1 if g.month > 2 else g.year
    return (
        _GREGORIAN_SHIFT
        + 365 * g.year
        + (gy2 + 3) // 4
        - (gy2 + 99) // 100
        + (gy2 + 399) // 400
        + g.day
        + GREGORIAN_MONTH_OFFSETS[g.month - 1]
    )


def _jalali_day_number(year: int, month: int, day: int) -> int:
    years = year - _YEAR_BASE
    cycles, rest = divmod(years, 33)
    return (
        cycles * _CYCLE_DAYS
        + 365 * rest
        + (rest + 3) // 4
        + JALALI_MONTH_OFFSETS[month - 1]
        + day - 1
    )


_EPOCH_DAY_NUMBER = _jalali_day_number(1, 1, 1)


def to_jalali(value: datetime.date) -> JalaliDate:
    """Convert a Gregorian ``date`` (or the date part of a ``datetime``) to Jalali.

    Raises :class:`InvalidDateError` for dates before 1 Farvardin 1.
    """
    if isinstance(value, datetime.datetime):
        value = value.date()
    if not isinstance(value, datetime.date):
        raise InvalidDateError(f"expected a date, got {type(value).__name__}")

    days = _gregorian_day_number(value)
    if days < _EPOCH_DAY_NUMBER:
        raise InvalidDateError(f"{value.isoformat()} is before the Jalali epoch")

    jy = _YEAR_BASE + 33 * (days // _CYCLE_DAYS)
    days %= _CYCLE_DAYS
    jy += 4 * (days // _QUAD_DAYS)
    days %= _QUAD_DAYS
    if days > 365:
        jy += (days - 1) // 365
        days = (days - 1) % 365

    if days < 186:
        jm, jd = 1 + days // 31, 1 + days % 31
    else:
        jm, jd = 7 + (days - 186) // 30, 1 + (days - 186) % 30
    return JalaliDate(jy, jm, jd)


def to_gregorian(value: Union[JalaliDate, Tuple[int, int, int]]) -> datetime.date:
    """Convert a Jalali date (or ``(year, month, day)`` triple) to a Gregorian ``date``."""
    if not isinstance(value, JalaliDate):
        try:
            year, month, day = (int(part) for part in value)
        except (TypeError, ValueError) as exc:
            raise InvalidDateError(f"expected a Jalali (year, month, day), got {value!r}") from exc
        value = JalaliDate(year, month, day)

    ordinal = _jalali_day_number(value.year, value.month, value.day) - _ORDINAL_SHIFT
    try:
        return datetime.date.fromordinal(ordinal)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError(f"{value.isoformat()} is outside the Gregorian date range") from exc


def weekday_index(g: datetime.date) -> int:
    """Column of ``g`` in a Saturday-first week (Saturday=0 ... Friday=6)."""
    sunday_based = g.isoweekday() % 7
    return 0 if sunday_based == 6 else sunday_based + 1


def month_name(month: int) -> str:
    if 1 <= month <= 12:
        return MONTH_NAMES[month - 1]
    return ''


def weekday_name(index: int) -> str:
    if 0 <= index <= 6:
        return WEEKDAY_NAMES[index]
    return ''


def weekday_short_name(index: int) -> str:
    if 0 <= index <= 6:
        return WEEKDAY_SHORT_NAMES[index]
    return ''


def jalali_month_bounds(year: int, month: int) -> Tuple[datetime.date, datetime.date]:
    """First and last Gregorian dates of a Jalali month."""
    first = to_gregorian(JalaliDate(year, month, 1))
    last = to_gregorian(JalaliDate(year, month, month_length(year, month)))
    return first, last


def to_persian_digits(text: str) -> str:
    return str(text).translate(_TO_PERSIAN)


def to_ascii_digits(text: str) -> str:
    """Replace Persian and Arabic-Indic digits with ASCII ones."""
    return str(text).translate(_TO_ASCII)


def format_jalali(value: JalaliDate, sep: str = '/') -> str:
    return value.isoformat(sep)


def format_jalali_full(g: datetime.date) -> str:
    """Weekday name followed by the Jalali date in Persian digits, e.g. ``چهارشنبه ۱۴۰۳/۰۱/۰۱``."""
    j = to_jalali(g)
    return f"{weekday_name(weekday_index(g))} {to_persian_digits(format_jalali(j))}"


def parse_jalali(text: str) -> JalaliDate:
    """Parse ``1403/01/01`` or ``1403-1-1`` (ASCII or Persian digits)."""
    m = _JALALI_TEXT_RE.match(to_ascii_digits(text or '').strip())
    if not m:
        raise InvalidDateError(f"not a Jalali date: {text!r}")
    return JalaliDate(int(m.group(1)), int(m.group(2)), int(m.group(3)))


__all__ = [
    'JalaliDate',
    'LEAP_YEAR_BREAKS',
    'MONTH_NAMES',
    'WEEKDAY_NAMES',
    'WEEKDAY_SHORT_NAMES',
    'format_jalali',
    'format_jalali_full',
    'is_leap_year',
    'jalali_month_bounds',
    'month_length',
    'month_name',
    'parse_jalali',
    'to_ascii_digits',
    'to_gregorian',
    'to_jalali',
    'to_persian_digits',
    'weekday_index',
    'weekday_name',
    'weekday_short_name',
]
