# PATH: /Taskboard/jcalendar/grid.py
"""Month, week and day grids populated with tasks.

The month grid is laid out along Gregorian month boundaries with a
Saturday-first week, and each cell carries its Jalali label for display.
It always has 6 rows so the calendar height stays constant across months.

Everything here is a pure function of its arguments: ``today`` is passed
in explicitly and the visibility predicate belongs to the caller.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .jalali import JalaliDate, format_jalali, month_name, to_jalali, weekday_index

logger = logging.getLogger(__name__)

GRID_WEEKS = 6
DAYS_PER_WEEK = 7
GRID_DAYS = GRID_WEEKS * DAYS_PER_WEEK


@dataclass(frozen=True)
class TaskRef:
    """Read-only projection of a task, as handed over by the data layer."""

    id: str
    title: str
    date: datetime.date
    start_date: Optional[datetime.date] = None
    end_date: Optional[datetime.date] = None
    project_id: Optional[str] = None
    is_private: bool = False
    owner_id: Optional[str] = None
    start_time: Optional[datetime.time] = None
    priority: str = 'medium'

    def as_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'title': self.title,
            'date': self.date.isoformat(),
            'start_date': self.start_date.isoformat() if self.start_date else None,
            'end_date': self.end_date.isoformat() if self.end_date else None,
            'project_id': self.project_id,
            'is_private': self.is_private,
            'owner_id': self.owner_id,
            'start_time': self.start_time.strftime('%H:%M') if self.start_time else None,
            'priority': self.priority,
        }


Predicate = Callable[[TaskRef], bool]


@dataclass(frozen=True)
class CalendarDay:
    date: datetime.date
    jalali: JalaliDate
    is_current_month: bool
    is_today: bool
    tasks: Tuple[TaskRef, ...] = ()

    @property
    def weekday_index(self) -> int:
        return weekday_index(self.date)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'date': self.date.isoformat(),
            'jalali': {
                'year': self.jalali.year,
                'month': self.jalali.month,
                'day': self.jalali.day,
                'label': format_jalali(self.jalali),
            },
            'weekday': self.weekday_index,
            'is_current_month': self.is_current_month,
            'is_today': self.is_today,
            'tasks': [t.as_dict() for t in self.tasks],
        }


@dataclass(frozen=True)
class MonthGrid:
    """Exactly 42 days, starting on the Saturday on or before the 1st."""

    reference: datetime.date
    today: datetime.date
    days: Tuple[CalendarDay, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[CalendarDay]:
        return iter(self.days)

    def __getitem__(self, index: int) -> CalendarDay:
        return self.days[index]

    def weeks(self) -> List[Tuple[CalendarDay, ...]]:
        return [self.days[i:i + DAYS_PER_WEEK] for i in range(0, len(self.days), DAYS_PER_WEEK)]

    @property
    def title(self) -> str:
        """Jalali month and year of the reference's 1st, e.g. ``فروردین 1403``."""
        j = to_jalali(self.reference)
        return f"{month_name(j.month)} {j.year}"

    def as_dict(self) -> Dict[str, Any]:
        return {
            'reference': self.reference.isoformat(),
            'today': self.today.isoformat(),
            'title': self.title,
            'range': {'from': self.days[0].date.isoformat(), 'to': self.days[-1].date.isoformat()},
            'days': [d.as_dict() for d in self.days],
        }


@dataclass(frozen=True)
class WeekGrid:
    start: datetime.date
    today: datetime.date
    days: Tuple[CalendarDay, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.days)

    def __iter__(self) -> Iterator[CalendarDay]:
        return iter(self.days)

    def as_dict(self) -> Dict[str, Any]:
        return {
            'start': self.start.isoformat(),
            'today': self.today.isoformat(),
            'days': [d.as_dict() for d in self.days],
        }


def add_months(base: datetime.date, offset: int) -> datetime.date:
    """Return the first day of the month shifted by ``offset`` months."""
    total_months = (base.year * 12 + base.month - 1) + offset
    year = total_months // 12
    month = total_months % 12 + 1
    return datetime.date(year, month, 1)


def week_start(day: datetime.date) -> datetime.date:
    """Saturday on or before ``day``."""
    return day - datetime.timedelta(days=weekday_index(day))


def month_range(reference: datetime.date) -> Tuple[datetime.date, datetime.date]:
    """First and last Gregorian dates shown by the month grid of ``reference``.

    Used by the data layer to bound its date query to what the grid displays.
    """
    start = week_start(reference.replace(day=1))
    return start, start + datetime.timedelta(days=GRID_DAYS - 1)


def _accept_all(task: TaskRef) -> bool:
    return True


def _task_span(task: TaskRef) -> Optional[Tuple[datetime.date, Optional[datetime.date], Optional[datetime.date]]]:
    """Resolve ``(date, range_start, range_end)`` for a task, or None if it cannot be placed."""
    primary = task.date
    if not isinstance(primary, datetime.date):
        logger.warning("Skipping task %r: primary date %r is not a date", task.id, primary)
        return None
    if isinstance(primary, datetime.datetime):
        primary = primary.date()

    start, end = task.start_date, task.end_date
    if not (isinstance(start, datetime.date) and isinstance(end, datetime.date)):
        return primary, None, None
    if isinstance(start, datetime.datetime):
        start = start.date()
    if isinstance(end, datetime.datetime):
        end = end.date()
    if end < start:
        logger.debug("Task %r ends (%s) before it starts (%s); using a single day", task.id, end, start)
        end = start
    return primary, start, end


def _visible_spans(tasks: Iterable[TaskRef], is_visible: Optional[Predicate]):
    predicate = is_visible or _accept_all
    spans = []
    for task in tasks:
        try:
            visible = predicate(task)
        except Exception:
            logger.exception("Visibility check failed for task %r; hiding it", getattr(task, 'id', None))
            continue
        if not visible:
            continue
        span = _task_span(task)
        if span is not None:
            spans.append((task, span))
    return spans


def _tasks_on(day: datetime.date, spans) -> Tuple[TaskRef, ...]:
    out = []
    for task, (primary, start, end) in spans:
        if primary == day or (start is not None and start <= day <= end):
            out.append(task)
    return tuple(out)


def _build_days(
    start: datetime.date,
    count: int,
    spans,
    today: datetime.date,
    in_month: Callable[[datetime.date], bool],
) -> Tuple[CalendarDay, ...]:
    days = []
    for i in range(count):
        day = start + datetime.timedelta(days=i)
        days.append(CalendarDay(
            date=day,
            jalali=to_jalali(day),
            is_current_month=in_month(day),
            is_today=(day == today),
            tasks=_tasks_on(day, spans),
        ))
    return tuple(days)


def build_month_grid(
    reference_date: datetime.date,
    tasks: Sequence[TaskRef],
    is_visible: Optional[Predicate] = None,
    *,
    today: datetime.date,
) -> MonthGrid:
    """Build the 6×7 grid for the Gregorian month containing ``reference_date``.

    A task is placed on a day when ``is_visible(task)`` is true and either its
    primary date is that day or the day lies inside its inclusive
    ``[start_date, end_date]`` range.  Tasks keep their input order within a
    day, so callers sort beforehand (see ``normalize.sort_tasks``).
    """
    if isinstance(reference_date, datetime.datetime):
        reference_date = reference_date.date()
    if isinstance(today, datetime.datetime):
        today = today.date()
    first_of_month = reference_date.replace(day=1)
    grid_start, _ = month_range(first_of_month)
    spans = _visible_spans(tasks, is_visible)

    def in_month(day: datetime.date) -> bool:
        return day.year == first_of_month.year and day.month == first_of_month.month

    days = _build_days(grid_start, GRID_DAYS, spans, today, in_month)
    return MonthGrid(reference=first_of_month, today=today, days=days)


def build_week(
    reference_date: datetime.date,
    tasks: Sequence[TaskRef],
    is_visible: Optional[Predicate] = None,
    *,
    today: datetime.date,
) -> WeekGrid:
    """Seven days from the Saturday on or before ``reference_date``.

    ``is_current_month`` is relative to the reference date's month.
    """
    if isinstance(reference_date, datetime.datetime):
        reference_date = reference_date.date()
    if isinstance(today, datetime.datetime):
        today = today.date()
    start = week_start(reference_date)
    spans = _visible_spans(tasks, is_visible)

    def in_month(day: datetime.date) -> bool:
        return day.year == reference_date.year and day.month == reference_date.month

    days = _build_days(start, DAYS_PER_WEEK, spans, today, in_month)
    return WeekGrid(start=start, today=today, days=days)


def tasks_for_day(
    day: datetime.date,
    tasks: Sequence[TaskRef],
    is_visible: Optional[Predicate] = None,
) -> List[TaskRef]:
    """Visible tasks occupying ``day``, in input order."""
    return list(_tasks_on(day, _visible_spans(tasks, is_visible)))
