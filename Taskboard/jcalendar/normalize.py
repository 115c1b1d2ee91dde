# PATH: /Taskboard/jcalendar/normalize.py
"""Normalize raw task rows into :class:`~jcalendar.grid.TaskRef`.

Rows come from the task source with loosely named fields (``date``,
``start_date``/``startDate``, ``end_date``/``deadline`` ...).  They are
mapped onto one shape here so the grid builder never branches on field
names.

Start-date default: when a row has no usable start date the task has no
range at all; it is *not* defaulted to the primary date or the day before
it.  A range exists only when both ends parse.
"""

from __future__ import annotations

import datetime
import logging
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from django.utils import timezone
from django.utils.dateparse import parse_datetime

from .exceptions import InvalidDateError
from .grid import TaskRef
from .jalali import parse_jalali, to_ascii_digits

logger = logging.getLogger(__name__)

# Years below this are read as Jalali (e.g. 1403/01/01), above as Gregorian.
JALALI_YEAR_CEILING = 1700

_ISO_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[T ].*)?$")
_SLASHED_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_TIME_RE = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?")

_ID_KEYS = ('id', 'uuid')
_TITLE_KEYS = ('title', 'description')
_START_KEYS = ('start_date', 'startDate')
_END_KEYS = ('end_date', 'endDate', 'deadline')
_PROJECT_KEYS = ('project_id', 'projectId')
_PRIVATE_KEYS = ('is_private', 'isPrivate')
_OWNER_KEYS = ('member_id', 'owner_id', 'memberId')


def _first(row: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        value = row.get(key)
        if value not in (None, ''):
            return value
    return None


def _local_date(value: datetime.datetime) -> datetime.date:
    # Aware timestamps belong to the day they fall on in TIME_ZONE.
    if timezone.is_aware(value):
        value = timezone.localtime(value)
    return value.date()


def parse_date(value: Any) -> datetime.date:
    """Coerce a stored date value into a Gregorian ``date``.

    Accepts ``date``/``datetime`` objects, ISO strings (``2024-03-20`` or
    ``2024-03-20T09:00:00Z``; aware values are read in the
    project time zone) and Jalali strings (``1403/01/01``, Persian
    digits allowed).  Anything else raises :class:`InvalidDateError`.
    """
    if isinstance(value, datetime.datetime):
        return _local_date(value)
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str):
        raise InvalidDateError(f"unsupported date value: {value!r}")

    text = to_ascii_digits(value).strip()
    iso = _ISO_DATE_RE.match(text)
    if iso and len(text) > 10 and int(iso.group(1)) >= JALALI_YEAR_CEILING:
        try:
            stamp = parse_datetime(text)
        except ValueError:
            stamp = None
        if stamp is not None:
            return _local_date(stamp)
    m = iso or _SLASHED_RE.match(text)
    if not m:
        raise InvalidDateError(f"unparseable date: {value!r}")
    year, month, day = (int(g) for g in m.groups())
    if year < JALALI_YEAR_CEILING:
        return parse_jalali(f"{year}/{month}/{day}").to_gregorian()
    try:
        return datetime.date(year, month, day)
    except ValueError as exc:
        raise InvalidDateError(f"invalid date: {value!r}") from exc


def parse_time(value: Any) -> Optional[datetime.time]:
    """``HH:MM[:SS]`` or a ``time`` object; anything else gives None."""
    if isinstance(value, datetime.time):
        return value
    if not isinstance(value, str):
        return None
    m = _TIME_RE.match(to_ascii_digits(value).strip())
    if not m:
        return None
    try:
        return datetime.time(int(m.group(1)), int(m.group(2)), int(m.group(3) or 0))
    except ValueError:
        return None


def _optional_date(row: Mapping[str, Any], keys: Sequence[str], task_id: str) -> Optional[datetime.date]:
    raw = _first(row, keys)
    if raw is None:
        return None
    try:
        return parse_date(raw)
    except InvalidDateError:
        logger.warning("Task %r: ignoring invalid %s value %r", task_id, keys[0], raw)
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {'1', 'true', 'yes', 'on'}
    return bool(value)


def normalize_task(row: Mapping[str, Any]) -> Optional[TaskRef]:
    """Map one raw row onto a TaskRef, or None when it cannot be placed on a calendar."""
    task_id = _first(row, _ID_KEYS)
    if task_id is None:
        logger.warning("Skipping task row without an id: %r", dict(row))
        return None
    task_id = str(task_id)

    parsed_start = _optional_date(row, _START_KEYS, task_id)
    parsed_end = _optional_date(row, _END_KEYS, task_id)
    start = end = None
    if parsed_start is not None and parsed_end is not None:
        start, end = parsed_start, parsed_end
        if end < start:
            logger.debug("Task %r: end %s precedes start %s; collapsing to one day", task_id, end, start)
            end = start

    raw_date = row.get('date')
    if raw_date in (None, ''):
        primary = parsed_start
        if primary is None:
            logger.warning("Skipping task %r: no date", task_id)
            return None
    else:
        try:
            primary = parse_date(raw_date)
        except InvalidDateError:
            logger.warning("Skipping task %r: invalid date %r", task_id, raw_date)
            return None

    project_id = _first(row, _PROJECT_KEYS)
    owner_id = _first(row, _OWNER_KEYS)
    return TaskRef(
        id=task_id,
        title=str(_first(row, _TITLE_KEYS) or ''),
        date=primary,
        start_date=start,
        end_date=end,
        project_id=None if project_id is None else str(project_id),
        is_private=_as_bool(_first(row, _PRIVATE_KEYS) or False),
        owner_id=None if owner_id is None else str(owner_id),
        start_time=parse_time(row.get('start_time')),
        priority=str(row.get('priority') or 'medium'),
    )


def normalize_tasks(rows: Iterable[Mapping[str, Any]]) -> List[TaskRef]:
    out: List[TaskRef] = []
    for row in rows or []:
        if not isinstance(row, Mapping):
            logger.warning("Skipping non-mapping task row: %r", row)
            continue
        task = normalize_task(row)
        if task is not None:
            out.append(task)
    return out


def sort_tasks(tasks: Iterable[TaskRef]) -> List[TaskRef]:
    """Order by time of day (untimed first), keeping creation order for ties."""
    return sorted(tasks, key=lambda t: (t.start_time is not None, t.start_time or datetime.time.min))
