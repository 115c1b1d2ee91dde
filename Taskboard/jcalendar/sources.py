"""Task sources feeding the calendar views.

A task source is any callable ``(member_id, date_from, date_to)`` returning
an iterable of raw task rows (mappings).  The views resolve it from
``settings.JCALENDAR_TASK_SOURCE`` so the storage layer stays outside this
app.
"""

from __future__ import annotations

import datetime
import json
import logging
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

from .exceptions import InvalidDateError
from .normalize import _END_KEYS, _OWNER_KEYS, _START_KEYS, _first, parse_date

logger = logging.getLogger(__name__)

TaskSource = Callable[[Optional[str], datetime.date, datetime.date], Iterable[Mapping[str, Any]]]

DEFAULT_TASK_SOURCE = 'jcalendar.sources.no_tasks'


def get_task_source() -> TaskSource:
    path = getattr(settings, 'JCALENDAR_TASK_SOURCE', None) or DEFAULT_TASK_SOURCE
    try:
        source = import_string(path)
    except ImportError as exc:
        raise ImproperlyConfigured(f"JCALENDAR_TASK_SOURCE {path!r} cannot be imported") from exc
    if not callable(source):
        raise ImproperlyConfigured(f"JCALENDAR_TASK_SOURCE {path!r} is not callable")
    return source


def no_tasks(member_id, date_from, date_to) -> List[Mapping[str, Any]]:
    return []


def _row_dates(row: Mapping[str, Any]) -> List[datetime.date]:
    out = []
    for keys in (('date',), _START_KEYS, _END_KEYS):
        value = _first(row, keys)
        if value is None:
            continue
        try:
            out.append(parse_date(value))
        except InvalidDateError:
            continue
    return out


def json_file_source(member_id, date_from, date_to) -> List[Mapping[str, Any]]:
    """Rows from the JSON list at ``settings.JCALENDAR_TASKS_FILE``.

    A row is kept when any of its dates falls in the window, or its
    start..end span overlaps it; the field aliases are the ones
    :mod:`jcalendar.normalize` accepts (``startDate``, ``deadline``,
    ``memberId`` ...).  Rows whose dates do not parse are passed through so
    normalization can report them.
    """
    path = getattr(settings, 'JCALENDAR_TASKS_FILE', None)
    if not path:
        raise ImproperlyConfigured("JCALENDAR_TASKS_FILE is not set")
    with Path(path).open('r', encoding='utf-8') as f:
        rows = json.load(f)
    if not isinstance(rows, list):
        raise ImproperlyConfigured(f"{path} must contain a JSON list of task rows")

    kept = []
    for row in rows:
        if not isinstance(row, Mapping):
            continue
        if member_id is not None and str(_first(row, _OWNER_KEYS)) != str(member_id):
            continue
        dates = _row_dates(row)
        if not dates:
            kept.append(row)
            continue
        if min(dates) <= date_to and max(dates) >= date_from:
            kept.append(row)
    logger.debug("json_file_source: %d of %d rows in %s..%s", len(kept), len(rows), date_from, date_to)
    return kept
