# PATH: /Taskboard/jcalendar/views.py
"""JSON endpoints for the calendar month and week views.

The views only glue things together: parse the navigation and filter
parameters, fetch rows from the configured task source for the visible
window, normalize them and hand them to the grid builder.  Rendering is
left to the presentation layer consuming the JSON.
"""

from __future__ import annotations

import datetime
import logging
from typing import Optional

from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET

from .exceptions import InvalidDateError
from .grid import DAYS_PER_WEEK, add_months, build_month_grid, build_week, month_range, week_start
from .jalali import WEEKDAY_NAMES, WEEKDAY_SHORT_NAMES, JalaliDate, to_ascii_digits, to_gregorian, to_jalali
from .normalize import normalize_tasks, parse_date, sort_tasks
from .sources import get_task_source
from .visibility import all_of, hide_foreign_private, matches_search, only_projects

logger = logging.getLogger(__name__)

_JSON_PARAMS = {'ensure_ascii': False}


def _int_param(request, name: str, default: Optional[int] = None) -> Optional[int]:
    raw = to_ascii_digits(request.GET.get(name) or '').strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise InvalidDateError(f"{name} must be an integer, got {raw!r}") from exc


def _viewer_id(request) -> Optional[str]:
    user = getattr(request, 'user', None)
    if user is not None and getattr(user, 'is_authenticated', False):
        return str(user.pk)
    return None


def _reference_date(request, today: datetime.date) -> datetime.date:
    """Reference date from ``date`` (ISO/Jalali) or ``jy``/``jm``; defaults to today."""
    raw_date = (request.GET.get('date') or '').strip()
    jy = _int_param(request, 'jy')
    jm = _int_param(request, 'jm')
    if raw_date:
        return parse_date(raw_date)
    if (jy is None) != (jm is None):
        raise InvalidDateError("jy and jm must be given together")
    if jy is not None:
        return to_gregorian(JalaliDate(jy, jm, 1))
    return today


def _visibility(request):
    raw_projects = request.GET.get('projects')
    projects = None
    if raw_projects is not None:
        projects = [p.strip() for p in raw_projects.split(',') if p.strip()]
    return all_of(
        hide_foreign_private(_viewer_id(request)),
        only_projects(projects),
        matches_search(request.GET.get('q')),
    )


def _load_tasks(request, date_from: datetime.date, date_to: datetime.date):
    member = (request.GET.get('member') or '').strip() or _viewer_id(request)
    rows = get_task_source()(member, date_from, date_to)
    return sort_tasks(normalize_tasks(rows))


def _bad_request(exc: Exception) -> JsonResponse:
    logger.info("Rejected calendar request: %s", exc)
    return JsonResponse({'error': str(exc)}, status=400, json_dumps_params=_JSON_PARAMS)


@require_GET
def month_grid_view(request):
    """Return the 42-day month grid as JSON.

    Query params: ``date`` or ``jy``/``jm`` for the month, ``offset`` months
    to move (prev/next), ``projects`` (comma list), ``q`` search text and
    ``member`` whose tasks to load.
    """
    today = timezone.localdate()
    try:
        reference = _reference_date(request, today)
        offset = _int_param(request, 'offset', 0)
        if offset:
            reference = add_months(reference, offset)
        date_from, date_to = month_range(reference)
        to_jalali(date_from)  # window must start after the Jalali epoch
    except (ValueError, OverflowError) as exc:
        return _bad_request(exc)

    tasks = _load_tasks(request, date_from, date_to)
    grid = build_month_grid(reference, tasks, _visibility(request), today=today)
    payload = grid.as_dict()
    payload['weekdays'] = list(WEEKDAY_SHORT_NAMES)
    payload['weekday_names'] = list(WEEKDAY_NAMES)
    return JsonResponse(payload, json_dumps_params=_JSON_PARAMS)


@require_GET
def week_view(request):
    """Return the Saturday-first week containing the reference date; ``offset`` moves by weeks."""
    today = timezone.localdate()
    try:
        reference = _reference_date(request, today)
        offset = _int_param(request, 'offset', 0)
        start = week_start(reference) + datetime.timedelta(days=DAYS_PER_WEEK * offset)
        end = start + datetime.timedelta(days=DAYS_PER_WEEK - 1)
        to_jalali(start)
    except (ValueError, OverflowError) as exc:
        return _bad_request(exc)

    tasks = _load_tasks(request, start, end)
    week = build_week(start, tasks, _visibility(request), today=today)
    payload = week.as_dict()
    payload['weekdays'] = list(WEEKDAY_SHORT_NAMES)
    return JsonResponse(payload, json_dumps_params=_JSON_PARAMS)
