import calendar
import json
from datetime import date, timedelta

import pytest

from jcalendar.grid import (
    GRID_DAYS,
    TaskRef,
    add_months,
    build_month_grid,
    build_week,
    month_range,
    tasks_for_day,
)
from jcalendar.jalali import JalaliDate


TODAY = date(2024, 3, 20)


def _task(task_id, day, **kwargs):
    return TaskRef(id=task_id, title=kwargs.pop('title', f"task {task_id}"), date=day, **kwargs)


def _cells_with(grid, task_id):
    return [cell for cell in grid if any(t.id == task_id for t in cell.tasks)]


def test_march_2024_layout():
    grid = build_month_grid(date(2024, 3, 20), [], today=TODAY)
    assert len(grid) == GRID_DAYS == 42
    assert grid.reference == date(2024, 3, 1)
    # 1 March 2024 is a Friday, the last column of a Saturday-first week.
    assert grid[0].date == date(2024, 2, 24)
    assert grid[6].date == date(2024, 3, 1)
    assert grid[-1].date == date(2024, 4, 5)
    assert not grid[0].is_current_month
    assert grid[6].is_current_month
    assert month_range(date(2024, 3, 20)) == (date(2024, 2, 24), date(2024, 4, 5))


def test_month_starting_on_saturday_has_no_leading_days():
    grid = build_month_grid(date(2024, 6, 15), [], today=TODAY)
    assert grid[0].date == date(2024, 6, 1)
    assert grid[0].is_current_month


@pytest.mark.parametrize("year", range(2020, 2031))
def test_grid_invariants_for_every_month(year):
    for month in range(1, 13):
        grid = build_month_grid(date(year, month, 10), [], today=TODAY)
        assert len(grid) == 42
        assert grid[0].weekday_index == 0
        in_month = [cell for cell in grid if cell.is_current_month]
        assert len(in_month) == calendar.monthrange(year, month)[1]
        assert len(in_month) >= 28
        assert in_month[0].date == date(year, month, 1)
        assert in_month[-1].date.day == calendar.monthrange(year, month)[1]
        dates = [cell.date for cell in grid]
        assert all(b - a == timedelta(days=1) for a, b in zip(dates, dates[1:]))


def test_weeks_are_rows_of_seven():
    grid = build_month_grid(date(2024, 3, 1), [], today=TODAY)
    weeks = grid.weeks()
    assert len(weeks) == 6
    assert all(len(w) == 7 for w in weeks)
    assert all(w[0].weekday_index == 0 for w in weeks)


def test_jalali_labels():
    grid = build_month_grid(date(2024, 3, 1), [], today=TODAY)
    by_date = {cell.date: cell for cell in grid}
    assert by_date[date(2024, 3, 20)].jalali == JalaliDate(1403, 1, 1)
    assert by_date[date(2024, 3, 19)].jalali == JalaliDate(1402, 12, 29)
    assert grid.title == 'اسفند 1402'


def test_today_flag():
    grid = build_month_grid(date(2024, 3, 1), [], today=TODAY)
    flagged = [cell for cell in grid if cell.is_today]
    assert [cell.date for cell in flagged] == [TODAY]

    # Today shown among the trailing days of the previous month's grid.
    grid = build_month_grid(date(2024, 2, 1), [], today=date(2024, 3, 1))
    assert sum(cell.is_today for cell in grid) == 1

    grid = build_month_grid(date(2024, 8, 1), [], today=TODAY)
    assert sum(cell.is_today for cell in grid) == 0


def test_single_date_task_attaches_once():
    task = _task('a', date(2024, 3, 12))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    cells = _cells_with(grid, 'a')
    assert [c.date for c in cells] == [date(2024, 3, 12)]


def test_ranged_task_attaches_to_every_day():
    task = _task('r', date(2024, 3, 10), start_date=date(2024, 3, 10), end_date=date(2024, 3, 12))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    cells = _cells_with(grid, 'r')
    assert [c.date for c in cells] == [date(2024, 3, 10), date(2024, 3, 11), date(2024, 3, 12)]


def test_range_spanning_month_boundary_reaches_adjacent_cells():
    task = _task('r', date(2024, 2, 27), start_date=date(2024, 2, 27), end_date=date(2024, 3, 2))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    assert len(_cells_with(grid, 'r')) == 5


def test_primary_date_outside_range_still_counts():
    task = _task('x', date(2024, 3, 5), start_date=date(2024, 3, 10), end_date=date(2024, 3, 11))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    assert [c.date for c in _cells_with(grid, 'x')] == [date(2024, 3, 5), date(2024, 3, 10), date(2024, 3, 11)]


def test_range_needs_both_ends():
    task = _task('s', date(2024, 3, 5), start_date=date(2024, 3, 1))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    assert [c.date for c in _cells_with(grid, 's')] == [date(2024, 3, 5)]


def test_degenerate_range_collapses_to_start():
    task = _task('d', date(2024, 3, 5), start_date=date(2024, 3, 10), end_date=date(2024, 3, 8))
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    assert [c.date for c in _cells_with(grid, 'd')] == [date(2024, 3, 5), date(2024, 3, 10)]


def test_invisible_task_attaches_nowhere():
    visible = _task('v', date(2024, 3, 12))
    hidden = _task('h', date(2024, 3, 12))
    grid = build_month_grid(date(2024, 3, 1), [visible, hidden], lambda t: t.id != 'h', today=TODAY)
    assert _cells_with(grid, 'h') == []
    assert len(_cells_with(grid, 'v')) == 1


def test_bad_task_does_not_break_grid():
    bad = TaskRef(id='bad', title='broken', date='not-a-date')
    good = _task('good', date(2024, 3, 12))
    grid = build_month_grid(date(2024, 3, 1), [bad, good], today=TODAY)
    assert len(grid) == 42
    assert _cells_with(grid, 'bad') == []
    assert len(_cells_with(grid, 'good')) == 1


def test_failing_predicate_hides_only_that_task():
    def predicate(task):
        if task.id == 'boom':
            raise RuntimeError("lookup failed")
        return True

    tasks = [_task('boom', date(2024, 3, 12)), _task('ok', date(2024, 3, 12))]
    grid = build_month_grid(date(2024, 3, 1), tasks, predicate, today=TODAY)
    cell = next(c for c in grid if c.date == date(2024, 3, 12))
    assert [t.id for t in cell.tasks] == ['ok']


def test_tasks_keep_input_order():
    tasks = [_task('b', date(2024, 3, 12)), _task('a', date(2024, 3, 12)), _task('c', date(2024, 3, 12))]
    grid = build_month_grid(date(2024, 3, 1), tasks, today=TODAY)
    cell = next(c for c in grid if c.date == date(2024, 3, 12))
    assert [t.id for t in cell.tasks] == ['b', 'a', 'c']


def test_idempotent():
    tasks = [
        _task('a', date(2024, 3, 12)),
        _task('r', date(2024, 3, 1), start_date=date(2024, 3, 1), end_date=date(2024, 3, 3)),
    ]
    first = build_month_grid(date(2024, 3, 20), tasks, today=TODAY)
    second = build_month_grid(date(2024, 3, 20), tasks, today=TODAY)
    assert first == second
    assert first.as_dict() == second.as_dict()


def test_as_dict_is_json_serializable():
    task = _task('a', date(2024, 3, 20), project_id='p1')
    grid = build_month_grid(date(2024, 3, 1), [task], today=TODAY)
    payload = json.loads(json.dumps(grid.as_dict(), ensure_ascii=False))
    assert payload['range'] == {'from': '2024-02-24', 'to': '2024-04-05'}
    assert len(payload['days']) == 42
    nowruz = next(d for d in payload['days'] if d['date'] == '2024-03-20')
    assert nowruz['jalali'] == {'year': 1403, 'month': 1, 'day': 1, 'label': '1403/01/01'}
    assert nowruz['is_today'] is True
    assert nowruz['tasks'][0]['id'] == 'a'
    assert nowruz['tasks'][0]['project_id'] == 'p1'


def test_week_starts_on_saturday():
    task = _task('w', date(2024, 3, 18))
    week = build_week(date(2024, 3, 20), [task], today=TODAY)
    assert len(week) == 7
    assert week.start == date(2024, 3, 16)
    assert [c.date for c in week][-1] == date(2024, 3, 22)
    assert [c.is_today for c in week] == [False, False, False, False, True, False, False]
    assert [t.id for t in week.days[2].tasks] == ['w']


def test_tasks_for_day():
    tasks = [
        _task('a', date(2024, 3, 12)),
        _task('r', date(2024, 3, 10), start_date=date(2024, 3, 10), end_date=date(2024, 3, 14)),
        _task('z', date(2024, 3, 13)),
    ]
    assert [t.id for t in tasks_for_day(date(2024, 3, 12), tasks)] == ['a', 'r']
    assert [t.id for t in tasks_for_day(date(2024, 3, 12), tasks, lambda t: t.id == 'r')] == ['r']


def test_add_months():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 1)
    assert add_months(date(2024, 1, 15), -1) == date(2023, 12, 1)
    assert add_months(date(2024, 3, 20), 12) == date(2025, 3, 1)
    assert add_months(date(2024, 3, 20), 0) == date(2024, 3, 1)
