import json
from datetime import date
from types import SimpleNamespace
from unittest import mock

import pytest
from django.test import RequestFactory, override_settings

from jcalendar import views

TODAY = date(2024, 3, 20)

ROWS = [
    {'id': 1, 'title': 'Team sync', 'date': '2024-03-20', 'project_id': 'p1', 'member_id': 'u1'},
    {'id': 2, 'title': 'Release', 'date': '2024-03-10', 'start_date': '2024-03-10',
     'end_date': '2024-03-12', 'project_id': 'p2', 'member_id': 'u1'},
    {'id': 3, 'title': 'Dentist', 'date': '2024-03-20', 'is_private': True, 'member_id': 'u1'},
    {'id': 4, 'title': 'Broken', 'date': 'garbage', 'member_id': 'u1'},
    {'id': 5, 'title': 'Early standup', 'date': '2024-03-20', 'start_time': '08:00', 'member_id': 'u1'},
]

CALLS = []


def fixture_source(member_id, date_from, date_to):
    CALLS.append((member_id, date_from, date_to))
    return list(ROWS)


@pytest.fixture
def rf():
    return RequestFactory()


@pytest.fixture(autouse=True)
def fixed_today():
    CALLS.clear()
    with mock.patch('jcalendar.views.timezone.localdate', return_value=TODAY):
        with override_settings(JCALENDAR_TASK_SOURCE='jcalendar.tests.test_views.fixture_source'):
            yield


def _get(view, rf, user=None, **params):
    request = rf.get('/calendar/', params)
    if user is not None:
        request.user = user
    response = view(request)
    return response, json.loads(response.content)


def _day(payload, iso):
    return next(d for d in payload['days'] if d['date'] == iso)


def test_month_view_defaults_to_today(rf):
    response, payload = _get(views.month_grid_view, rf)
    assert response.status_code == 200
    assert payload['reference'] == '2024-03-01'
    assert payload['today'] == '2024-03-20'
    assert len(payload['days']) == 42
    assert payload['weekdays'] == ['ش', 'ی', 'د', 'س', 'چ', 'پ', 'ج']
    nowruz = _day(payload, '2024-03-20')
    assert nowruz['is_today'] is True
    assert nowruz['jalali']['label'] == '1403/01/01'
    assert CALLS == [(None, date(2024, 2, 24), date(2024, 4, 5))]


def test_month_view_attaches_sorted_tasks_and_hides_foreign_private(rf):
    _, payload = _get(views.month_grid_view, rf, date='2024-03-05')
    assert [t['id'] for t in _day(payload, '2024-03-20')['tasks']] == ['1', '5']
    for iso in ('2024-03-10', '2024-03-11', '2024-03-12'):
        assert [t['id'] for t in _day(payload, iso)['tasks']] == ['2']
    assert all(t['id'] != '4' for d in payload['days'] for t in d['tasks'])


def test_owner_sees_private_task(rf):
    owner = SimpleNamespace(is_authenticated=True, pk='u1')
    _, payload = _get(views.month_grid_view, rf, user=owner, date='2024-03-05')
    assert [t['id'] for t in _day(payload, '2024-03-20')['tasks']] == ['1', '3', '5']
    assert CALLS[-1][0] == 'u1'


def test_member_param_is_passed_to_source(rf):
    _get(views.month_grid_view, rf, date='2024-03-05', member='u7')
    assert CALLS[-1][0] == 'u7'


def test_project_and_search_filters(rf):
    _, payload = _get(views.month_grid_view, rf, date='2024-03-05', projects='p2')
    assert [t['id'] for t in _day(payload, '2024-03-20')['tasks']] == ['5']
    assert [t['id'] for t in _day(payload, '2024-03-11')['tasks']] == ['2']

    _, payload = _get(views.month_grid_view, rf, date='2024-03-05', q='SYNC')
    assert [t['id'] for t in _day(payload, '2024-03-20')['tasks']] == ['1']


def test_jalali_navigation_and_offset(rf):
    _, payload = _get(views.month_grid_view, rf, jy='1403', jm='1')
    assert payload['reference'] == '2024-03-01'

    _, payload = _get(views.month_grid_view, rf, date='2024-03-20', offset='1')
    assert payload['reference'] == '2024-04-01'

    _, payload = _get(views.month_grid_view, rf, date='۱۴۰۳/۰۱/۰۱', offset='-1')
    assert payload['reference'] == '2024-02-01'


@pytest.mark.parametrize("params", [
    {'date': 'yesterday'},
    {'jy': '1403', 'jm': '13'},
    {'offset': 'next'},
    {'jy': '0', 'jm': '1'},
    {'date': '2024-03-20', 'offset': '99999'},
    {'jy': '1403'},
    {'jm': '1'},
])
def test_bad_parameters_return_400(rf, params):
    response, payload = _get(views.month_grid_view, rf, **params)
    assert response.status_code == 400
    assert payload['error']


def test_post_not_allowed(rf):
    response = views.month_grid_view(rf.post('/calendar/month/'))
    assert response.status_code == 405


def test_week_view(rf):
    response, payload = _get(views.week_view, rf, date='2024-03-20')
    assert response.status_code == 200
    assert payload['start'] == '2024-03-16'
    assert [d['date'] for d in payload['days']][-1] == '2024-03-22'
    assert [t['id'] for t in _day(payload, '2024-03-20')['tasks']] == ['1', '5']
    assert CALLS[-1][1:] == (date(2024, 3, 16), date(2024, 3, 22))

    _, payload = _get(views.week_view, rf, date='2024-03-20', offset='-1')
    assert payload['start'] == '2024-03-09'
    assert [t['id'] for t in _day(payload, '2024-03-11')['tasks']] == ['2']


def test_urls_resolve():
    from django.urls import reverse
    assert reverse('jcalendar:month') == '/calendar/month/'
    assert reverse('jcalendar:week') == '/calendar/week/'
