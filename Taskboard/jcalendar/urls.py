"""URL configuration for the calendar app.

``month/`` serves the 42-day month grid and ``week/`` a single
Saturday-first week, both as JSON.
"""

from django.urls import path
from . import views


app_name = 'jcalendar'

urlpatterns = [
    path('month/', views.month_grid_view, name='month'),
    path('week/', views.week_view, name='week'),
]
