# PATH: /Taskboard/taskboard/urls.py
from django.urls import path, include
from django.views.generic import RedirectView

urlpatterns = [
    # Calendar JSON endpoints (month grid, week)
    path('calendar/', include(('jcalendar.urls', 'jcalendar'), namespace='jcalendar')),
    path('', RedirectView.as_view(pattern_name='jcalendar:month', permanent=False)),
]
