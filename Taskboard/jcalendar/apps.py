from django.apps import AppConfig


class JcalendarConfig(AppConfig):
    """Configuration for the Jalali calendar app.

    The app holds the Gregorian/Jalali conversion, the month grid builder
    and the JSON views on top of them.  It defines no models: tasks are
    read through the task source configured in settings.
    """

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'jcalendar'
    verbose_name = 'تقویم جلالی'
