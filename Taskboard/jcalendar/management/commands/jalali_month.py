from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from jcalendar.exceptions import InvalidDateError
from jcalendar.grid import build_month_grid
from jcalendar.jalali import WEEKDAY_SHORT_NAMES, to_persian_digits
from jcalendar.normalize import parse_date


def _cell(day, persian: bool) -> str:
    n = day.jalali.day
    if not day.is_current_month:
        text = f"[{n:>2}]"
    elif day.is_today:
        text = f"{n:>3}*"
    else:
        text = f"{n:>3} "
    return to_persian_digits(text) if persian else text


class Command(BaseCommand):
    help = "Print the Saturday-first month grid with Jalali day numbers."

    def add_arguments(self, parser):
        parser.add_argument('--date', help="Reference date, ISO (2024-03-20) or Jalali (1403/01/01). Defaults to today.")
        parser.add_argument('--persian-digits', action='store_true', help="Use Persian digits.")

    def handle(self, *args, **options):
        today = timezone.localdate()
        raw = options.get('date')
        try:
            reference = parse_date(raw) if raw else today
            grid = build_month_grid(reference, [], today=today)
        except InvalidDateError as exc:
            raise CommandError(str(exc)) from exc

        persian = options.get('persian_digits', False)
        title = f"{grid.title}  ({grid.reference:%Y-%m})"
        self.stdout.write(to_persian_digits(title) if persian else title)
        self.stdout.write(''.join(f"{name:>3} " for name in WEEKDAY_SHORT_NAMES))
        for week in grid.weeks():
            self.stdout.write(''.join(_cell(day, persian) for day in week))
