"""
Deadline calculation for task schedules.

Turns a task's schedule fields into concrete, timezone-aware instants for
the cycle that contains "now". Everything here is a pure function of the
task and the caller-supplied "now": no queries, no saves.

Functions:
- compute_timeout_deadline: when the task becomes overdue today
- compute_closure_deadline: when the task window closes today
- compute_alarm_start: when the task alarm starts
- time_remaining_display: human readable "time until" for notifications
"""

from datetime import date, datetime, time, timedelta

from django.conf import settings
from django.utils import timezone
from django.utils.timesince import timeuntil

ANCHOR_TIME_OF_DAY = 'time_of_day'
ANCHOR_BEFORE_CLOTURE = 'before_cloture'

WEEKDAY_NAMES = [
    'monday', 'tuesday', 'wednesday', 'thursday',
    'friday', 'saturday', 'sunday',
]


def parse_time_of_day(value):
    """
    Return a datetime.time for a time value or an "HH:MM[:SS]" string.

    Returns None for missing or unparseable values.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value

    parts = str(value).strip().split(':')
    if len(parts) < 2 or len(parts) > 3:
        return None
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None
    while len(numbers) < 3:
        numbers.append(0)
    try:
        return time(*numbers)
    except ValueError:
        return None


def rest_duration(value):
    """Read a duration stored as a time of day (02:30:00 -> 2h30m)."""
    parsed = parse_time_of_day(value)
    if parsed is None:
        return None
    return timedelta(hours=parsed.hour, minutes=parsed.minute, seconds=parsed.second)


def _at(day, time_of_day):
    """Anchor a wall-clock time to a date in the current timezone."""
    naive = datetime.combine(day, time_of_day.replace(tzinfo=None))
    return timezone.make_aware(naive, timezone.get_current_timezone())


def _local_date(now):
    if timezone.is_aware(now):
        return timezone.localtime(now).date()
    return now.date()


def is_within_period(task, day):
    """Check if day falls inside [period_start, period_end]; open bounds allowed."""
    if task.period_start and day < task.period_start:
        return False
    if task.period_end and day > task.period_end:
        return False
    return True


def _selected_days(task):
    days = task.period_days or []
    if isinstance(days, str):
        days = [part.strip() for part in days.split(',')]
    return [str(day).strip().lower() for day in days if str(day).strip()]


def _matches_yearly(selected, day):
    for value in selected:
        try:
            if len(value) == 5:
                month, dom = value.split('-')
                if int(month) == day.month and int(dom) == day.day:
                    return True
            else:
                parsed = date.fromisoformat(value[:10])
                if (parsed.month, parsed.day) == (day.month, day.day):
                    return True
        except ValueError:
            continue
    return False


def is_scheduled_day(task, day):
    """
    Check if the recurrence rule makes day an active day.

    - none/daily: every day
    - weekly: day's weekday name is in period_days
    - monthly: day's day-of-month is in period_days
    - yearly: day's month and day match a date in period_days
    An empty period_days selects every day.
    """
    selected = _selected_days(task)
    if not selected:
        return True

    period_type = task.period_type
    if period_type == 'weekly':
        return WEEKDAY_NAMES[day.weekday()] in selected
    if period_type == 'monthly':
        return str(day.day) in [value.lstrip('0') for value in selected]
    if period_type == 'yearly':
        return _matches_yearly(selected, day)
    return True


def _active_day(task, now):
    day = _local_date(now)
    if not is_within_period(task, day):
        return None
    if not is_scheduled_day(task, day):
        return None
    return day


def compute_closure_deadline(task, now):
    """Today's time_cloture instant, or None when it does not apply today."""
    cloture = parse_time_of_day(task.time_cloture)
    if cloture is None:
        return None
    day = _active_day(task, now)
    if day is None:
        return None
    return _at(day, cloture)


def compute_timeout_deadline(task, now, anchor=None):
    """
    The instant the task becomes overdue in the cycle containing now.

    Returns None when time_cloture or time_out is missing or unparseable,
    or when today is outside the task's period or recurrence.
    """
    cloture = parse_time_of_day(task.time_cloture)
    time_out = parse_time_of_day(task.time_out)
    if cloture is None or time_out is None:
        return None

    day = _active_day(task, now)
    if day is None:
        return None

    anchor = anchor or getattr(settings, 'TASK_TIMEOUT_ANCHOR', ANCHOR_TIME_OF_DAY)
    if anchor == ANCHOR_BEFORE_CLOTURE:
        return _at(day, cloture) - rest_duration(time_out)
    return _at(day, time_out)


ALARM_OFFSET_KEYS = ('days', 'hours', 'minutes', 'seconds')


def _alarm_offset(alarm):
    if not any(key in alarm for key in ALARM_OFFSET_KEYS):
        return None
    try:
        return timedelta(**{key: float(alarm.get(key) or 0) for key in ALARM_OFFSET_KEYS})
    except (TypeError, ValueError):
        return None


def _alarm_time_for(alarm, day):
    for key in ('daily', WEEKDAY_NAMES[day.weekday()], str(day.day), 'all'):
        if key in alarm:
            return parse_time_of_day(alarm[key])
    return None


def compute_alarm_start(task, now):
    """
    The instant the task's alarm starts, or None when no alarm applies.

    Two forms are accepted:
    - an offset ({"days", "hours", "minutes", "seconds"}) added to the
      start of period_start, else to created_at, else to now
    - a time of day keyed by "daily", a weekday name, a day of month or
      "all", anchored to today's active day
    """
    alarm = task.alarm
    if not alarm or not isinstance(alarm, dict):
        return None

    offset = _alarm_offset(alarm)
    if offset is not None:
        if task.period_start:
            base = _at(task.period_start, time(0, 0))
        else:
            base = task.created_at or now
        return base + offset

    day = _active_day(task, now)
    if day is None:
        return None
    alarm_time = _alarm_time_for(alarm, day)
    if alarm_time is None:
        return None
    return _at(day, alarm_time)


def time_remaining_display(now, end):
    """'3 hours, 20 minutes' until end; 'unknown' without an end."""
    if end is None:
        return 'unknown'
    return timeuntil(end, now)
