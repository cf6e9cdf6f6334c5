"""
Delay ledger.

Tracks, per (task, user), how many rests the user has left and when the
next repeat alarm of a running rest is due. The timeout scanner reads it
to hold back escalation; the dispatcher and the delay request write it.
"""

from django.core.exceptions import ValidationError
from django.db.models import F

from apps.tasks.schedule import rest_duration

from .models import Delay


def has_active_delay(task):
    """True if any assignee of the task still holds rests (rest_max > 0)."""
    return Delay.objects.filter(task=task, rest_max__gt=0).exists()


def get_delay(task, user):
    """Return the (task, user) ledger row, or None."""
    return (
        Delay.objects
        .filter(task=task, user=user)
        .order_by('pk')
        .first()
    )


def grant_or_refresh_delay(task, user, cycle_at=None):
    """
    Fetch or create the (task, user) row and load the task's allowance.

    rest_time and rest_max are copied from the task's current
    configuration. When cycle_at is given and the row was already granted
    for that cycle, the remaining rest_max is kept so a re-escalation in the
    same cycle does not hand the allowance out again.

    Returns:
        Saved Delay instance
    """
    delay = get_delay(task, user)
    if delay is None:
        delay = Delay(task=task, user=user)

    delay.rest_time = task.rest_time
    same_cycle = (
        delay.pk is not None
        and cycle_at is not None
        and delay.cycle_at == cycle_at
    )
    if not same_cycle:
        delay.rest_max = task.rest_max or 0
    delay.cycle_at = cycle_at
    delay.save()
    return delay


def is_last_rest(delay):
    """True when the user has exactly one rest left."""
    return delay is not None and delay.rest_max == 1


def consume_rest(task, user, now):
    """
    Use one of the user's rests for this task.

    Starts from the row's remaining rests (or the task's rest_max when the
    user has no row yet), decrements it and schedules the first repeat
    alarm one rest_time from now.

    Raises:
        ValidationError: If the user has no rest left
    """
    delay = get_delay(task, user)
    remaining = delay.rest_max if delay is not None else (task.rest_max or 0)
    if remaining <= 0:
        raise ValidationError('Maximum rest/delay limit has been reached for this task.')

    if delay is None:
        delay = Delay(task=task, user=user)

    rest_time = delay.rest_time or task.rest_time
    duration = rest_duration(rest_time)

    delay.rest_time = rest_time
    delay.rest_max = remaining - 1
    delay.next_alarm_at = now + duration if duration else None
    delay.alarm_count = 0
    delay.last_alarm_at = None
    delay.save()
    return delay


def due_repeat_alarms(now):
    """Active delays whose next repeat alarm is due."""
    return (
        Delay.objects
        .filter(rest_max__gt=0, next_alarm_at__isnull=False, next_alarm_at__lte=now)
        .select_related('task', 'user')
        .order_by('next_alarm_at', 'pk')
    )


def record_repeat_alarm(delay, now):
    """Count a sent repeat alarm and schedule the next one."""
    duration = rest_duration(delay.rest_time)
    Delay.objects.filter(pk=delay.pk).update(
        alarm_count=F('alarm_count') + 1,
        last_alarm_at=now,
        next_alarm_at=now + duration if duration else None,
    )
    delay.refresh_from_db(fields=['alarm_count', 'last_alarm_at', 'next_alarm_at'])
    return delay
