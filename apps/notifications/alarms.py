"""
Alarm ledger.

Once a task's alarm start is reached, one AlarmNotification row is created
per recipient: the assignees (minus the creator) while the task is pending,
the controller while it is in progress. Each row is re-sent every rest_time
until notification_count reaches rest_max. A completed task gets no alarms.
"""

from django.db.models import F

from apps.accounts.models import User
from apps.tasks.models import Task
from apps.tasks.schedule import rest_duration

from .models import AlarmNotification


def alarm_tasks():
    """Active, unfinished tasks with an alarm and a closure time."""
    return (
        Task.objects
        .filter(
            status=True,
            alarm__isnull=False,
            time_cloture__isnull=False,
            step__in=[Task.Step.PENDING, Task.Step.IN_PROGRESS],
        )
        .select_related('created_by')
        .order_by('pk')
    )


def due_alarms(now):
    """Rows whose next alarm is due, grouped by task."""
    return (
        AlarmNotification.objects
        .filter(next_at__isnull=False, next_at__lte=now)
        .select_related('task', 'user')
        .order_by('task_id', 'next_at', 'pk')
    )


def alarm_recipients(task):
    """Users that should receive the task's alarm in its current step."""
    if task.step == Task.Step.PENDING:
        ids = [pk for pk in task.assignee_ids if pk != task.created_by_id]
        users = User.objects.with_push_destination().in_bulk(ids)
        return [users[pk] for pk in ids if pk in users]
    if task.step == Task.Step.IN_PROGRESS:
        controller = task.controller_user()
        if controller is not None and controller.is_active and controller.has_push_destination:
            return [controller]
    return []


def should_receive_alarm(task, user):
    if task.step == Task.Step.PENDING:
        return task.is_assigned_to(user) and user.pk != task.created_by_id
    if task.step == Task.Step.IN_PROGRESS:
        controller = task.controller_user()
        return controller is not None and controller.pk == user.pk
    return False


def has_alarm_rows(task, cycle_at):
    return AlarmNotification.objects.filter(task=task, cycle_at=cycle_at).exists()


def next_alarm_at(task, now, sent_count, rest_max):
    """When the following alarm is due, or None once rest_max is reached."""
    duration = rest_duration(task.rest_time)
    if not duration or rest_max <= 0 or sent_count >= rest_max:
        return None
    return now + duration


def is_capped(alarm):
    return alarm.rest_max > 0 and alarm.notification_count >= alarm.rest_max


def stop_alarms(rows):
    """Clear next_at on every given row."""
    return AlarmNotification.objects.filter(pk__in=[row.pk for row in rows]).update(next_at=None)


def record_alarm(alarm, now, description):
    """Count a sent alarm and schedule the next one."""
    sent = alarm.notification_count + 1
    AlarmNotification.objects.filter(pk=alarm.pk).update(
        notification_count=F('notification_count') + 1,
        next_at=next_alarm_at(alarm.task, now, sent, alarm.rest_max),
        description=description,
    )
    alarm.refresh_from_db(fields=['notification_count', 'next_at', 'description'])
    return alarm
