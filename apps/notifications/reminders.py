"""
Timeout reminder ledger.

A NotificationTimeout row with next_at set schedules one more timeout
reminder for its recipient. Processing a row clears its next_at and, while
reminders remain, appends the row for the following reminder.
"""

from apps.tasks.schedule import rest_duration

from .models import NotificationTimeout, log_timeout_notification
from .services import describe_scheduled_timeout_repeat, is_last_timeout_repeat


def first_reminder_at(task, now):
    """When the first reminder after a timeout notification is due, or None."""
    duration = rest_duration(task.rest_time)
    if not duration or (task.rest_max or 0) <= 0:
        return None
    return now + duration


def due_timeout_repeats(now):
    """Rows whose timeout reminder is due, oldest first."""
    return (
        NotificationTimeout.objects
        .filter(next_at__isnull=False, next_at__lte=now)
        .select_related('task', 'user')
        .order_by('next_at', 'pk')
    )


def is_exhausted(row):
    return row.rest_max > 0 and row.repeat_count >= row.rest_max


def close_reminder(row):
    """Stop the row from being picked up again."""
    row.next_at = None
    row.save(update_fields=['next_at'])


def record_timeout_repeat(row, now, description):
    """
    Mark the row as processed and schedule the following reminder.

    Returns:
        The new NotificationTimeout row, or None when no reminder is left
    """
    send_number = row.repeat_count + 1
    row.next_at = None
    row.description = description
    row.save(update_fields=['next_at', 'description'])

    if is_last_timeout_repeat(row.rest_max, send_number):
        return None
    duration = rest_duration(row.task.rest_time)
    if not duration:
        return None

    next_at = now + duration
    return log_timeout_notification(
        row.task,
        row.user,
        describe_scheduled_timeout_repeat(row, next_at),
        NotificationTimeout.NotificationType.TIMEOUT_REPEAT,
        next_at=next_at,
        rest_max=row.rest_max,
        repeat_count=send_number,
    )
