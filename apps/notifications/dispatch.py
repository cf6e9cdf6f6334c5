"""
Notification dispatcher.

Delivers timeout notifications, reminders and alarms through the configured
push notifier, writing the audit row and the delay grant for every
recipient before the send is attempted.
"""

import logging
from dataclasses import dataclass

from django.db import transaction

from apps.accounts.models import User
from apps.tasks.schedule import compute_closure_deadline, time_remaining_display

from .backends import get_notifier
from .delays import grant_or_refresh_delay, is_last_rest
from .exceptions import NotifierUnavailable
from .models import NotificationTimeout, log_timeout_notification
from .reminders import first_reminder_at
from .services import (
    compose_alarm_message,
    compose_repeat_alarm_message,
    compose_timeout_message,
    compose_timeout_repeat_message,
    describe_repeat_alarm,
    describe_timeout_notification,
)

logger = logging.getLogger(__name__)


@dataclass
class DispatchResult:
    success_count: int = 0
    failed_count: int = 0

    @property
    def attempted(self):
        return self.success_count + self.failed_count


def _resolve_notifier(notifier):
    if notifier is not None:
        return notifier
    try:
        return get_notifier()
    except NotifierUnavailable as exc:
        logger.warning("Push notifier unavailable, nothing sent: %s", exc)
        return None


def get_recipients(task):
    """
    Assignees that can receive a push, in assignment order.

    The task creator and controller are left out, as are inactive users and
    users without a device token.
    """
    excluded = task.excluded_recipient_ids()
    ids = [pk for pk in task.assignee_ids if pk not in excluded]
    if not ids:
        return []

    users = User.objects.with_push_destination().in_bulk(ids)
    return [users[pk] for pk in ids if pk in users]


def _send(notifier, user, message):
    return notifier.send(
        user.fcm_token,
        message.title,
        message.body,
        data=message.data,
    )


def dispatch_timeout(task, now, cycle_at=None, notifier=None):
    """
    Notify every eligible assignee that the task's timeout was reached.

    Args:
        task: Task instance
        now: Current time, used for the audit row and time remaining
        cycle_at: Deadline of the cycle being escalated
        notifier: Notifier instance; the configured backend when omitted

    Returns:
        DispatchResult with per-recipient success and failure counts
    """
    result = DispatchResult()

    recipients = get_recipients(task)
    if not recipients:
        logger.info("Task %s has no reachable assignees", task.pk)
        return result

    notifier = _resolve_notifier(notifier)
    if notifier is None:
        return result

    time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
    reminder_at = first_reminder_at(task, now)

    for user in recipients:
        try:
            with transaction.atomic():
                log_timeout_notification(
                    task,
                    user,
                    describe_timeout_notification(task, user, time_remaining, now, reminder_at),
                    NotificationTimeout.NotificationType.START_TIME,
                    next_at=reminder_at,
                    rest_max=task.rest_max or 0,
                )
                delay = grant_or_refresh_delay(task, user, cycle_at=cycle_at)

            message = compose_timeout_message(
                task, user, delay, time_remaining, is_last_rest(delay)
            )
            message_id = _send(notifier, user, message)
        except Exception:
            result.failed_count += 1
            logger.exception(
                "Timeout notification for task %s to user %s failed", task.pk, user.pk
            )
            continue

        result.success_count += 1
        logger.debug(
            "Timeout notification for task %s sent to user %s (%s)",
            task.pk, user.pk, message_id,
        )

    logger.info(
        "Task %s timeout dispatched: %s sent, %s failed",
        task.pk, result.success_count, result.failed_count,
    )
    return result


def dispatch_repeat_alarm(delay, now, notifier=None):
    """
    Remind the delay's user that the task is still running.

    Returns:
        True if the reminder was delivered
    """
    user = delay.user
    task = delay.task
    if not user.is_active or not user.has_push_destination:
        logger.info("Delay %s user %s cannot receive pushes", delay.pk, user.pk)
        return False

    notifier = _resolve_notifier(notifier)
    if notifier is None:
        return False

    time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
    log_timeout_notification(
        task,
        user,
        describe_repeat_alarm(delay, time_remaining, now),
        NotificationTimeout.NotificationType.DELAY_REPEAT_ALARM,
    )
    message = compose_repeat_alarm_message(
        task, user, delay, time_remaining, is_last_rest(delay)
    )
    try:
        _send(notifier, user, message)
    except Exception:
        logger.exception(
            "Repeat alarm for delay %s to user %s failed", delay.pk, user.pk
        )
        return False
    return True


def dispatch_timeout_repeat(row, now, notifier=None):
    """
    Send the timeout reminder scheduled by a NotificationTimeout row.

    Returns:
        True if the reminder was delivered
    """
    user = row.user
    if not user.is_active or not user.has_push_destination:
        logger.info("Timeout reminder %s: user %s cannot receive pushes", row.pk, user.pk)
        return False

    notifier = _resolve_notifier(notifier)
    if notifier is None:
        return False

    task = row.task
    time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
    message = compose_timeout_repeat_message(
        task, user, row, time_remaining, row.repeat_count + 1
    )
    try:
        _send(notifier, user, message)
    except Exception:
        logger.exception(
            "Timeout reminder %s for task %s to user %s failed", row.pk, task.pk, user.pk
        )
        return False
    return True


def dispatch_alarm(alarm, now, notifier=None):
    """
    Send the next alarm of an AlarmNotification row.

    Returns:
        True if the alarm was delivered
    """
    user = alarm.user
    notifier = _resolve_notifier(notifier)
    if notifier is None:
        return False

    task = alarm.task
    time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
    message = compose_alarm_message(
        task, user, alarm, time_remaining, alarm.notification_count + 1
    )
    try:
        _send(notifier, user, message)
    except Exception:
        logger.exception(
            "Alarm %s for task %s to user %s failed", alarm.pk, task.pk, user.pk
        )
        return False
    return True
