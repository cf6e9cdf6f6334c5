"""
Service layer for notifications app.

Builds the push messages and audit descriptions for task timeout events:
- compose_timeout_message: first notification when a task's timeout is reached
- compose_repeat_alarm_message: reminder while a rest is running
- compose_timeout_repeat_message: reminder while the timeout stays active
- compose_alarm_message: alarm before the task closes
- describe_*: multi-line text stored in the notification rows
"""

from dataclasses import dataclass, field

from .models import NotificationTimeout

LAST_TIME_PREFIX = '⚠️ LAST TIME'


@dataclass
class OutgoingMessage:
    title: str
    body: str
    data: dict = field(default_factory=dict)


def _payload(task, user, notification_type, is_last_time, rest_max, **extra):
    data = {
        'task_id': task.pk,
        'task_name': task.name,
        'task_step': task.step,
        'user_name': user.user_name or user.get_short_name(),
        'notification_type': notification_type,
        'is_last_time': is_last_time,
        'rest_max': rest_max,
    }
    data.update(extra)
    return data


def compose_timeout_message(task, user, delay, time_remaining, is_last_time):
    """
    Message sent when a task's timeout is reached.

    Args:
        task: Task instance
        user: Recipient
        delay: The recipient's Delay row after the grant
        time_remaining: Text for the time left until closure
        is_last_time: Mark the message as the final warning

    Returns:
        OutgoingMessage
    """
    title = f"Task Start Time: {task.name}"
    body = (
        f"The start time for task '{task.name}' has been reached. "
        f"Time remaining until closure: {time_remaining}."
    )
    if is_last_time:
        body = f"{LAST_TIME_PREFIX}: {body} This is your last rest/delay opportunity."

    return OutgoingMessage(
        title=title,
        body=body,
        data=_payload(
            task, user,
            NotificationTimeout.NotificationType.START_TIME,
            is_last_time,
            delay.rest_max if delay is not None else 0,
        ),
    )


def compose_repeat_alarm_message(task, user, delay, time_remaining, is_last_time):
    """Reminder sent each time a running rest elapses."""
    title = f"Task Reminder: {task.name}"
    body = (
        f"Reminder: Task '{task.name}' is still active. "
        f"Time remaining until closure: {time_remaining}."
    )
    if is_last_time:
        title = f"{LAST_TIME_PREFIX} - Task Reminder: {task.name}"
        body = (
            f"{LAST_TIME_PREFIX}: This is your final reminder for task '{task.name}'. "
            f"Time remaining until closure: {time_remaining}."
        )

    return OutgoingMessage(
        title=title,
        body=body,
        data=_payload(
            task, user,
            NotificationTimeout.NotificationType.DELAY_REPEAT_ALARM,
            is_last_time,
            delay.rest_max,
            alarm_count=delay.alarm_count + 1,
        ),
    )


def describe_timeout_notification(task, user, time_remaining, at, next_at=None):
    """Audit text for the first timeout notification of a cycle."""
    lines = [
        "Start timeout notification created.",
        f"Task: {task.name} (ID: {task.pk})",
        f"User: {user.get_short_name()} (ID: {user.pk})",
        f"Time remaining until closure: {time_remaining}",
        f"Rest time between timeout notifications: {task.rest_time or 'none'}",
        f"Max rests (rest_max): {task.rest_max or 0}",
        f"Created at: {at:%Y-%m-%d %H:%M:%S}",
    ]
    if next_at is not None:
        lines.append(f"Next notification at: {next_at:%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)


def describe_repeat_alarm(delay, time_remaining, at):
    """Audit text for a repeat alarm."""
    lines = [
        f"Delay repeat alarm #{delay.alarm_count + 1} sent.",
        f"Task: {delay.task.name} (ID: {delay.task_id})",
        f"User: {delay.user.get_short_name()} (ID: {delay.user_id})",
        f"Time remaining until closure: {time_remaining}",
        f"Rests remaining: {delay.rest_max}",
        f"Sent at: {at:%Y-%m-%d %H:%M:%S}",
    ]
    return "\n".join(lines)


def is_last_timeout_repeat(rest_max, send_number):
    return rest_max > 0 and send_number >= rest_max


def compose_timeout_repeat_message(task, user, row, time_remaining, send_number):
    """
    Reminder sent while a task's timeout stays active.

    Args:
        row: The NotificationTimeout row that scheduled this reminder
        send_number: 1 for the first reminder, 2 for the second, ...
    """
    is_last_time = is_last_timeout_repeat(row.rest_max, send_number)
    title = f"Task Timeout Reminder: {task.name}"
    body = (
        f"Reminder: The timeout for task '{task.name}' is active. "
        f"Time remaining until closure: {time_remaining}."
    )
    if is_last_time:
        title = f"{LAST_TIME_PREFIX} - Task Timeout Reminder: {task.name}"
        body = f"{body} This is your last timeout reminder."
    elif send_number > 1:
        body = f"{body} This is your {send_number} time timeout reminder."

    return OutgoingMessage(
        title=title,
        body=body,
        data=_payload(
            task, user,
            NotificationTimeout.NotificationType.TIMEOUT_REPEAT,
            is_last_time,
            row.rest_max,
            notification_timeout_id=row.pk,
            repeat_count=send_number,
        ),
    )


def describe_timeout_repeat(row, send_number, at):
    lines = [
        "Timeout repeat notification sent.",
        f"Task: {row.task.name} (ID: {row.task_id})",
        f"User: {row.user.get_short_name()} (ID: {row.user_id})",
    ]
    if row.rest_max > 0:
        lines.append(f"This was notification number: {send_number} of {row.rest_max}")
        if is_last_timeout_repeat(row.rest_max, send_number):
            lines.append("This was the last timeout reminder.")
        else:
            lines.append(f"Reminders remaining: {row.rest_max - send_number}")
    else:
        lines.append(f"This was notification number: {send_number}")
    lines.append(f"Processed at: {at:%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)


def describe_scheduled_timeout_repeat(row, next_at):
    return "\n".join([
        "Scheduled timeout repeat notification.",
        f"Task: {row.task.name} (ID: {row.task_id})",
        f"User: {row.user.get_short_name()} (ID: {row.user_id})",
        f"Reminders sent so far: {row.repeat_count + 1}",
        f"Next notification at: {next_at:%Y-%m-%d %H:%M:%S}",
    ])


def compose_alarm_message(task, user, alarm, time_remaining, number):
    """
    Alarm push for a task that is about to close.

    Args:
        alarm: The recipient's AlarmNotification row
        number: Position of this alarm, starting at 1
    """
    rest_max = alarm.rest_max
    notifications_left = max(rest_max - number, 0)
    is_last = rest_max > 0 and number >= rest_max

    if is_last:
        title = f"⚠️ LAST ALARM - Task Alarm: {task.name}"
        body = (
            f"⚠️ LAST ALARM: This is your final alarm notification "
            f"(#{number} of {rest_max}). Time remaining until task end: {time_remaining}."
        )
    else:
        title = f"Task Alarm: {task.name}"
        body = f"This is alarm notification #{number}"
        if rest_max > 0:
            body += f" of {rest_max}"
        body += f". Time remaining until task end: {time_remaining}."
        if rest_max > 0:
            body += f" {notifications_left} notification(s) remaining."

    return OutgoingMessage(
        title=title,
        body=body,
        data={
            'task_id': task.pk,
            'task_name': task.name,
            'task_step': task.step,
            'user_name': user.user_name or user.get_short_name(),
            'notification_type': 'alarm',
            'notification_number': number,
            'total_notifications': rest_max,
            'notifications_left': notifications_left,
            'is_last_notification': is_last,
            'time_remaining': time_remaining,
        },
    )


def describe_alarm(alarm, time_remaining, number, at):
    lines = [
        f"Alarm notification #{number} sent.",
        f"Task: {alarm.task.name} (ID: {alarm.task_id})",
        f"User: {alarm.user.get_short_name()} (ID: {alarm.user_id})",
        f"Time remaining until task end: {time_remaining}",
    ]
    if alarm.rest_max > 0:
        lines.append(f"Alarms remaining: {max(alarm.rest_max - number, 0)}")
    lines.append(f"Sent at: {at:%Y-%m-%d %H:%M:%S}")
    return "\n".join(lines)
