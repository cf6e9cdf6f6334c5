"""
Notification models for task timeouts.

Models:
- Delay: Per (task, user) rest allowance and repeat alarm tracking
- NotificationTimeout: Append-only log of timeout notifications sent
- AlarmNotification: Alarm reminders before the task closes
"""

from django.db import models
from django.conf import settings


class Delay(models.Model):
    """
    Rest (delay) ledger row for one assignee of one task.

    rest_max is the number of rests the user still has; a row with
    rest_max > 0 is an active delay and holds back timeout escalation for
    the whole task. Rows are reused across cycles and never deleted by the
    timeout engine.
    """

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='delays',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='task_delays',
    )
    rest_time = models.TimeField(
        null=True,
        blank=True,
        help_text='Length of one rest, copied from the task'
    )
    rest_max = models.PositiveIntegerField(
        default=0,
        help_text='Rests remaining for this user'
    )

    # Repeat alarms while a rest is running
    next_alarm_at = models.DateTimeField(null=True, blank=True, db_index=True)
    alarm_count = models.PositiveIntegerField(default=0)
    last_alarm_at = models.DateTimeField(null=True, blank=True)

    cycle_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Deadline of the cycle the allowance was granted for'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'delay'
        verbose_name_plural = 'delays'
        ordering = ['-updated_at']
        indexes = [
            models.Index(fields=['task', 'user'], name='delay_task_user_idx'),
            models.Index(fields=['task', 'rest_max'], name='delay_task_rest_max_idx'),
        ]

    def __str__(self):
        return f"Delay: task #{self.task_id} / user #{self.user_id} ({self.rest_max} left)"

    @property
    def is_active(self):
        return self.rest_max > 0


class NotificationTimeout(models.Model):
    """
    Audit log of timeout notifications.

    One row per notification attempted for a recipient. A row with next_at
    set also schedules the next timeout reminder for that recipient; the
    reminder sweep clears it once processed and appends a new row for the
    following reminder.
    """

    class NotificationType(models.TextChoices):
        START_TIME = 'start_time', 'Start Time'
        TIMEOUT_REPEAT = 'timeout_repeat', 'Timeout Repeat'
        DELAY_REPEAT_ALARM = 'delay_repeat_alarm', 'Delay Repeat Alarm'

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='timeout_notifications',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='timeout_notifications',
        help_text='Recipient'
    )
    notification_type = models.CharField(
        max_length=20,
        choices=NotificationType.choices,
        default=NotificationType.START_TIME,
        db_index=True,
    )
    description = models.TextField(
        help_text='Human-readable record of what was sent'
    )

    # Timeout reminders
    next_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text='When the next timeout reminder is due'
    )
    rest_max = models.PositiveIntegerField(
        default=0,
        help_text='Number of timeout reminders allowed'
    )
    repeat_count = models.PositiveIntegerField(
        default=0,
        help_text='Timeout reminders sent before this row'
    )

    read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'timeout notification'
        verbose_name_plural = 'timeout notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['task', 'user'], name='ntimeout_task_user_idx'),
            models.Index(fields=['user', '-created_at'], name='ntimeout_user_created_idx'),
        ]

    def __str__(self):
        return f"#{self.task_id} - {self.get_notification_type_display()} to user #{self.user_id}"


class AlarmNotification(models.Model):
    """
    Alarm reminders for one recipient of one task.

    Created when the task's alarm time is reached: the assignees while the
    task is pending, the controller while it is in progress. Each row is
    re-sent every rest_time until notification_count reaches rest_max.
    """

    task = models.ForeignKey(
        'tasks.Task',
        on_delete=models.CASCADE,
        related_name='alarm_notifications',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='alarm_notifications',
        help_text='Recipient'
    )
    description = models.TextField(blank=True)

    next_at = models.DateTimeField(
        null=True,
        blank=True,
        db_index=True,
        help_text='When the next alarm is due; empty once the alarm is done'
    )
    rest_max = models.PositiveIntegerField(
        default=0,
        help_text='Number of alarms to send'
    )
    notification_count = models.PositiveIntegerField(default=0)
    cycle_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Alarm start time the row was created for'
    )

    read = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'alarm notification'
        verbose_name_plural = 'alarm notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['task', 'user'], name='alarm_task_user_idx'),
            models.Index(fields=['task', 'cycle_at'], name='alarm_task_cycle_idx'),
        ]

    def __str__(self):
        return f"Alarm: task #{self.task_id} / user #{self.user_id} ({self.notification_count}/{self.rest_max})"

    @property
    def is_done(self):
        return self.next_at is None


def log_timeout_notification(task, user, description, notification_type=None, **fields):
    """
    Helper function to create timeout notification log entries.

    Args:
        task: Task instance
        user: Recipient
        description: Human-readable description
        notification_type: One of NotificationTimeout.NotificationType choices
        **fields: Reminder scheduling (next_at, rest_max, repeat_count)

    Returns:
        Created NotificationTimeout instance
    """
    return NotificationTimeout.objects.create(
        task=task,
        user=user,
        notification_type=notification_type or NotificationTimeout.NotificationType.START_TIME,
        description=description,
        **fields
    )
