"""
Task management models.

Models:
- Task: A monitored unit of work with a recurring schedule, a list of
  assignees, a rest (delay) allowance and the timeout notification marker
"""

import json
import re

from django.db import models
from django.conf import settings


ASSIGNEE_ID_PATTERN = re.compile(r'\d+')


def parse_assignee_ids(raw):
    """
    Parse the stored assignee list into an ordered list of unique ids.

    Accepts a JSON list ("[2, 3]", '["2", "3"]') and falls back to every
    integer-looking token for loosely delimited text ("2;3", "[2,3").
    Returns an empty list for empty or unparseable input.
    """
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        values = raw
    else:
        raw = str(raw).strip()
        if not raw:
            return []
        try:
            values = json.loads(raw)
        except ValueError:
            values = None
        if not isinstance(values, list):
            values = ASSIGNEE_ID_PATTERN.findall(raw)

    ids = []
    for value in values:
        try:
            user_id = int(value)
        except (TypeError, ValueError):
            continue
        if user_id not in ids:
            ids.append(user_id)
    return ids


class Task(models.Model):
    """
    Main Task model.

    Schedule:
    - period_start/period_end bound the dates the task is active
    - period_type/period_days select the active days of the recurrence
    - time_out is when the task becomes overdue, time_cloture when it closes

    Timeout state (per cycle):
    - PENDING: timeout_notified_at is null
    - NOTIFIED: timeout_notified_at set, timeout_cycle_at holds the deadline
      that was escalated
    """

    class Step(models.TextChoices):
        PENDING = 'pending', 'Pending'
        IN_PROGRESS = 'in_progress', 'In Progress'
        COMPLETED = 'completed', 'Completed'

    class PeriodType(models.TextChoices):
        NONE = 'none', 'None'
        DAILY = 'daily', 'Daily'
        WEEKLY = 'weekly', 'Weekly'
        MONTHLY = 'monthly', 'Monthly'
        YEARLY = 'yearly', 'Yearly'

    # Core fields
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    step = models.CharField(
        max_length=15,
        choices=Step.choices,
        default=Step.PENDING,
        db_index=True,
    )
    status = models.BooleanField(
        default=True,
        db_index=True,
        help_text='Only active tasks are checked for timeouts'
    )

    # Relationships
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_tasks',
        help_text='User who created this task (never notified)'
    )
    controller = models.CharField(
        max_length=255,
        blank=True,
        help_text='Controller user id, user name or email (never notified)'
    )
    users = models.TextField(
        blank=True,
        help_text='Assignee ids, e.g. [2, 3]'
    )

    # Schedule
    period_start = models.DateField(null=True, blank=True)
    period_end = models.DateField(null=True, blank=True)
    period_type = models.CharField(
        max_length=10,
        choices=PeriodType.choices,
        default=PeriodType.NONE,
    )
    period_days = models.JSONField(
        default=list,
        blank=True,
        help_text='Weekday names (weekly), day numbers (monthly) or dates (yearly); empty = every day'
    )
    time_cloture = models.TimeField(
        null=True,
        blank=True,
        help_text='Time of day the task window closes'
    )
    time_out = models.TimeField(
        null=True,
        blank=True,
        help_text='Time of day the task becomes overdue'
    )

    # Rest (delay) allowance
    rest_time = models.TimeField(
        null=True,
        blank=True,
        help_text='Length of one rest, as HH:MM:SS'
    )
    rest_max = models.PositiveIntegerField(
        default=0,
        help_text='Number of rests each assignee may take'
    )

    # Alarm
    alarm = models.JSONField(
        null=True,
        blank=True,
        help_text='Alarm start: an offset such as {"hours": 2} from the period start, '
                  'or a time of day keyed by "daily", a weekday, a day of month or "all"'
    )

    # Timeout notification tracking
    timeout_notified_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='When the timeout notification was sent for the current cycle'
    )
    timeout_cycle_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text='Deadline of the cycle the notification belongs to'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'task'
        verbose_name_plural = 'tasks'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'timeout_notified_at'], name='tasks_status_notified_idx'),
            models.Index(fields=['period_start', 'period_end'], name='tasks_period_idx'),
        ]

    def __str__(self):
        return f"#{self.pk}: {self.name}"

    # ==========================================================================
    # Assignees
    # ==========================================================================

    @property
    def assignee_ids(self):
        """Ordered list of assignee user ids."""
        return parse_assignee_ids(self.users)

    def is_assigned_to(self, user):
        """Check if user is one of the task's assignees."""
        return user is not None and user.pk in self.assignee_ids

    def controller_user(self):
        """Resolve controller by user id, then by user name or email."""
        from apps.accounts.models import User

        controller = (self.controller or '').strip()
        if not controller:
            return None
        if controller.isdigit():
            user = User.objects.filter(pk=int(controller)).first()
            if user is not None:
                return user
        return User.objects.filter(
            models.Q(user_name=controller) | models.Q(email=controller)
        ).first()

    def excluded_recipient_ids(self):
        """Ids of the creator and the controller, who never get timeout pushes."""
        excluded = set()
        if self.created_by_id:
            excluded.add(self.created_by_id)
        controller_user = self.controller_user()
        if controller_user is not None:
            excluded.add(controller_user.pk)
        return excluded

    # ==========================================================================
    # Timeout Properties
    # ==========================================================================

    @property
    def has_timeout_configured(self):
        """Check if both time_cloture and time_out are set."""
        return self.time_cloture is not None and self.time_out is not None

    @property
    def is_timeout_notified(self):
        return self.timeout_notified_at is not None
