"""
Service layer for tasks app.

Services:
- request_delay: Let an assignee take a rest after a timeout notification
"""

import logging
from dataclasses import dataclass

from django.utils import timezone
from django.db import transaction
from django.core.exceptions import PermissionDenied, ValidationError

from apps.notifications.delays import consume_rest, is_last_rest

from .models import Task
from .permissions import can_request_delay

logger = logging.getLogger(__name__)

LAST_TIME_PREFIX = '⚠️ LAST TIME: '


@dataclass
class DelayGrant:
    delay: object
    is_last_time: bool
    message: str


def request_delay(task, user, now=None):
    """
    Use one of the user's rests on a task whose timeout was notified.

    The task's timeout marker is cleared so the task is escalated again
    once all rests are used up.

    Args:
        task: Task instance
        user: User asking for the rest
        now: Current time (defaults to timezone.now())

    Returns:
        DelayGrant with the updated Delay row

    Raises:
        PermissionDenied: If user is not an assignee of the task
        ValidationError: If the timeout was not notified or no rest remains
    """
    now = now or timezone.now()

    if not can_request_delay(user, task):
        raise PermissionDenied("You are not assigned to this task.")

    with transaction.atomic():
        task = Task.objects.select_for_update().get(pk=task.pk)

        if task.timeout_notified_at is None:
            raise ValidationError(
                "This task has not reached its timeout yet. Rest/delay cannot be requested."
            )

        delay = consume_rest(task, user, now)
        task.timeout_notified_at = None
        task.save(update_fields=['timeout_notified_at', 'updated_at'])

    is_last_time = is_last_rest(delay)
    message = 'Rest/delay requested successfully.'
    if is_last_time:
        message = f'{LAST_TIME_PREFIX}{message} This is your last rest/delay opportunity.'

    logger.info(
        "User %s took a rest on task %s (%s left)", user.pk, task.pk, delay.rest_max
    )
    return DelayGrant(delay=delay, is_last_time=is_last_time, message=message)
