"""
Timeout scanner.

Periodic job that finds tasks whose timeout has been reached and escalates
each one at most once per cycle. Also sweeps running rests for due repeat
alarms, sends due timeout reminders and task alarms.
"""

import logging
from dataclasses import asdict, dataclass
from itertools import groupby
from operator import attrgetter
from uuid import uuid4

from django.conf import settings
from django.core.cache import cache
from django.utils import timezone

from apps.tasks.models import Task
from apps.tasks.schedule import (
    compute_alarm_start,
    compute_closure_deadline,
    compute_timeout_deadline,
    time_remaining_display,
)

from . import guard
from .alarms import (
    alarm_recipients,
    alarm_tasks,
    due_alarms,
    has_alarm_rows,
    is_capped,
    record_alarm,
    should_receive_alarm,
    stop_alarms,
)
from .delays import due_repeat_alarms, has_active_delay, record_repeat_alarm
from .dispatch import (
    dispatch_alarm,
    dispatch_repeat_alarm,
    dispatch_timeout,
    dispatch_timeout_repeat,
)
from .exceptions import ScanAlreadyRunning
from .models import AlarmNotification
from .reminders import close_reminder, due_timeout_repeats, is_exhausted, record_timeout_repeat
from .services import describe_alarm, describe_timeout_repeat

logger = logging.getLogger(__name__)


@dataclass
class ScanSummary:
    notified: int = 0
    skipped: int = 0
    pending: int = 0
    considered: int = 0
    repeat_alarms: int = 0
    timeout_repeats: int = 0
    alarms: int = 0

    def as_dict(self):
        return asdict(self)

    def __str__(self):
        return (
            f"considered={self.considered} notified={self.notified} "
            f"skipped={self.skipped} pending={self.pending} "
            f"repeat_alarms={self.repeat_alarms} timeout_repeats={self.timeout_repeats} "
            f"alarms={self.alarms}"
        )


def candidate_tasks():
    """Active tasks with both a closure time and a timeout configured."""
    return (
        Task.objects
        .filter(status=True, time_cloture__isnull=False, time_out__isnull=False)
        .select_related('created_by')
        .order_by('pk')
    )


def _roll_over_if_stale(task, now):
    if task.timeout_notified_at is None:
        return
    deadline = compute_timeout_deadline(task, now)
    if guard.is_stale(task, deadline):
        logger.info(
            "Task %s: clearing timeout marker from cycle %s",
            task.pk, task.timeout_cycle_at,
        )
        guard.roll_over(task)


def _process_task(task, now, active_delay, notifier, summary):
    if active_delay:
        summary.skipped += 1
        return

    deadline = compute_timeout_deadline(task, now)
    if deadline is None:
        logger.debug("Task %s: no deadline applies today", task.pk)
        summary.skipped += 1
        return

    if now < deadline:
        summary.pending += 1
        return

    if task.timeout_notified_at is not None:
        return

    dispatch_timeout(task, now, cycle_at=deadline, notifier=notifier)
    guard.mark_notified(task, now, deadline)
    summary.notified += 1


def scan_task_timeouts(now, notifier=None):
    """
    Escalate every task whose timeout deadline has passed.

    A failure while processing one task is logged and counted as skipped;
    the scan always runs to completion.

    Args:
        now: Current time
        notifier: Notifier instance; the configured backend when omitted

    Returns:
        ScanSummary
    """
    summary = ScanSummary()

    for task in candidate_tasks():
        try:
            _roll_over_if_stale(task, now)
            active_delay = has_active_delay(task)
            if not guard.is_eligible_for_scan(task, active_delay):
                continue

            summary.considered += 1
            _process_task(task, now, active_delay, notifier, summary)
        except Exception:
            summary.skipped += 1
            logger.exception("Timeout check failed for task %s", task.pk)

    logger.info("Timeout scan finished: %s", summary)
    return summary


def send_delay_repeat_alarms(now, notifier=None):
    """
    Ping users whose running rest has elapsed and schedule the next ping.

    Returns:
        Number of alarms delivered
    """
    sent = 0
    for delay in due_repeat_alarms(now):
        try:
            if dispatch_repeat_alarm(delay, now, notifier=notifier):
                sent += 1
            record_repeat_alarm(delay, now)
        except Exception:
            logger.exception("Repeat alarm failed for delay %s", delay.pk)
    return sent


def send_timeout_repeats(now, notifier=None):
    """
    Send the timeout reminders that are due and schedule the following ones.

    Rows of inactive tasks, of users without a device token and rows past
    their rest_max are closed without sending.

    Returns:
        Number of reminders delivered
    """
    sent = 0
    for row in due_timeout_repeats(now):
        try:
            if not row.task.status or is_exhausted(row):
                close_reminder(row)
                continue
            if not row.user.has_push_destination:
                logger.info("Timeout reminder %s: user %s has no device token", row.pk, row.user_id)
                close_reminder(row)
                continue

            if dispatch_timeout_repeat(row, now, notifier=notifier):
                sent += 1
            record_timeout_repeat(
                row, now, describe_timeout_repeat(row, row.repeat_count + 1, now)
            )
        except Exception:
            logger.exception("Timeout reminder %s failed", row.pk)
    return sent


def _send_due_alarms(now, notifier):
    sent = 0
    for task_id, rows in groupby(due_alarms(now), key=attrgetter('task_id')):
        rows = list(rows)
        task = rows[0].task
        if not task.status:
            continue
        if task.step == Task.Step.COMPLETED:
            stop_alarms(rows)
            continue

        for alarm in rows:
            try:
                user = alarm.user
                if (
                    not user.has_push_destination
                    or not should_receive_alarm(task, user)
                    or is_capped(alarm)
                ):
                    stop_alarms([alarm])
                    continue

                number = alarm.notification_count + 1
                time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
                if dispatch_alarm(alarm, now, notifier=notifier):
                    sent += 1
                record_alarm(alarm, now, describe_alarm(alarm, time_remaining, number, now))
            except Exception:
                logger.exception("Alarm %s for task %s failed", alarm.pk, task_id)
    return sent


def _start_alarms(now, notifier):
    sent = 0
    for task in alarm_tasks():
        try:
            alarm_start = compute_alarm_start(task, now)
            if alarm_start is None or now < alarm_start:
                continue
            if has_alarm_rows(task, alarm_start):
                continue

            time_remaining = time_remaining_display(now, compute_closure_deadline(task, now))
            for user in alarm_recipients(task):
                alarm = AlarmNotification.objects.create(
                    task=task,
                    user=user,
                    rest_max=task.rest_max or 0,
                    cycle_at=alarm_start,
                )
                if dispatch_alarm(alarm, now, notifier=notifier):
                    sent += 1
                record_alarm(alarm, now, describe_alarm(alarm, time_remaining, 1, now))
            logger.info("Task %s: alarm started for cycle %s", task.pk, alarm_start)
        except Exception:
            logger.exception("Alarm start failed for task %s", task.pk)
    return sent


def send_alarm_notifications(now, notifier=None):
    """
    Re-send due alarms, then start the alarm of tasks whose alarm time came.

    Returns:
        Number of alarms delivered
    """
    return _send_due_alarms(now, notifier) + _start_alarms(now, notifier)


def _release_lock(key, token):
    if cache.get(key) == token:
        cache.delete(key)
    else:
        logger.warning("Timeout check lock %s was taken over; leaving it in place", key)


def run_timeout_check(now=None, notifier=None):
    """
    Run every sweep and the timeout scan under the scan lock.

    Order: alarms, delay repeat alarms, timeout reminders, timeout scan.
    The lock is released only if it still holds this run's token.

    Raises:
        ScanAlreadyRunning: If another run holds the lock
    """
    now = now or timezone.now()
    key = settings.TASK_TIMEOUT_SCAN_LOCK_KEY
    token = uuid4().hex

    if not cache.add(key, token, settings.TASK_TIMEOUT_SCAN_LOCK_SECONDS):
        raise ScanAlreadyRunning('Another timeout check is already running.')

    try:
        alarms = send_alarm_notifications(now, notifier=notifier)
        repeat_alarms = send_delay_repeat_alarms(now, notifier=notifier)
        timeout_repeats = send_timeout_repeats(now, notifier=notifier)
        summary = scan_task_timeouts(now, notifier=notifier)
        summary.alarms = alarms
        summary.repeat_alarms = repeat_alarms
        summary.timeout_repeats = timeout_repeats
    finally:
        _release_lock(key, token)

    return summary
