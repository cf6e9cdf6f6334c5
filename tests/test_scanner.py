"""Timeout scanner."""

from datetime import time, timedelta

import pytest
from django.conf import settings
from django.core.cache import cache

from apps.notifications import scanner
from apps.notifications.backends import locmem
from apps.notifications.exceptions import ScanAlreadyRunning
from apps.notifications.models import Delay, NotificationTimeout
from apps.notifications.scanner import (
    ScanSummary,
    run_timeout_check,
    scan_task_timeouts,
    send_delay_repeat_alarms,
    send_timeout_repeats,
)
from apps.tasks.models import Task

pytestmark = pytest.mark.django_db


def midnight(now):
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def test_overdue_task_is_notified_once(make_task, assignee, now):
    task = make_task([assignee], rest_max=3)

    summary = scan_task_timeouts(now)

    assert (summary.notified, summary.skipped) == (1, 0)
    assert len(locmem.outbox) == 1
    assert locmem.outbox[0].token == assignee.fcm_token
    delay = Delay.objects.get(task=task, user=assignee)
    assert delay.rest_max == 3
    assert NotificationTimeout.objects.filter(task=task, user=assignee).count() == 1
    task.refresh_from_db()
    assert task.timeout_notified_at == now
    assert task.timeout_cycle_at == midnight(now)


def test_notified_task_without_active_delay_is_not_rescanned(make_task, assignee, now):
    task = make_task([assignee], rest_max=0)
    scan_task_timeouts(now)
    task.refresh_from_db()
    notified_at = task.timeout_notified_at

    later = now + timedelta(minutes=5)
    summary = scan_task_timeouts(later)

    assert summary.notified == 0
    assert summary.considered == 0
    assert len(locmem.outbox) == 1
    task.refresh_from_db()
    assert task.timeout_notified_at == notified_at


def test_task_not_yet_due_is_left_alone(make_task, assignee, now):
    task = make_task([assignee], rest_max=2, time_out=time(12, 0))

    summary = scan_task_timeouts(now)

    assert (summary.notified, summary.skipped, summary.pending) == (0, 0, 1)
    assert locmem.outbox == []
    assert not Delay.objects.exists()
    assert not NotificationTimeout.objects.exists()
    task.refresh_from_db()
    assert task.timeout_notified_at is None


def test_active_delay_blocks_escalation(make_task, assignee, now):
    task = make_task([assignee], rest_max=2)
    Delay.objects.create(task=task, user=assignee, rest_max=2)

    summary = scan_task_timeouts(now)

    assert (summary.notified, summary.skipped) == (0, 1)
    assert locmem.outbox == []
    task.refresh_from_db()
    assert task.timeout_notified_at is None


def test_notified_task_with_active_delay_is_skipped(make_task, assignee, now):
    task = make_task([assignee], rest_max=2)
    scan_task_timeouts(now)

    summary = scan_task_timeouts(now + timedelta(minutes=1))

    assert (summary.considered, summary.skipped, summary.notified) == (1, 1, 0)
    assert len(locmem.outbox) == 1


def test_task_outside_period_is_skipped(make_task, assignee, now):
    make_task([assignee], period_end=now.date() - timedelta(days=1))

    summary = scan_task_timeouts(now)

    assert (summary.notified, summary.skipped) == (0, 1)


def test_inactive_or_unconfigured_tasks_are_not_selected(make_task, assignee, now):
    make_task([assignee], status=False)
    make_task([assignee], time_out=None)

    summary = scan_task_timeouts(now)

    assert summary.considered == 0
    assert locmem.outbox == []


def test_one_failing_task_does_not_stop_the_scan(make_task, make_user, now, monkeypatch):
    a = make_task([make_user()], name='A')
    b = make_task([make_user()], name='B')
    c = make_task([make_user()], name='C')
    real_dispatch = scanner.dispatch_timeout

    def flaky_dispatch(task, *args, **kwargs):
        if task.pk == b.pk:
            raise RuntimeError('corrupt row')
        return real_dispatch(task, *args, **kwargs)

    monkeypatch.setattr(scanner, 'dispatch_timeout', flaky_dispatch)

    summary = scan_task_timeouts(now)

    assert (summary.notified, summary.skipped) == (2, 1)
    for task in (a, b, c):
        task.refresh_from_db()
    assert a.timeout_notified_at == now
    assert b.timeout_notified_at is None
    assert c.timeout_notified_at == now


def test_unavailable_transport_still_marks_task(make_task, assignee, now, settings):
    settings.PUSH_NOTIFIER_BACKEND = 'apps.notifications.backends.fcm.FCMNotifier'
    settings.FIREBASE_CREDENTIALS_FILE = ''
    settings.FIREBASE_CREDENTIALS_JSON = ''
    task = make_task([assignee], rest_max=2)

    summary = scan_task_timeouts(now)

    assert summary.notified == 1
    task.refresh_from_db()
    assert task.timeout_notified_at == now
    assert not Delay.objects.exists()


def test_marker_from_previous_day_rolls_over(make_task, assignee, now):
    yesterday = now - timedelta(days=1)
    task = make_task(
        [assignee],
        rest_max=0,
        timeout_notified_at=yesterday,
        timeout_cycle_at=midnight(yesterday),
    )

    summary = scan_task_timeouts(now)

    assert summary.notified == 1
    assert len(locmem.outbox) == 1
    task.refresh_from_db()
    assert task.timeout_notified_at == now
    assert task.timeout_cycle_at == midnight(now)


def test_marker_without_cycle_is_kept(make_task, assignee, now):
    yesterday = now - timedelta(days=1)
    task = make_task([assignee], rest_max=0, timeout_notified_at=yesterday)

    summary = scan_task_timeouts(now)

    assert summary.notified == 0
    task.refresh_from_db()
    assert task.timeout_notified_at == yesterday


def test_repeat_alarm_sweep_pings_due_delays(make_task, make_user, now):
    due_user, waiting_user = make_user(), make_user()
    task = make_task([due_user, waiting_user], rest_max=3, rest_time=time(0, 30))
    due = Delay.objects.create(
        task=task, user=due_user, rest_max=2, rest_time=time(0, 30),
        next_alarm_at=now - timedelta(minutes=1),
    )
    Delay.objects.create(
        task=task, user=waiting_user, rest_max=2, rest_time=time(0, 30),
        next_alarm_at=now + timedelta(minutes=10),
    )

    sent = send_delay_repeat_alarms(now)

    assert sent == 1
    assert [m.token for m in locmem.outbox] == [due_user.fcm_token]
    assert locmem.outbox[0].title == 'Task Reminder: Morning checklist'
    due.refresh_from_db()
    assert due.alarm_count == 1
    assert due.next_alarm_at == now + timedelta(minutes=30)


def test_run_timeout_check_reports_summary(make_task, assignee, now):
    make_task([assignee], rest_max=1)

    summary = run_timeout_check(now)

    assert summary.notified == 1
    assert summary.as_dict()['notified'] == 1
    assert cache.get(settings.TASK_TIMEOUT_SCAN_LOCK_KEY) is None


def test_second_run_is_refused_while_locked(make_task, assignee, now):
    make_task([assignee])
    cache.add(settings.TASK_TIMEOUT_SCAN_LOCK_KEY, 'running', 60)

    with pytest.raises(ScanAlreadyRunning):
        run_timeout_check(now)

    assert locmem.outbox == []


def test_task_without_period_is_escalated_only_once(make_task, assignee, now):
    make_task(
        [assignee],
        period_type=Task.PeriodType.NONE,
        period_end=now.date() + timedelta(days=5),
    )

    for day in range(3):
        scan_task_timeouts(now + timedelta(days=day))

    assert len(locmem.outbox) == 1
    assert NotificationTimeout.objects.count() == 1


def test_moving_time_out_later_same_day_does_not_re_escalate(make_task, assignee, now):
    task = make_task([assignee], rest_max=0)
    scan_task_timeouts(now)

    Task.objects.filter(pk=task.pk).update(time_out=time(12, 0))
    summary = scan_task_timeouts(now.replace(hour=13))

    assert summary.notified == 0
    assert len(locmem.outbox) == 1
    task.refresh_from_db()
    assert task.timeout_notified_at == now


def test_timeout_reminders_follow_the_first_notification(make_task, assignee, now):
    make_task([assignee], rest_max=2, rest_time=time(0, 30))

    run_timeout_check(now)
    second = run_timeout_check(now + timedelta(minutes=31))
    third = run_timeout_check(now + timedelta(minutes=62))
    run_timeout_check(now + timedelta(minutes=93))

    assert (second.timeout_repeats, third.timeout_repeats) == (1, 1)
    assert [m.title for m in locmem.outbox] == [
        'Task Start Time: Morning checklist',
        'Task Timeout Reminder: Morning checklist',
        '⚠️ LAST TIME - Task Timeout Reminder: Morning checklist',
    ]
    last = locmem.outbox[-1]
    assert last.body.endswith('This is your last timeout reminder.')
    assert last.data['notification_type'] == 'timeout_repeat'
    assert last.data['repeat_count'] == '2'
    assert last.data['is_last_time'] == 'true'
    assert not NotificationTimeout.objects.filter(next_at__isnull=False).exists()


def test_first_notification_schedules_a_reminder(make_task, assignee, now):
    task = make_task([assignee], rest_max=2, rest_time=time(0, 30))

    scan_task_timeouts(now)

    row = NotificationTimeout.objects.get(task=task)
    assert row.next_at == now + timedelta(minutes=30)
    assert (row.rest_max, row.repeat_count) == (2, 0)
    assert 'Next notification at: 2026-03-10 09:30:00' in row.description


def test_no_reminder_without_rest_allowance(make_task, assignee, now):
    task = make_task([assignee], rest_max=0)

    scan_task_timeouts(now)

    assert NotificationTimeout.objects.get(task=task).next_at is None


def test_reminders_of_inactive_task_are_closed(make_task, assignee, now):
    task = make_task([assignee], rest_max=2, rest_time=time(0, 30))
    scan_task_timeouts(now)
    Task.objects.filter(pk=task.pk).update(status=False)

    sent = send_timeout_repeats(now + timedelta(minutes=31))

    assert sent == 0
    assert len(locmem.outbox) == 1
    assert NotificationTimeout.objects.get(task=task).next_at is None


def test_lock_taken_over_by_another_run_is_left_alone(now, monkeypatch):
    key = settings.TASK_TIMEOUT_SCAN_LOCK_KEY

    def overlapping_scan(*args, **kwargs):
        cache.set(key, 'other-run', 60)
        return ScanSummary()

    monkeypatch.setattr(scanner, 'scan_task_timeouts', overlapping_scan)

    run_timeout_check(now)

    assert cache.get(key) == 'other-run'
