"""Task alarms."""

from datetime import datetime, time, timedelta, timezone as dt_timezone

import pytest

from apps.notifications.backends import locmem
from apps.notifications.models import AlarmNotification
from apps.notifications.scanner import run_timeout_check, send_alarm_notifications
from apps.tasks.models import Task
from apps.tasks.schedule import compute_alarm_start

pytestmark = pytest.mark.django_db


def test_alarm_offset_counts_from_period_start(make_task, now):
    task = make_task(alarm={'hours': 2, 'minutes': 15})

    start = compute_alarm_start(task, now)

    yesterday = now.date() - timedelta(days=1)
    assert start == datetime(yesterday.year, yesterday.month, yesterday.day, 2, 15, tzinfo=dt_timezone.utc)


def test_alarm_time_of_day_prefers_daily_then_weekday(make_task, now):
    daily = make_task(alarm={'daily': '08:00', 'all': '07:00'})
    weekday = make_task(alarm={'tuesday': '10:30'})
    other_day = make_task(alarm={'friday': '10:30'})

    assert compute_alarm_start(daily, now) == now.replace(hour=8)
    assert compute_alarm_start(weekday, now) == now.replace(hour=10, minute=30)
    assert compute_alarm_start(other_day, now) is None
    assert compute_alarm_start(make_task(), now) is None


def test_pending_task_alarms_assignees_but_not_creator(make_task, make_user, now):
    creator, worker = make_user(), make_user()
    task = make_task(
        [worker, creator], created_by=creator,
        alarm={'daily': '08:00'}, rest_max=2, rest_time=time(0, 30),
    )

    sent = send_alarm_notifications(now)

    assert sent == 1
    assert [m.token for m in locmem.outbox] == [worker.fcm_token]
    message = locmem.outbox[0]
    assert message.title == 'Task Alarm: Morning checklist'
    assert message.body.startswith('This is alarm notification #1 of 2.')
    assert message.body.endswith('1 notification(s) remaining.')
    assert message.data['notification_type'] == 'alarm'
    alarm = AlarmNotification.objects.get(task=task)
    assert alarm.user == worker
    assert alarm.notification_count == 1
    assert alarm.next_at == now + timedelta(minutes=30)


def test_alarms_stop_at_rest_max(make_task, assignee, now):
    make_task([assignee], alarm={'daily': '08:00'}, rest_max=2, rest_time=time(0, 30))

    send_alarm_notifications(now)
    send_alarm_notifications(now + timedelta(minutes=31))
    send_alarm_notifications(now + timedelta(minutes=62))

    assert len(locmem.outbox) == 2
    last = locmem.outbox[-1]
    assert last.title == '⚠️ LAST ALARM - Task Alarm: Morning checklist'
    assert last.body.startswith('⚠️ LAST ALARM: This is your final alarm notification (#2 of 2).')
    assert last.data['is_last_notification'] == 'true'
    alarm = AlarmNotification.objects.get()
    assert alarm.notification_count == 2
    assert alarm.next_at is None


def test_in_progress_task_alarms_controller_only(make_task, make_user, now):
    worker, controller = make_user(), make_user()
    task = make_task(
        [worker], controller=str(controller.pk),
        step=Task.Step.IN_PROGRESS, alarm={'daily': '08:00'},
    )

    send_alarm_notifications(now)

    assert [m.token for m in locmem.outbox] == [controller.fcm_token]
    assert locmem.outbox[0].body.startswith('This is alarm notification #1. ')
    alarm = AlarmNotification.objects.get(task=task)
    assert alarm.next_at is None


def test_completed_task_gets_no_alarm_and_due_rows_are_cleared(make_task, assignee, now):
    task = make_task(
        [assignee], step=Task.Step.COMPLETED,
        alarm={'daily': '08:00'}, rest_max=3,
    )
    AlarmNotification.objects.create(
        task=task, user=assignee, rest_max=3, notification_count=1,
        next_at=now - timedelta(minutes=1),
    )

    sent = send_alarm_notifications(now)

    assert sent == 0
    assert locmem.outbox == []
    assert AlarmNotification.objects.get(task=task).next_at is None


def test_assignee_dropped_from_pending_task_stops_getting_alarms(make_task, make_user, now):
    kept, dropped = make_user(), make_user()
    task = make_task([kept], alarm={'daily': '08:00'}, rest_max=3)
    AlarmNotification.objects.create(
        task=task, user=dropped, rest_max=3, notification_count=1,
        next_at=now - timedelta(minutes=1), cycle_at=now.replace(hour=8),
    )

    send_alarm_notifications(now)

    assert dropped.fcm_token not in [m.token for m in locmem.outbox]
    assert AlarmNotification.objects.get(task=task, user=dropped).next_at is None


def test_alarm_not_started_before_alarm_time(make_task, assignee, now):
    make_task([assignee], alarm={'daily': '10:00'}, rest_max=2)

    assert send_alarm_notifications(now) == 0
    assert not AlarmNotification.objects.exists()


def test_alarm_starts_once_per_alarm_time(make_task, assignee, now):
    make_task([assignee], alarm={'daily': '08:00'}, rest_max=0)

    send_alarm_notifications(now)
    send_alarm_notifications(now + timedelta(minutes=5))

    assert len(locmem.outbox) == 1
    assert AlarmNotification.objects.count() == 1


def test_timeout_check_runs_the_alarm_sweep(make_task, assignee, now):
    make_task([assignee], alarm={'daily': '08:00'}, time_out=None)

    summary = run_timeout_check(now)

    assert summary.alarms == 1
    assert summary.notified == 0
