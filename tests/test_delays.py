"""Delay ledger."""

from datetime import time, timedelta

import pytest
from django.core.exceptions import ValidationError

from apps.notifications.delays import (
    consume_rest,
    due_repeat_alarms,
    get_delay,
    grant_or_refresh_delay,
    has_active_delay,
    is_last_rest,
    record_repeat_alarm,
)
from apps.notifications.models import Delay

pytestmark = pytest.mark.django_db


def test_grant_creates_row_with_task_allowance(make_task, assignee, now):
    task = make_task([assignee], rest_max=3, rest_time=time(0, 15))

    delay = grant_or_refresh_delay(task, assignee, cycle_at=now)

    assert delay.pk is not None
    assert delay.rest_max == 3
    assert delay.rest_time == time(0, 15)
    assert delay.cycle_at == now
    assert has_active_delay(task)


def test_grant_keeps_remaining_rests_within_the_same_cycle(make_task, assignee, now):
    task = make_task([assignee], rest_max=3)
    grant_or_refresh_delay(task, assignee, cycle_at=now)
    Delay.objects.filter(task=task).update(rest_max=0)

    delay = grant_or_refresh_delay(task, assignee, cycle_at=now)

    assert delay.rest_max == 0
    assert Delay.objects.filter(task=task, user=assignee).count() == 1


def test_grant_resets_allowance_for_a_new_cycle(make_task, assignee, now):
    task = make_task([assignee], rest_max=3)
    grant_or_refresh_delay(task, assignee, cycle_at=now - timedelta(days=1))
    Delay.objects.filter(task=task).update(rest_max=0)

    delay = grant_or_refresh_delay(task, assignee, cycle_at=now)

    assert delay.rest_max == 3


def test_no_rows_or_zero_rows_are_not_active(make_task, assignee, now):
    task = make_task([assignee], rest_max=0)
    assert not has_active_delay(task)

    grant_or_refresh_delay(task, assignee, cycle_at=now)
    assert not has_active_delay(task)


def test_is_last_rest():
    assert is_last_rest(Delay(rest_max=1))
    assert not is_last_rest(Delay(rest_max=0))
    assert not is_last_rest(Delay(rest_max=2))
    assert not is_last_rest(None)


def test_consume_rest_decrements_and_schedules_alarm(make_task, assignee, now):
    task = make_task([assignee], rest_max=2, rest_time=time(0, 30))
    grant_or_refresh_delay(task, assignee, cycle_at=now)

    delay = consume_rest(task, assignee, now)

    assert delay.rest_max == 1
    assert delay.next_alarm_at == now + timedelta(minutes=30)
    assert delay.alarm_count == 0


def test_consume_rest_without_row_starts_from_task_allowance(make_task, assignee, now):
    task = make_task([assignee], rest_max=2)

    delay = consume_rest(task, assignee, now)

    assert delay.rest_max == 1
    assert get_delay(task, assignee).pk == delay.pk


def test_consume_rest_refused_when_none_left(make_task, assignee, now):
    task = make_task([assignee], rest_max=2)
    Delay.objects.create(task=task, user=assignee, rest_max=0)

    with pytest.raises(ValidationError):
        consume_rest(task, assignee, now)


def test_due_repeat_alarms_and_record(make_task, assignee, now):
    task = make_task([assignee], rest_max=2, rest_time=time(0, 30))
    due = Delay.objects.create(
        task=task, user=assignee, rest_max=1, rest_time=time(0, 30),
        next_alarm_at=now - timedelta(minutes=1),
    )
    other = make_task([assignee], rest_max=2)
    Delay.objects.create(
        task=other, user=assignee, rest_max=1, rest_time=time(0, 30),
        next_alarm_at=now + timedelta(minutes=5),
    )
    Delay.objects.create(
        task=other, user=assignee, rest_max=0, rest_time=time(0, 30),
        next_alarm_at=now - timedelta(minutes=5),
    )

    assert list(due_repeat_alarms(now)) == [due]

    record_repeat_alarm(due, now)
    assert due.alarm_count == 1
    assert due.last_alarm_at == now
    assert due.next_alarm_at == now + timedelta(minutes=30)
