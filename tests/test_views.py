"""HTTP endpoints for timeout checks, rests and the notification inbox."""

from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from apps.notifications.models import (
    AlarmNotification,
    NotificationTimeout,
    log_timeout_notification,
)

pytestmark = pytest.mark.django_db


def test_admin_can_trigger_timeout_check(client, admin_user, make_task, assignee):
    make_task([assignee], period_start=None, period_end=None)
    client.force_login(admin_user)

    response = client.post(reverse('tasks:check_timeouts'))

    assert response.status_code == 200
    payload = response.json()
    assert payload['success'] is True
    assert payload['exit_code'] == 0
    assert 'Notified: 1' in payload['output']


def test_regular_user_cannot_trigger_timeout_check(client, assignee):
    client.force_login(assignee)

    response = client.post(reverse('tasks:check_timeouts'))

    assert response.status_code == 403


def test_timeout_check_requires_login(client):
    response = client.post(reverse('tasks:check_timeouts'))
    assert response.status_code == 302


def test_timeout_check_is_post_only(client, admin_user):
    client.force_login(admin_user)
    assert client.get(reverse('tasks:check_timeouts')).status_code == 405


def test_request_delay_endpoint(client, make_task, assignee):
    task = make_task([assignee], rest_max=2, timeout_notified_at=timezone.now())
    client.force_login(assignee)

    response = client.post(reverse('tasks:request_delay', args=[task.pk]))

    assert response.status_code == 200
    payload = response.json()
    assert payload['success'] is True
    assert payload['data']['remaining_rests'] == 1
    assert payload['data']['is_last_time'] is True


def test_request_delay_endpoint_errors(client, make_task, assignee, make_user):
    task = make_task([assignee], rest_max=2)

    client.force_login(assignee)
    response = client.post(reverse('tasks:request_delay', args=[task.pk]))
    assert response.status_code == 400
    assert response.json()['success'] is False

    client.force_login(make_user())
    response = client.post(reverse('tasks:request_delay', args=[task.pk]))
    assert response.status_code == 403


def test_inbox_lists_only_own_notifications(client, make_task, assignee, make_user):
    other = make_user()
    task = make_task([assignee, other])
    mine = log_timeout_notification(task, assignee, 'Start timeout notification created.')
    log_timeout_notification(task, other, 'Start timeout notification created.')
    log_timeout_notification(
        task, assignee, 'Delay repeat alarm #1 sent.',
        NotificationTimeout.NotificationType.DELAY_REPEAT_ALARM,
    )
    client.force_login(assignee)

    response = client.get(reverse('notifications:timeout_list'))
    assert response.json()['count'] == 2
    assert response.json()['unread'] == 2

    response = client.get(
        reverse('notifications:timeout_list'), {'notification_type': 'start_time'}
    )
    assert [n['id'] for n in response.json()['results']] == [mine.pk]


def test_mark_notification_read(client, make_task, assignee, make_user):
    task = make_task([assignee])
    notification = log_timeout_notification(task, assignee, 'Start timeout notification created.')
    client.force_login(assignee)

    response = client.post(reverse('notifications:timeout_read', args=[notification.pk]))

    assert response.status_code == 200
    notification.refresh_from_db()
    assert notification.read

    response = client.get(reverse('notifications:timeout_list'), {'read': 'false'})
    assert response.json()['count'] == 0

    client.force_login(make_user())
    response = client.post(reverse('notifications:timeout_read', args=[notification.pk]))
    assert response.status_code == 404


def test_alarm_inbox_and_mark_read(client, make_task, assignee, make_user):
    task = make_task([assignee])
    done = AlarmNotification.objects.create(task=task, user=assignee, notification_count=1)
    AlarmNotification.objects.create(
        task=task, user=assignee, notification_count=1, rest_max=3,
        next_at=timezone.now() + timedelta(minutes=30),
    )
    AlarmNotification.objects.create(task=task, user=make_user())
    client.force_login(assignee)

    response = client.get(reverse('notifications:alarm_list'))
    assert response.json()['count'] == 2

    response = client.get(reverse('notifications:alarm_list'), {'active': 'false'})
    assert [a['id'] for a in response.json()['results']] == [done.pk]

    response = client.post(reverse('notifications:alarm_read', args=[done.pk]))
    assert response.status_code == 200
    done.refresh_from_db()
    assert done.read
