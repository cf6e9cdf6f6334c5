"""
Shared fixtures for the timeout engine tests.

All tests run against config.settings.test: in-memory SQLite, UTC and the
locmem push notifier.
"""

from datetime import datetime, time, timedelta, timezone as dt_timezone

import pytest
from django.core.cache import cache

from apps.accounts.models import User
from apps.notifications.backends import locmem
from apps.tasks.models import Task


@pytest.fixture(autouse=True)
def clean_outbox_and_cache():
    locmem.outbox.clear()
    cache.clear()
    yield
    locmem.outbox.clear()
    cache.clear()


@pytest.fixture
def now():
    """Today 09:00 UTC."""
    return datetime(2026, 3, 10, 9, 0, tzinfo=dt_timezone.utc)


@pytest.fixture
def make_user(db):
    counter = {'n': 0}

    def factory(**kwargs):
        counter['n'] += 1
        n = counter['n']
        kwargs.setdefault('email', f'user{n}@example.com')
        kwargs.setdefault('user_name', f'user{n}')
        kwargs.setdefault('fcm_token', f'device-token-{n}')
        password = kwargs.pop('password', 'testpass123')
        return User.objects.create_user(password=password, **kwargs)

    return factory


@pytest.fixture
def assignee(make_user):
    return make_user()


@pytest.fixture
def admin_user(make_user):
    return make_user(role=User.Role.ADMIN, fcm_token=None)


@pytest.fixture
def make_task(db, now):
    """
    Active task window from yesterday to tomorrow, overdue since 00:00,
    closing at 18:00.
    """
    today = now.date()

    def factory(assignees=(), **kwargs):
        if 'users' not in kwargs:
            kwargs['users'] = str([user.pk for user in assignees])
        kwargs.setdefault('name', 'Morning checklist')
        kwargs.setdefault('period_start', today - timedelta(days=1))
        kwargs.setdefault('period_end', today + timedelta(days=1))
        kwargs.setdefault('period_type', Task.PeriodType.DAILY)
        kwargs.setdefault('time_out', time(0, 0))
        kwargs.setdefault('time_cloture', time(18, 0))
        kwargs.setdefault('rest_time', time(0, 30))
        kwargs.setdefault('rest_max', 0)
        return Task.objects.create(**kwargs)

    return factory
