"""
Timeout and alarm notification filters using django-filter.

Usage in views:
    filterset = NotificationTimeoutFilter(request.GET, queryset=queryset)
    notifications = filterset.qs
"""

import django_filters

from .models import AlarmNotification, NotificationTimeout


class NotificationTimeoutFilter(django_filters.FilterSet):
    """Filter a user's timeout notifications by task, type and read state."""

    task = django_filters.NumberFilter(field_name='task_id', label='Task')
    notification_type = django_filters.ChoiceFilter(
        choices=NotificationTimeout.NotificationType.choices,
        label='Type'
    )
    read = django_filters.BooleanFilter(label='Read')

    class Meta:
        model = NotificationTimeout
        fields = ['task', 'notification_type', 'read']


class AlarmNotificationFilter(django_filters.FilterSet):
    """Filter a user's alarms by task, read state and whether more are due."""

    task = django_filters.NumberFilter(field_name='task_id', label='Task')
    read = django_filters.BooleanFilter(label='Read')
    active = django_filters.BooleanFilter(
        field_name='next_at',
        lookup_expr='isnull',
        exclude=True,
        label='More alarms scheduled'
    )

    class Meta:
        model = AlarmNotification
        fields = ['task', 'read', 'active']
