"""
Views for notifications app.

- Timeout notification inbox of the logged-in user
- Alarm notification inbox of the logged-in user
- Mark a timeout or alarm notification as read
"""

from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.core.paginator import Paginator
from django.http import JsonResponse
from django.views.decorators.http import require_GET, require_POST

from .filters import AlarmNotificationFilter, NotificationTimeoutFilter
from .models import AlarmNotification, NotificationTimeout

PAGE_SIZE = 50


def _serialize(notification):
    return {
        'id': notification.pk,
        'task_id': notification.task_id,
        'task_name': notification.task.name,
        'notification_type': notification.notification_type,
        'description': notification.description,
        'read': notification.read,
        'created_at': notification.created_at.isoformat(),
    }


def _serialize_alarm(alarm):
    return {
        'id': alarm.pk,
        'task_id': alarm.task_id,
        'task_name': alarm.task.name,
        'notification_count': alarm.notification_count,
        'rest_max': alarm.rest_max,
        'next_at': alarm.next_at.isoformat() if alarm.next_at else None,
        'description': alarm.description,
        'read': alarm.read,
        'created_at': alarm.created_at.isoformat(),
    }


def _inbox(request, queryset, filterset_class, serialize):
    filterset = filterset_class(request.GET, queryset=queryset)
    if not filterset.is_valid():
        return JsonResponse(
            {'success': False, 'errors': filterset.errors.get_json_data()}, status=400
        )

    paginator = Paginator(filterset.qs, PAGE_SIZE)
    page = paginator.get_page(request.GET.get('page'))

    return JsonResponse({
        'success': True,
        'count': paginator.count,
        'unread': queryset.filter(read=False).count(),
        'page': page.number,
        'num_pages': paginator.num_pages,
        'results': [serialize(n) for n in page.object_list],
    })


def _mark_read(request, model, pk):
    notification = get_object_or_404(model, pk=pk, user=request.user)
    if not notification.read:
        notification.read = True
        notification.save(update_fields=['read'])
    return JsonResponse({'success': True, 'id': notification.pk, 'read': True})


@login_required
@require_GET
def timeout_notification_list(request):
    """List the current user's timeout notifications, newest first."""
    queryset = (
        NotificationTimeout.objects
        .filter(user=request.user)
        .select_related('task')
    )
    return _inbox(request, queryset, NotificationTimeoutFilter, _serialize)


@login_required
@require_POST
def mark_timeout_notification_read(request, pk):
    """Mark one of the current user's notifications as read."""
    return _mark_read(request, NotificationTimeout, pk)


@login_required
@require_GET
def alarm_notification_list(request):
    """List the current user's alarms, newest first."""
    queryset = (
        AlarmNotification.objects
        .filter(user=request.user)
        .select_related('task')
    )
    return _inbox(request, queryset, AlarmNotificationFilter, _serialize_alarm)


@login_required
@require_POST
def mark_alarm_notification_read(request, pk):
    return _mark_read(request, AlarmNotification, pk)
