"""
Admin configuration for notifications app.
"""

from django.contrib import admin
from .models import AlarmNotification, Delay, NotificationTimeout


@admin.register(Delay)
class DelayAdmin(admin.ModelAdmin):
    """Admin for the rest ledger."""

    list_display = (
        'task', 'user', 'rest_time', 'rest_max', 'next_alarm_at',
        'alarm_count', 'cycle_at', 'updated_at'
    )
    list_filter = ('updated_at',)
    search_fields = ('task__name', 'user__email', 'user__user_name')
    ordering = ('-updated_at',)
    raw_id_fields = ('task', 'user')
    readonly_fields = ('alarm_count', 'last_alarm_at', 'created_at', 'updated_at')

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('task', 'user')


@admin.register(NotificationTimeout)
class NotificationTimeoutAdmin(admin.ModelAdmin):
    """Admin for the timeout notification log."""

    list_display = (
        'task', 'user', 'notification_type', 'description_preview',
        'next_at', 'read', 'created_at'
    )
    list_filter = ('notification_type', 'read', 'created_at')
    search_fields = ('task__name', 'description', 'user__email')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = (
        'task', 'user', 'notification_type', 'description',
        'next_at', 'rest_max', 'repeat_count', 'read', 'created_at'
    )

    def description_preview(self, obj):
        """Show the first line of the description."""
        return obj.description.splitlines()[0] if obj.description else ''
    description_preview.short_description = 'Description'

    def has_add_permission(self, request):
        """Prevent manual creation of notification logs."""
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('task', 'user')


@admin.register(AlarmNotification)
class AlarmNotificationAdmin(admin.ModelAdmin):
    """Admin for task alarms."""

    list_display = (
        'task', 'user', 'notification_count', 'rest_max', 'next_at',
        'cycle_at', 'read', 'created_at'
    )
    list_filter = ('read', 'created_at')
    search_fields = ('task__name', 'user__email', 'user__user_name')
    ordering = ('-created_at',)
    raw_id_fields = ('task', 'user')
    readonly_fields = ('notification_count', 'description', 'created_at', 'updated_at')
    actions = ['stop_alarms']

    @admin.action(description='Stop selected alarms')
    def stop_alarms(self, request, queryset):
        updated = queryset.update(next_at=None)
        self.message_user(request, f'{updated} alarm(s) stopped.')

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('task', 'user')
