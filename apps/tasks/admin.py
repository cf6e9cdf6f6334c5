"""
Admin configuration for tasks app.
"""

from django.contrib import admin
from django.utils.html import format_html

from apps.notifications.models import Delay
from .models import Task


class DelayInline(admin.TabularInline):
    """Inline admin for rest ledger rows on task detail."""
    model = Delay
    extra = 0
    fields = ('user', 'rest_time', 'rest_max', 'next_alarm_at', 'alarm_count', 'last_alarm_at')
    readonly_fields = ('next_alarm_at', 'alarm_count', 'last_alarm_at')
    raw_id_fields = ('user',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    """Admin for Task model."""

    list_display = (
        'id', 'name', 'step_display', 'status', 'period_type',
        'time_out', 'time_cloture', 'rest_max', 'timeout_display', 'created_at'
    )
    list_filter = ('status', 'step', 'period_type', 'created_at')
    search_fields = ('name', 'description', 'controller')
    ordering = ('-created_at',)
    date_hierarchy = 'created_at'

    readonly_fields = ('created_at', 'updated_at')

    fieldsets = (
        (None, {
            'fields': ('name', 'description', 'step', 'status')
        }),
        ('Assignment', {
            'fields': ('created_by', 'controller', 'users')
        }),
        ('Schedule', {
            'fields': (
                'period_start', 'period_end', 'period_type', 'period_days',
                'time_out', 'time_cloture', 'alarm'
            )
        }),
        ('Rests', {
            'fields': ('rest_time', 'rest_max')
        }),
        ('Tracking', {
            'fields': ('timeout_notified_at', 'timeout_cycle_at'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    inlines = [DelayInline]
    actions = ['clear_timeout_marker']

    def get_queryset(self, request):
        """Optimize with select_related."""
        return super().get_queryset(request).select_related('created_by')

    def step_display(self, obj):
        """Display step with color coding."""
        colors = {
            'pending': '#6B7280',
            'in_progress': '#3B82F6',
            'completed': '#10B981',
        }
        color = colors.get(obj.step, '#6B7280')
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.get_step_display()
        )
    step_display.short_description = 'Step'
    step_display.admin_order_field = 'step'

    def timeout_display(self, obj):
        """Show when the timeout was last notified."""
        if obj.timeout_notified_at:
            return format_html(
                '<span style="color: {};">{}</span>',
                '#DC2626',
                obj.timeout_notified_at.strftime('%Y-%m-%d %H:%M')
            )
        return '-'
    timeout_display.short_description = 'Timeout Notified'

    @admin.action(description='Clear timeout marker')
    def clear_timeout_marker(self, request, queryset):
        updated = queryset.update(timeout_notified_at=None, timeout_cycle_at=None)
        self.message_user(request, f'{updated} task(s) will be escalated again.')
