"""
Admin configuration for accounts app.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Custom User admin with email authentication and role management.
    """

    # List display
    list_display = (
        'email', 'user_name', 'full_name_display', 'role_display',
        'push_display', 'is_active', 'created_at'
    )
    list_filter = ('role', 'is_active', 'is_staff')
    search_fields = ('email', 'user_name', 'first_name', 'last_name', 'phone_number')
    ordering = ('first_name', 'last_name')
    list_per_page = 25

    # Fieldsets for edit view
    fieldsets = (
        (None, {'fields': ('email', 'password')}),
        (_('Personal Info'), {'fields': ('first_name', 'last_name', 'user_name', 'phone_number')}),
        (_('Organization'), {'fields': ('role',)}),
        (_('Push Notifications'), {'fields': ('fcm_token',)}),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important dates'), {
            'fields': ('last_login', 'created_at', 'updated_at'),
        }),
    )

    # Fieldsets for add view
    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': (
                'email', 'user_name', 'first_name', 'last_name',
                'password1', 'password2', 'role'
            ),
        }),
    )

    readonly_fields = ('last_login', 'created_at', 'updated_at')

    def full_name_display(self, obj):
        return obj.get_full_name()
    full_name_display.short_description = 'Name'
    full_name_display.admin_order_field = 'first_name'

    def role_display(self, obj):
        """Display role with color coding."""
        colors = {
            'super_admin': '#e74c3c',
            'admin': '#e67e22',
            'user': '#3498db',
        }
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            colors.get(obj.role, '#000'), obj.get_role_display()
        )
    role_display.short_description = 'Role'
    role_display.admin_order_field = 'role'

    def push_display(self, obj):
        """Show whether the user can receive push notifications."""
        if obj.has_push_destination:
            return format_html('<span style="color: {};">{}</span>', 'green', '✓')
        return format_html('<span style="color: {};">{}</span>', '#95a5a6', '-')
    push_display.short_description = 'Push'
