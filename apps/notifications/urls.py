"""
URL configuration for notifications app.
"""

from django.urls import path
from . import views

app_name = 'notifications'

urlpatterns = [
    path('timeouts/', views.timeout_notification_list, name='timeout_list'),
    path('timeouts/<int:pk>/read/', views.mark_timeout_notification_read, name='timeout_read'),
    path('alarms/', views.alarm_notification_list, name='alarm_list'),
    path('alarms/<int:pk>/read/', views.mark_alarm_notification_read, name='alarm_read'),
]
