"""
URL configuration for tasks app.

Includes:
- Manual timeout check
- Rest/delay requests
"""

from django.urls import path
from . import views

app_name = 'tasks'

urlpatterns = [
    # Timeout check (admins)
    path('timeouts/check/', views.check_timeouts_view, name='check_timeouts'),

    # Rest/delay (assignees)
    path('<int:pk>/delay/', views.request_delay_view, name='request_delay'),
]
