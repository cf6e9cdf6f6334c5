"""
Views for tasks app.

JSON endpoints:
- Manual trigger of the task timeout check (admins)
- Rest/delay request on a notified task (assignees)
"""

from io import StringIO

from django.shortcuts import get_object_or_404
from django.contrib.auth.decorators import login_required
from django.core.exceptions import PermissionDenied, ValidationError
from django.core.management import call_command
from django.core.management.base import CommandError
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from .models import Task
from .permissions import can_trigger_timeout_check
from .services import request_delay


# =============================================================================
# Timeout Check
# =============================================================================

@login_required
@require_POST
def check_timeouts_view(request):
    """Run check_task_timeouts and return its exit code and output."""
    if not can_trigger_timeout_check(request.user):
        return JsonResponse(
            {'success': False, 'message': 'Permission denied'}, status=403
        )

    out = StringIO()
    exit_code = 0
    try:
        call_command('check_task_timeouts', stdout=out, stderr=out, no_color=True)
    except CommandError as e:
        exit_code = e.returncode
        out.write(str(e))

    return JsonResponse({
        'success': exit_code == 0,
        'exit_code': exit_code,
        'output': out.getvalue(),
    })


# =============================================================================
# Rest / Delay
# =============================================================================

@login_required
@require_POST
def request_delay_view(request, pk):
    """Take one rest on a task after its timeout notification."""
    task = get_object_or_404(Task, pk=pk)

    try:
        grant = request_delay(task, request.user)
    except PermissionDenied as e:
        return JsonResponse({'success': False, 'message': str(e)}, status=403)
    except ValidationError as e:
        return JsonResponse({'success': False, 'message': e.messages[0]}, status=400)

    delay = grant.delay
    return JsonResponse({
        'success': True,
        'message': grant.message,
        'data': {
            'delay_id': delay.pk,
            'rest_max': delay.rest_max,
            'remaining_rests': delay.rest_max,
            'is_last_time': grant.is_last_time,
        },
    })
