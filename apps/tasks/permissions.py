"""
Permission helpers for tasks app.

Role-based access control for timeout operations:
- Super Admin / Admin: may trigger the timeout check manually
- Assignee: may request a rest (delay) on a task assigned to them
"""


def can_trigger_timeout_check(user):
    """Check if user may run the timeout check from the HTTP endpoint."""
    if not user or not user.is_authenticated:
        return False
    return user.can_trigger_timeout_check()


def can_request_delay(user, task):
    """
    Check if user can request a rest on task.

    Only active assignees of an active task may.
    """
    if not user or not user.is_authenticated or not user.is_active:
        return False
    if not task.status:
        return False
    return task.is_assigned_to(user)
