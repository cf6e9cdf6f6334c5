"""
Idempotency guard for timeout escalation.

The task's timeout_notified_at marker allows at most one escalation per
cycle. timeout_cycle_at records which deadline the marker belongs to, so a
marker left over from an earlier cycle can be recognised and cleared.
"""

from django.utils import timezone


def is_eligible_for_scan(task, active_delay):
    """
    Keep a task in the scan if it was never notified, or if it was notified
    and a rest is still running (the rest must eventually be escalated).
    """
    if task.timeout_notified_at is None:
        return True
    return bool(active_delay)


def mark_notified(task, at, cycle_at=None):
    """Record that the timeout notification for this cycle went out."""
    task.timeout_notified_at = at
    task.timeout_cycle_at = cycle_at
    task.save(update_fields=['timeout_notified_at', 'timeout_cycle_at', 'updated_at'])


def is_stale(task, deadline):
    """
    True if the marker belongs to an earlier day than deadline.

    Cycles are compared by local date, so moving time_out later on the same
    day does not open a new cycle. A marker without a recorded cycle is never
    stale, and a task without a period never rolls over.
    """
    if task.period_type == task.PeriodType.NONE:
        return False
    if task.timeout_notified_at is None or task.timeout_cycle_at is None:
        return False
    if deadline is None:
        return False
    return timezone.localdate(deadline) > timezone.localdate(task.timeout_cycle_at)


def roll_over(task):
    """Clear the marker so the new cycle can be escalated."""
    task.timeout_notified_at = None
    task.timeout_cycle_at = None
    task.save(update_fields=['timeout_notified_at', 'timeout_cycle_at', 'updated_at'])
