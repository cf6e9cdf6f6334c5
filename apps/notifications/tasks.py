"""
Scheduled tasks for notifications app.

Background jobs run by the Django-Q2 cluster:
- Task timeout check (every TASK_TIMEOUT_SCAN_MINUTES minutes)
"""

import logging

from .exceptions import ScanAlreadyRunning
from .scanner import run_timeout_check

logger = logging.getLogger(__name__)


def check_task_timeouts():
    """
    Scheduled job for the task timeout check.

    Sends due repeat alarms, then escalates tasks whose timeout has been
    reached. A run that finds the previous one still going is dropped.

    Returns:
        Summary dict, stored by Django-Q2 as the task result
    """
    try:
        summary = run_timeout_check()
    except ScanAlreadyRunning:
        logger.warning("Task timeout check skipped: previous run still in progress")
        return {'skipped_run': True}
    return summary.as_dict()
