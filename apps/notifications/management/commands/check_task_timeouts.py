"""
Management command to run the task timeout check once.

Usage:
    python manage.py check_task_timeouts

Exit status: 0 when the check completed, 1 on an internal failure,
2 when another check is already running.
"""
import logging

from django.core.management.base import BaseCommand, CommandError

from apps.notifications.exceptions import ScanAlreadyRunning
from apps.notifications.scanner import run_timeout_check

logger = logging.getLogger(__name__)

EXIT_FAILURE = 1
EXIT_LOCKED = 2


class Command(BaseCommand):
    help = 'Check task timeouts and send push notifications'

    def handle(self, *args, **options):
        self.stdout.write('Checking task timeouts...')

        try:
            summary = run_timeout_check()
        except ScanAlreadyRunning as e:
            raise CommandError(str(e), returncode=EXIT_LOCKED)
        except Exception as e:
            logger.exception("Task timeout check failed")
            raise CommandError(f'Task timeout check failed: {e}', returncode=EXIT_FAILURE)

        self.stdout.write(f'  Tasks considered: {summary.considered}')
        self.stdout.write(f'  Notified:         {summary.notified}')
        self.stdout.write(f'  Skipped:          {summary.skipped}')
        self.stdout.write(f'  Not yet due:      {summary.pending}')
        self.stdout.write(f'  Repeat alarms:    {summary.repeat_alarms}')
        self.stdout.write(f'  Timeout reminders: {summary.timeout_repeats}')
        self.stdout.write(f'  Alarms:           {summary.alarms}')
        self.stdout.write(
            self.style.SUCCESS(
                f'Done! Notified: {summary.notified}, Skipped: {summary.skipped}'
            )
        )
