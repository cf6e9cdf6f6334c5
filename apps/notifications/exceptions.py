"""
Exceptions raised by the timeout notification engine.
"""


class NotifierUnavailable(Exception):
    """The push transport is not configured or cannot be initialised."""


class ScanAlreadyRunning(Exception):
    """Another timeout check holds the scan lock."""
