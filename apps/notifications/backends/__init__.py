"""
Push notification backends.

Works like django.core.mail backends: PUSH_NOTIFIER_BACKEND names the class,
get_notifier() builds an instance.
"""

from django.conf import settings
from django.utils.module_loading import import_string


def get_notifier(backend=None, **kwargs):
    """
    Load a push notifier backend and return an instance of it.

    Raises NotifierUnavailable when the backend cannot reach its transport.
    """
    klass = import_string(backend or settings.PUSH_NOTIFIER_BACKEND)
    return klass(**kwargs)
