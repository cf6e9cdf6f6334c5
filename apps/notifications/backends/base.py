"""Base class for push notifier backends."""


class BaseNotifier:
    """
    Base class for push notifier backend implementations.

    Subclasses must implement send(). Construction should raise
    NotifierUnavailable when the transport is not usable.
    """

    def __init__(self, **kwargs):
        pass

    def send(self, token, title, body, data=None):
        """
        Deliver one message to one device token.

        Returns the provider message id; raises on delivery failure.
        """
        raise NotImplementedError('subclasses of BaseNotifier must override send() method')

    @staticmethod
    def prepare_data(data):
        """Push payloads only carry strings."""
        prepared = {}
        for key, value in (data or {}).items():
            if value is None:
                prepared[key] = ''
            elif isinstance(value, bool):
                prepared[key] = 'true' if value else 'false'
            else:
                prepared[key] = str(value)
        return prepared
