"""
Backend for test and development environments.

Messages are appended to the module-level ``outbox`` list instead of being
delivered, like django.core.mail.backends.locmem.
"""

from dataclasses import dataclass, field

from .base import BaseNotifier

outbox = []


@dataclass
class PushMessage:
    token: str
    title: str
    body: str
    data: dict = field(default_factory=dict)
    message_id: str = ''


class LocMemNotifier(BaseNotifier):

    def send(self, token, title, body, data=None):
        message = PushMessage(
            token=token,
            title=title,
            body=body,
            data=self.prepare_data(data),
            message_id=f'locmem-{len(outbox) + 1}',
        )
        outbox.append(message)
        return message.message_id
