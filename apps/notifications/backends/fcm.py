"""
Firebase Cloud Messaging backend.

Credentials come from FIREBASE_CREDENTIALS_FILE (path to the service account
JSON) or FIREBASE_CREDENTIALS_JSON (the JSON itself).
"""

import json
import logging

import firebase_admin
from firebase_admin import credentials, messaging
from django.conf import settings

from ..exceptions import NotifierUnavailable
from .base import BaseNotifier

logger = logging.getLogger(__name__)

APP_NAME = 'task-timeouts'


def _load_certificate():
    raw_json = getattr(settings, 'FIREBASE_CREDENTIALS_JSON', '')
    path = getattr(settings, 'FIREBASE_CREDENTIALS_FILE', '')

    if raw_json:
        try:
            info = json.loads(raw_json)
        except ValueError as e:
            raise NotifierUnavailable(f'FIREBASE_CREDENTIALS_JSON is not valid JSON: {e}') from e
        # Private keys pasted into env files keep literal \n sequences
        if isinstance(info.get('private_key'), str):
            info['private_key'] = info['private_key'].replace('\\n', '\n')
        source = info
    elif path:
        source = path
    else:
        raise NotifierUnavailable('Firebase credentials are not configured.')

    try:
        return credentials.Certificate(source)
    except (ValueError, OSError) as e:
        raise NotifierUnavailable(f'Invalid Firebase credentials: {e}') from e


def get_firebase_app():
    """Return the project's Firebase app, initialising it on first use."""
    try:
        return firebase_admin.get_app(APP_NAME)
    except ValueError:
        pass

    certificate = _load_certificate()
    options = {}
    project_id = getattr(settings, 'FIREBASE_PROJECT_ID', '')
    if project_id:
        options['projectId'] = project_id

    try:
        app = firebase_admin.initialize_app(certificate, options, name=APP_NAME)
    except ValueError as e:
        raise NotifierUnavailable(f'Firebase initialization failed: {e}') from e

    logger.info('Firebase messaging initialized')
    return app


class FCMNotifier(BaseNotifier):

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.app = get_firebase_app()

    def send(self, token, title, body, data=None):
        message = messaging.Message(
            token=token,
            notification=messaging.Notification(title=title, body=body),
            data=self.prepare_data(dict(data or {}, title=title, body=body)),
        )
        return messaging.send(message, app=self.app)
