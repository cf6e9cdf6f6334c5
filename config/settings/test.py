"""
Django test settings for task_timeouts project.

Used by pytest-django (see [tool.pytest.ini_options] in pyproject.toml).
"""

from .base import *

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Fast hashing for test users
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

TIME_ZONE = 'UTC'

TASK_TIMEOUT_ANCHOR = 'time_of_day'

PUSH_NOTIFIER_BACKEND = 'apps.notifications.backends.locmem.LocMemNotifier'
FIREBASE_CREDENTIALS_FILE = ''
FIREBASE_CREDENTIALS_JSON = ''

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}
