"""Settings used by the test suite."""

from .base import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

SSLCOMMERZ_STORE_ID = "teststore"
SSLCOMMERZ_STORE_PASSWORD = "teststore@ssl"
SSLCOMMERZ_IS_LIVE = False

CLIENT_URL = "http://client.test"
SERVER_URL = "http://api.test"
