# config/settings/test.py
from .base import *  # noqa

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

COMMON_IDEMPOTENCY_USE_DB = False

LOGGING["loggers"]["cr_core"]["level"] = "DEBUG"  # noqa: F405
