# config/settings/local.py
from .base import *  # noqa

DEBUG = os.getenv("DJANGO_DEBUG", "1") == "1"

# In-memory idempotency store is enough for a single dev server
COMMON_IDEMPOTENCY_USE_DB = False
