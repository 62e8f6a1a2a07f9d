# cr_core/common/idempotency.py
"""
Replay store for Idempotency-Key on write endpoints.

Stored responses are keyed by (campground, user, method, path, key) and
expire after COMMON_IDEMPOTENCY_TTL_SECONDS. The database store is the
default; COMMON_IDEMPOTENCY_USE_DB = False switches to a per-process LRU of
at most COMMON_IDEMPOTENCY_MAX_ENTRIES responses (tests, single-process dev).
"""
from __future__ import annotations

import threading
import time
from collections import OrderedDict
from datetime import timedelta

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from cr_core.common.models import IdempotencyRecord

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_MAX_ENTRIES = 1000

_LOCK = threading.Lock()
_MEMORY: "OrderedDict[tuple, tuple[float, int, object]]" = OrderedDict()


def _use_db() -> bool:
    return bool(getattr(settings, "COMMON_IDEMPOTENCY_USE_DB", True))


def _ttl_seconds() -> int:
    return int(getattr(settings, "COMMON_IDEMPOTENCY_TTL_SECONDS", DEFAULT_TTL_SECONDS))


def _max_entries() -> int:
    return max(1, int(getattr(settings, "COMMON_IDEMPOTENCY_MAX_ENTRIES", DEFAULT_MAX_ENTRIES)))


def get_key(request):
    # DRF test client: "HTTP_IDEMPOTENCY_KEY" -> request.META["HTTP_IDEMPOTENCY_KEY"]
    return request.META.get("HTTP_IDEMPOTENCY_KEY")


def _memory_key(campground_id, user_id, method, path, key) -> tuple:
    return (str(campground_id), str(user_id), method.upper(), path, str(key))


def clear_memory_store() -> None:
    with _LOCK:
        _MEMORY.clear()


def _memory_load(mkey: tuple):
    with _LOCK:
        entry = _MEMORY.get(mkey)
        if entry is None:
            return None
        expires_at, status_code, data = entry
        if expires_at <= time.monotonic():
            del _MEMORY[mkey]
            return None
        _MEMORY.move_to_end(mkey)
        return status_code, data


def _memory_save(mkey: tuple, status_code: int, data) -> None:
    with _LOCK:
        _MEMORY[mkey] = (time.monotonic() + _ttl_seconds(), status_code, data)
        _MEMORY.move_to_end(mkey)
        limit = _max_entries()
        while len(_MEMORY) > limit:
            _MEMORY.popitem(last=False)


def _record_filter(campground_id, user_id, method, path, key) -> dict:
    return {
        "campground_id": campground_id,
        "user_id": int(user_id),
        "method": method.upper(),
        "path": path,
        "idempotency_key": str(key),
    }


def _cutoff():
    return timezone.now() - timedelta(seconds=_ttl_seconds())


def load_response(campground_id, user_id, method, path, key):
    """Returns (status_code, data) of a stored, unexpired response, or None."""
    if not key:
        return None

    if not _use_db():
        return _memory_load(_memory_key(campground_id, user_id, method, path, key))

    rec = (
        IdempotencyRecord.objects.filter(
            created_at__gte=_cutoff(), **_record_filter(campground_id, user_id, method, path, key)
        )
        .order_by("-created_at")
        .first()
    )
    return None if rec is None else (rec.status_code, rec.response_data)


def save_response(campground_id, user_id, method, path, key, response_data, status_code: int = 200):
    if not key:
        return

    if not _use_db():
        _memory_save(_memory_key(campground_id, user_id, method, path, key), int(status_code), response_data)
        return

    identity = _record_filter(campground_id, user_id, method, path, key)
    try:
        with transaction.atomic():
            # an expired response for the same key is replaced
            IdempotencyRecord.objects.filter(created_at__lt=_cutoff(), **identity).delete()
            IdempotencyRecord.objects.create(status_code=int(status_code), response_data=response_data, **identity)
    except IntegrityError:
        # a concurrent request with the same key already stored its response
        return
