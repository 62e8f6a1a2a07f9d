# cr_core/common/tests/test_idempotency.py
import uuid
from datetime import timedelta

import pytest
from django.utils import timezone

from cr_core.common.idempotency import clear_memory_store, load_response, save_response
from cr_core.common.models import IdempotencyRecord

CAMPGROUND = uuid.uuid4()
PATH = "/api/v1/reservations/"


@pytest.fixture(autouse=True)
def _empty_store():
    clear_memory_store()
    yield
    clear_memory_store()


def _save(key, data, status_code=201):
    save_response(CAMPGROUND, 1, "post", PATH, key, data, status_code=status_code)


def _load(key):
    return load_response(CAMPGROUND, 1, "POST", PATH, key)


def test_stored_response_is_replayed():
    _save("k1", {"id": "abc"})

    assert _load("k1") == (201, {"id": "abc"})
    assert load_response(CAMPGROUND, 2, "POST", PATH, "k1") is None


def test_missing_key_is_never_stored():
    _save(None, {"id": "abc"})
    assert _load(None) is None


def test_memory_store_evicts_least_recently_used(settings):
    settings.COMMON_IDEMPOTENCY_MAX_ENTRIES = 2

    _save("k1", {"n": 1})
    _save("k2", {"n": 2})
    _load("k1")
    _save("k3", {"n": 3})

    assert _load("k2") is None
    assert _load("k1") == (201, {"n": 1})
    assert _load("k3") == (201, {"n": 3})


def test_memory_store_entries_expire(settings):
    settings.COMMON_IDEMPOTENCY_TTL_SECONDS = 0

    _save("k1", {"n": 1})

    assert _load("k1") is None


@pytest.mark.django_db
def test_database_store_ignores_and_replaces_expired_records(settings):
    settings.COMMON_IDEMPOTENCY_USE_DB = True
    settings.COMMON_IDEMPOTENCY_TTL_SECONDS = 3600

    _save("k1", {"n": 1})
    assert _load("k1") == (201, {"n": 1})

    IdempotencyRecord.objects.update(created_at=timezone.now() - timedelta(hours=2))
    assert _load("k1") is None

    _save("k1", {"n": 2})
    assert _load("k1") == (201, {"n": 2})
    assert IdempotencyRecord.objects.count() == 1
