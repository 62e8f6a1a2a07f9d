# cr_core/audit/services.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from uuid import UUID

from django.core.serializers.json import DjangoJSONEncoder
from django.db import transaction

from cr_core.audit.models import AuditEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    event_code: str
    entity_type: str
    entity_id: UUID
    campground_id: UUID
    actor_user_id: int | None
    metadata: Dict[str, Any]


def _jsonable(metadata: Dict[str, Any]) -> Dict[str, Any]:
    # Decimal / date / UUID values come straight from validated serializer data
    return json.loads(json.dumps(metadata, cls=DjangoJSONEncoder))


class AuditService:
    """
    Central audit writer; persists into AuditEvent (immutable).
    """

    @staticmethod
    @transaction.atomic
    def log(
        *,
        event_code: str,
        entity_type: str,
        entity_id: UUID,
        campground_id: UUID,
        actor_user_id: int | None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditRecord:
        metadata = _jsonable(metadata or {})

        AuditEvent.objects.create(
            campground_id=campground_id,
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )
        logger.debug("audit %s %s=%s campground=%s", event_code, entity_type, entity_id, campground_id)

        return AuditRecord(
            event_code=event_code,
            entity_type=entity_type,
            entity_id=entity_id,
            campground_id=campground_id,
            actor_user_id=actor_user_id,
            metadata=metadata,
        )
