# cr_core/audit/models.py
from django.db import models

from cr_core.common.models import ScopedModel


class AuditEvent(ScopedModel):
    """
    Immutable audit record for configuration edits and reservation lifecycle.
    """
    event_code = models.CharField(max_length=128, db_index=True)  # e.g. "pricing_rule.created"
    entity_type = models.CharField(max_length=128, db_index=True)  # e.g. "PricingRule"
    entity_id = models.UUIDField(db_index=True)

    actor_user_id = models.BigIntegerField(null=True, blank=True, db_index=True)

    occurred_at = models.DateTimeField(auto_now_add=True, db_index=True)
    metadata = models.JSONField(default=dict)

    class Meta:
        db_table = "audit_audit_event"
        indexes = [
            models.Index(fields=["campground_id", "occurred_at"]),
            models.Index(fields=["entity_type", "entity_id"]),
            models.Index(fields=["campground_id", "event_code"]),
        ]
