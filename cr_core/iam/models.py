# cr_core/iam/models.py
import uuid

from django.db import models

from cr_core.campgrounds.models import Campground
from cr_core.common.models import TimeStampedModel


class MembershipRole(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    MANAGER = "MANAGER", "Manager"
    FRONT_DESK = "FRONT_DESK", "Front desk"
    READONLY = "READONLY", "Read only"


class CampgroundMembership(TimeStampedModel):
    """
    Assigns a user to a campground with a role.
    This is the RBAC enforcement point for campground-level access.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    campground = models.ForeignKey(Campground, on_delete=models.CASCADE, related_name="memberships")
    user_id = models.BigIntegerField(db_index=True)
    role = models.CharField(max_length=16, choices=MembershipRole.choices, default=MembershipRole.READONLY)

    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "iam_campground_membership"
        constraints = [
            models.UniqueConstraint(fields=["campground", "user_id"], name="uq_campground_user_membership"),
        ]
        indexes = [
            models.Index(fields=["user_id", "is_active"]),
        ]

    def __str__(self) -> str:
        return f"user={self.user_id} {self.role} @ {self.campground_id}"
