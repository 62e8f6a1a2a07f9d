# cr_core/campgrounds/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.campgrounds.models import (
    Campground,
    CancellationFeeType,
    CancellationPolicyType,
    PetFeeMode,
    Site,
    SiteClass,
)


class CampgroundSerializer(serializers.ModelSerializer):
    class Meta:
        model = Campground
        fields = [
            "id",
            "name",
            "slug",
            "timezone",
            "check_in_time",
            "is_active",
            "cancellation_policy_type",
            "cancellation_window_hours",
            "cancellation_fee_type",
            "cancellation_fee_flat_cents",
            "cancellation_fee_percent",
            "cancellation_notes",
            "included_adults",
            "included_children",
            "extra_adult_fee_cents",
            "extra_child_fee_cents",
            "pet_fee_cents",
            "pet_fee_mode",
            "requires_tax",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class CancellationPolicySerializer(serializers.ModelSerializer):
    policy_type = serializers.CharField(source="cancellation_policy_type", read_only=True)
    window_hours = serializers.IntegerField(source="cancellation_window_hours", read_only=True)
    fee_type = serializers.CharField(source="cancellation_fee_type", read_only=True)
    fee_flat_cents = serializers.IntegerField(source="cancellation_fee_flat_cents", read_only=True, allow_null=True)
    fee_percent = serializers.DecimalField(
        source="cancellation_fee_percent", max_digits=5, decimal_places=2, read_only=True, allow_null=True
    )
    notes = serializers.CharField(source="cancellation_notes", read_only=True)

    class Meta:
        model = Campground
        fields = ["id", "policy_type", "window_hours", "fee_type", "fee_flat_cents", "fee_percent", "notes"]
        read_only_fields = fields


class PolicyUpdateSerializer(serializers.Serializer):
    policy_type = serializers.ChoiceField(choices=CancellationPolicyType.choices, required=False)
    window_hours = serializers.IntegerField(min_value=0, required=False)
    fee_type = serializers.ChoiceField(choices=CancellationFeeType.choices, required=False)
    fee_flat_cents = serializers.IntegerField(min_value=0, required=False)
    fee_percent = serializers.DecimalField(
        max_digits=5, decimal_places=2, min_value=0, max_value=100, required=False
    )
    notes = serializers.CharField(required=False, allow_blank=True)


class FeeUpdateSerializer(serializers.Serializer):
    included_adults = serializers.IntegerField(min_value=0, required=False)
    included_children = serializers.IntegerField(min_value=0, required=False)
    extra_adult_fee_cents = serializers.IntegerField(min_value=0, required=False)
    extra_child_fee_cents = serializers.IntegerField(min_value=0, required=False)
    pet_fee_cents = serializers.IntegerField(min_value=0, required=False)
    pet_fee_mode = serializers.ChoiceField(choices=PetFeeMode.choices, required=False)
    requires_tax = serializers.BooleanField(required=False)
    timezone = serializers.CharField(max_length=64, required=False)
    check_in_time = serializers.TimeField(required=False)


class SiteClassSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteClass
        fields = ["id", "campground_id", "name", "code", "is_active"]
        read_only_fields = fields


class SiteSerializer(serializers.ModelSerializer):
    site_class_code = serializers.CharField(source="site_class.code", read_only=True)

    class Meta:
        model = Site
        fields = ["id", "campground_id", "name", "code", "site_class", "site_class_code", "is_active"]
        read_only_fields = fields
