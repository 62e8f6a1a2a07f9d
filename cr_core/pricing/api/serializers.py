# cr_core/pricing/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.pricing.models import AdjustmentType, PricingRule, PricingTrigger, StackMode


class PricingRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = PricingRule
        fields = [
            "id",
            "campground_id",
            "name",
            "trigger",
            "adjustment_type",
            "adjustment_value",
            "threshold",
            "stack_mode",
            "min_rate_cents",
            "max_rate_cents",
            "site_class",
            "starts_on",
            "ends_on",
            "is_active",
            "priority",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PricingRuleCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    trigger = serializers.ChoiceField(choices=PricingTrigger.choices)
    adjustment_type = serializers.ChoiceField(choices=AdjustmentType.choices)
    adjustment_value = serializers.DecimalField(max_digits=12, decimal_places=2)
    threshold = serializers.DecimalField(max_digits=7, decimal_places=2, required=False, allow_null=True)
    stack_mode = serializers.ChoiceField(choices=StackMode.choices, required=False, default=StackMode.ADDITIVE)
    min_rate_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    max_rate_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    site_class = serializers.UUIDField(required=False, allow_null=True)
    starts_on = serializers.DateField(required=False, allow_null=True)
    ends_on = serializers.DateField(required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
    priority = serializers.IntegerField(required=False, default=100)


class PricingRuleUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    trigger = serializers.ChoiceField(choices=PricingTrigger.choices, required=False)
    adjustment_type = serializers.ChoiceField(choices=AdjustmentType.choices, required=False)
    adjustment_value = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)
    threshold = serializers.DecimalField(max_digits=7, decimal_places=2, required=False)
    stack_mode = serializers.ChoiceField(choices=StackMode.choices, required=False)
    min_rate_cents = serializers.IntegerField(min_value=0, required=False)
    max_rate_cents = serializers.IntegerField(min_value=0, required=False)
    starts_on = serializers.DateField(required=False)
    ends_on = serializers.DateField(required=False)
    is_active = serializers.BooleanField(required=False)
    priority = serializers.IntegerField(required=False)
