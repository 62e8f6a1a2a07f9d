# cr_core/quotes/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.charges.api.serializers import ChargeLineSerializer, UpsellSelectionSerializer


class QuoteRequestSerializer(serializers.Serializer):
    site = serializers.UUIDField(required=False, allow_null=True)
    site_class = serializers.UUIDField(required=False, allow_null=True)
    arrival_date = serializers.DateField()
    departure_date = serializers.DateField()
    adults = serializers.IntegerField(min_value=1, required=False, default=1)
    children = serializers.IntegerField(min_value=0, required=False, default=0)
    pets = serializers.IntegerField(min_value=0, required=False, default=0)
    upsells = UpsellSelectionSerializer(many=True, required=False, default=list)
    demand_score = serializers.IntegerField(min_value=0, max_value=100, required=False, default=0)
    occupancy_percent = serializers.DecimalField(
        max_digits=5,
        decimal_places=2,
        min_value=0,
        max_value=100,
        required=False,
        allow_null=True,
        help_text="Override the measured occupancy (what-if quoting).",
    )

    def validate(self, attrs):
        if not attrs.get("site") and not attrs.get("site_class"):
            raise serializers.ValidationError({"site": "Provide site or site_class."})
        return attrs


class NightlyRateSerializer(serializers.Serializer):
    date = serializers.DateField()
    rate_cents = serializers.IntegerField()
    rate_entry_id = serializers.UUIDField()
    source = serializers.CharField()


class AppliedRuleSerializer(serializers.Serializer):
    rule_id = serializers.UUIDField()
    name = serializers.CharField()
    trigger = serializers.CharField()
    adjustment_type = serializers.CharField()
    adjustment_value = serializers.CharField()
    amount_cents = serializers.IntegerField()


class QuoteSerializer(serializers.Serializer):
    campground_id = serializers.UUIDField()
    site_id = serializers.UUIDField(allow_null=True)
    site_class_id = serializers.UUIDField(allow_null=True)
    arrival_date = serializers.DateField()
    departure_date = serializers.DateField()
    nights = serializers.IntegerField()
    nightly_rates = NightlyRateSerializer(many=True)
    base_total_cents = serializers.IntegerField()
    adjustments_cents = serializers.IntegerField()
    rate_capped_at = serializers.CharField(allow_null=True)
    applied_rules = AppliedRuleSerializer(many=True)
    fees_cents = serializers.IntegerField()
    subtotal_cents = serializers.IntegerField()
    tax_cents = serializers.IntegerField()
    total_cents = serializers.IntegerField()
    deposit_cents = serializers.IntegerField()
    lines = ChargeLineSerializer(many=True)
