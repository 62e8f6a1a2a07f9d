# cr_core/charges/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.charges.models import TaxAppliesTo, TaxRule, TaxRuleKind, Upsell, UpsellPricingType


class TaxRuleSerializer(serializers.ModelSerializer):
    class Meta:
        model = TaxRule
        fields = [
            "id",
            "campground_id",
            "name",
            "kind",
            "rate_percent",
            "amount_cents",
            "applies_to",
            "min_nights",
            "max_nights",
            "is_active",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class TaxRuleCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    kind = serializers.ChoiceField(choices=TaxRuleKind.choices)
    rate_percent = serializers.DecimalField(max_digits=6, decimal_places=3, required=False, allow_null=True)
    amount_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    applies_to = serializers.ChoiceField(choices=TaxAppliesTo.choices, required=False, default=TaxAppliesTo.ALL)
    min_nights = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    max_nights = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)


class TaxRuleUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    kind = serializers.ChoiceField(choices=TaxRuleKind.choices, required=False)
    rate_percent = serializers.DecimalField(max_digits=6, decimal_places=3, required=False)
    amount_cents = serializers.IntegerField(min_value=0, required=False)
    applies_to = serializers.ChoiceField(choices=TaxAppliesTo.choices, required=False)
    min_nights = serializers.IntegerField(min_value=1, required=False)
    max_nights = serializers.IntegerField(min_value=1, required=False)
    is_active = serializers.BooleanField(required=False)


class UpsellSerializer(serializers.ModelSerializer):
    class Meta:
        model = Upsell
        fields = ["id", "campground_id", "code", "name", "price_cents", "pricing_type", "is_active"]
        read_only_fields = fields


class UpsellCreateSerializer(serializers.Serializer):
    code = serializers.SlugField(max_length=64)
    name = serializers.CharField(max_length=255)
    price_cents = serializers.IntegerField(min_value=0)
    pricing_type = serializers.ChoiceField(
        choices=UpsellPricingType.choices, required=False, default=UpsellPricingType.FLAT
    )
    is_active = serializers.BooleanField(required=False, default=True)


class UpsellUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    price_cents = serializers.IntegerField(min_value=0, required=False)
    pricing_type = serializers.ChoiceField(choices=UpsellPricingType.choices, required=False)
    is_active = serializers.BooleanField(required=False)


class UpsellSelectionSerializer(serializers.Serializer):
    code = serializers.SlugField(max_length=64)
    quantity = serializers.IntegerField(min_value=1, required=False, default=1)


class ChargeLineSerializer(serializers.Serializer):
    kind = serializers.CharField()
    code = serializers.CharField()
    description = serializers.CharField()
    quantity = serializers.IntegerField()
    amount_cents = serializers.IntegerField()
