# cr_core/deposits/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.deposits.models import DepositApplyTo, DepositRule


class DepositConfigSerializer(serializers.Serializer):
    site_class = serializers.UUIDField(source="site_class_id", required=False, allow_null=True)
    rule = serializers.ChoiceField(choices=DepositRule.choices)
    apply_to = serializers.ChoiceField(
        choices=DepositApplyTo.choices, required=False, default=DepositApplyTo.LODGING_PLUS_FEES
    )
    percentage = serializers.DecimalField(max_digits=5, decimal_places=2, required=False, allow_null=True)
    flat_cents = serializers.IntegerField(required=False, allow_null=True)
    min_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    max_cents = serializers.IntegerField(min_value=0, required=False, allow_null=True)
    is_active = serializers.BooleanField(required=False, default=True)
