# cr_core/reservations/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.charges.api.serializers import UpsellSelectionSerializer
from cr_core.reservations.models import Reservation


class ReservationSerializer(serializers.ModelSerializer):
    nights = serializers.IntegerField(read_only=True)
    balance_due_cents = serializers.IntegerField(read_only=True)

    class Meta:
        model = Reservation
        fields = [
            "id",
            "campground_id",
            "site",
            "guest_name",
            "guest_email",
            "arrival_date",
            "departure_date",
            "nights",
            "adults",
            "children",
            "pets",
            "status",
            "base_total_cents",
            "adjustments_cents",
            "fees_cents",
            "tax_cents",
            "total_cents",
            "deposit_cents",
            "nightly_rates",
            "first_night_rate_cents",
            "applied_rules",
            "charge_lines",
            "cancellation_policy_snapshot",
            "paid_amount_cents",
            "balance_due_cents",
            "cancelled_at",
            "cancellation_fee_cents",
            "refund_cents",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class ReservationCreateSerializer(serializers.Serializer):
    site = serializers.UUIDField()
    guest_name = serializers.CharField(max_length=255)
    guest_email = serializers.EmailField(required=False, allow_blank=True, default="")
    arrival_date = serializers.DateField()
    departure_date = serializers.DateField()
    adults = serializers.IntegerField(min_value=1, required=False, default=1)
    children = serializers.IntegerField(min_value=0, required=False, default=0)
    pets = serializers.IntegerField(min_value=0, required=False, default=0)
    upsells = UpsellSelectionSerializer(many=True, required=False, default=list)
    demand_score = serializers.IntegerField(min_value=0, max_value=100, required=False, default=0)


class PaymentSerializer(serializers.Serializer):
    amount_cents = serializers.IntegerField(min_value=1)


class CancellationOutcomeSerializer(serializers.Serializer):
    fee_cents = serializers.IntegerField()
    refund_cents = serializers.IntegerField()
    within_free_window = serializers.BooleanField()
    hours_until_arrival = serializers.DecimalField(max_digits=10, decimal_places=2)
    evaluated_at = serializers.DateTimeField()


class CancellationResultSerializer(serializers.Serializer):
    reservation = ReservationSerializer()
    outcome = CancellationOutcomeSerializer()
