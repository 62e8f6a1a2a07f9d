# cr_core/rates/api/serializers.py
from __future__ import annotations

from rest_framework import serializers

from cr_core.rates.models import RateEntry


class RateEntrySerializer(serializers.ModelSerializer):
    is_locked = serializers.BooleanField(read_only=True)

    class Meta:
        model = RateEntry
        fields = [
            "id",
            "campground_id",
            "site",
            "site_class",
            "start_date",
            "end_date",
            "nightly_rate_cents",
            "label",
            "locked_at",
            "is_locked",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class RateEntryCreateSerializer(serializers.Serializer):
    site = serializers.UUIDField(required=False, allow_null=True)
    site_class = serializers.UUIDField(required=False, allow_null=True)
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    nightly_rate_cents = serializers.IntegerField(min_value=0)
    label = serializers.CharField(max_length=128, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        if bool(attrs.get("site")) == bool(attrs.get("site_class")):
            raise serializers.ValidationError({"site": "Provide exactly one of site or site_class."})
        if attrs["end_date"] < attrs["start_date"]:
            raise serializers.ValidationError({"end_date": "Must be on or after start_date."})
        return attrs


class RateEntryUpdateSerializer(serializers.Serializer):
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    nightly_rate_cents = serializers.IntegerField(min_value=0, required=False)
    label = serializers.CharField(max_length=128, required=False, allow_blank=True)
