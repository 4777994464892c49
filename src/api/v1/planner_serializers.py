"""Serializers dedicated to the call planner."""
from __future__ import annotations

from rest_framework import serializers

from planner.dates import MAX_YEAR, MIN_YEAR
from planner.models import PlanItem, PlanItemStatus


class PlanItemSerializer(serializers.ModelSerializer):
    """Read representation of a plan item."""

    rep_id = serializers.UUIDField(read_only=True)
    store_id = serializers.UUIDField(read_only=True)
    store_name = serializers.CharField(source="store.name", read_only=True)
    grade = serializers.CharField(source="store.grade", read_only=True, default=None)
    state = serializers.CharField(source="store.state", read_only=True)
    postcode = serializers.CharField(source="store.postcode", read_only=True)
    status_display = serializers.CharField(source="get_status_display", read_only=True)

    class Meta:
        model = PlanItem
        fields = [
            "id",
            "rep_id",
            "store_id",
            "store_name",
            "grade",
            "state",
            "postcode",
            "planned_week",
            "day_of_week",
            "position",
            "status",
            "status_display",
            "confirmed_time",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PlanItemCreateSerializer(serializers.Serializer):
    store_id = serializers.UUIDField()
    day_of_week = serializers.IntegerField(min_value=1, max_value=5)
    planned_week = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    rep_id = serializers.UUIDField(required=False, allow_null=True)


class PlanItemUpdateSerializer(serializers.Serializer):
    """Partial update; only the keys sent by the client are applied."""

    status = serializers.ChoiceField(choices=PlanItemStatus.choices, required=False)
    day_of_week = serializers.IntegerField(min_value=1, max_value=5, required=False)
    planned_week = serializers.DateField(required=False)
    position = serializers.IntegerField(min_value=1, required=False)
    confirmed_time = serializers.CharField(max_length=20, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReorderSerializer(serializers.Serializer):
    direction = serializers.ChoiceField(choices=[("up", "up"), ("down", "down")])


class MoveDaySerializer(serializers.Serializer):
    from_week = serializers.DateField()
    from_day = serializers.IntegerField(min_value=1, max_value=5)
    to_week = serializers.DateField()
    to_day = serializers.IntegerField(min_value=1, max_value=5)
    rep_id = serializers.UUIDField(required=False, allow_null=True)


class GenerateSerializer(serializers.Serializer):
    scope = serializers.ChoiceField(choices=[("week", "week"), ("quarter", "quarter")], default="week")
    week = serializers.DateField(required=False, allow_null=True)
    quarter = serializers.IntegerField(min_value=1, max_value=4, required=False, allow_null=True)
    year = serializers.IntegerField(min_value=MIN_YEAR, max_value=MAX_YEAR, required=False, allow_null=True)
    rep_id = serializers.UUIDField(required=False, allow_null=True)

    def validate(self, attrs):
        if (attrs.get("quarter") is None) != (attrs.get("year") is None):
            raise serializers.ValidationError("quarter et year doivent etre fournis ensemble.")
        return attrs


class SubmitSerializer(serializers.Serializer):
    week = serializers.DateField(required=False, allow_null=True)
    rep_id = serializers.UUIDField(required=False, allow_null=True)
