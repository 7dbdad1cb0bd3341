"""Serializers shared by list and report endpoints."""

from rest_framework import serializers

DATE_INPUT_FORMATS = ["iso-8601", "%Y-%m-%d"]


class DateRangeQuerySerializer(serializers.Serializer):
    """Validates optional `start` / `end` query params (ISO date or datetime)."""

    start = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)
    end = serializers.DateTimeField(required=False, input_formats=DATE_INPUT_FORMATS)

    def validate(self, attrs):
        start, end = attrs.get("start"), attrs.get("end")
        if start and end and end < start:
            raise serializers.ValidationError({"end": "Must not be before start."})
        return attrs
