"""Serializers for the reservation API."""

from __future__ import annotations

from rest_framework import serializers  # type: ignore

from .models import Reservation


class AvailabilityQuerySerializer(serializers.Serializer):
    field = serializers.UUIDField()
    date = serializers.DateField()


class SlotGridQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
    days = serializers.IntegerField(min_value=1, max_value=31, default=7)


class BookingSelectionSerializer(serializers.Serializer):
    """Field, civil date and the hours of that day to book."""

    field = serializers.UUIDField()
    date = serializers.DateField()
    hours = serializers.ListField(child=serializers.IntegerField())


class SelfServiceBookingSerializer(BookingSelectionSerializer):
    """Public booking form. Visitors without an account leave name and phone."""

    payment_proof = serializers.CharField(max_length=500, required=False, allow_blank=True, default="")
    visitor_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    visitor_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")


class ManualBookingSerializer(BookingSelectionSerializer):
    """Owner-entered booking for a walk-in or phone customer."""

    customer_name = serializers.CharField(max_length=150, required=False, allow_blank=True, default="")
    customer_phone = serializers.CharField(max_length=20, required=False, allow_blank=True, default="")


class ReservationSerializer(serializers.ModelSerializer):
    """Reservation as shown to the booking account and to the venue owner."""

    field_id = serializers.ReadOnlyField(source="field.id")
    field_name = serializers.ReadOnlyField(source="field.name")
    venue_id = serializers.ReadOnlyField(source="field.venue.id")
    venue_name = serializers.ReadOnlyField(source="field.venue.name")
    requester_name = serializers.ReadOnlyField()
    hours = serializers.ReadOnlyField()

    class Meta:
        model = Reservation
        fields = [
            "id",
            "field_id",
            "field_name",
            "venue_id",
            "venue_name",
            "start_time",
            "end_time",
            "hours",
            "status",
            "source",
            "requester_name",
            "visitor_phone",
            "total_price",
            "service_fee",
            "currency",
            "payment_proof",
            "confirmed_at",
            "cancelled_at",
            "cancellation_source",
            "created_at",
        ]
        read_only_fields = fields
