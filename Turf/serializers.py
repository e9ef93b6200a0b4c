from django.utils import timezone
from rest_framework import serializers

from .models import Booking

TIME_INPUT_FORMATS = ["%H:%M"]
TIME_OUTPUT_FORMAT = "%H:%M"


# =========================================================
# BOOKING REQUEST
# Shape + time-range checks only; conflicts live in BookingService
# =========================================================
class BookingCreateSerializer(serializers.Serializer):
    resource = serializers.IntegerField(min_value=1)
    date = serializers.DateField()
    startTime = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)
    endTime = serializers.TimeField(input_formats=TIME_INPUT_FORMATS)

    def validate_date(self, value):
        if value < timezone.localdate():
            raise serializers.ValidationError("Booking date cannot be in the past")
        return value

    def validate(self, data):
        # An earlier end time runs past midnight; operating hours decide if it fits
        if data["endTime"] == data["startTime"]:
            raise serializers.ValidationError({"endTime": "End time must be after start time"})
        return data


# =========================================================
# BOOKING (READ)
# =========================================================
class BookingSerializer(serializers.ModelSerializer):
    turf = serializers.IntegerField(source="turf_id", read_only=True)
    turfName = serializers.CharField(source="turf.name", read_only=True)
    user = serializers.IntegerField(source="user_id", read_only=True)
    date = serializers.DateField(source="booking_date")
    startTime = serializers.TimeField(source="start_time", format=TIME_OUTPUT_FORMAT)
    endTime = serializers.TimeField(source="end_time", format=TIME_OUTPUT_FORMAT)
    appliedPricePerSlot = serializers.DecimalField(
        source="applied_price_per_slot", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    durationHours = serializers.DecimalField(
        source="duration_hours", max_digits=5, decimal_places=2, coerce_to_string=False
    )
    totalPrice = serializers.DecimalField(
        source="total_amount", max_digits=10, decimal_places=2, coerce_to_string=False
    )
    pricingRule = serializers.CharField(source="pricing_rule_label")
    dayType = serializers.CharField(source="day_type")
    paymentStatus = serializers.CharField(source="payment_status")
    settlementMethod = serializers.CharField(source="settlement_method")
    expiresAt = serializers.DateTimeField(source="expires_at")
    createdAt = serializers.DateTimeField(source="created_at")

    class Meta:
        model = Booking
        fields = [
            "id",
            "turf",
            "turfName",
            "user",
            "date",
            "startTime",
            "endTime",
            "appliedPricePerSlot",
            "durationHours",
            "totalPrice",
            "pricingRule",
            "dayType",
            "status",
            "paymentStatus",
            "settlementMethod",
            "expiresAt",
            "createdAt",
        ]


# =========================================================
# STATUS CHANGE
# =========================================================
class BookingStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Booking.STATUS_CHOICES)
    settlementMethod = serializers.ChoiceField(
        choices=[Booking.MANUAL],
        required=False
    )
