from datetime import timedelta

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone

from .service import validate_pricing_rules


def hold_window():
    """How long an unpaid pending booking keeps its slot."""
    return timedelta(minutes=settings.BOOKING_HOLD_MINUTES)


# =========================
# TURF (BOOKABLE RESOURCE)
# =========================

class Turf(models.Model):
    """
    A bookable resource.
    Operating hours bound the generated slots; pricing rules drive slot prices.
    """

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="turfs"
    )

    # Additional administrators allowed to manage bookings of this turf
    admins = models.ManyToManyField(
        settings.AUTH_USER_MODEL,
        related_name="administered_turfs",
        blank=True
    )

    name = models.CharField(max_length=100)
    address = models.CharField(max_length=255, blank=True)

    # Operating hours (slot generation + booking validation)
    opening_time = models.TimeField()
    closing_time = models.TimeField()

    # Default price per slot (fallback when no pricing rule matches)
    price = models.DecimalField(max_digits=10, decimal_places=2)

    # Ordered list of pricing rules:
    # [{"day_type": "sun_thu", "time_slots": [{"start_time": "06:00",
    #   "end_time": "17:00", "price_per_slot": 2000}]}]
    pricing_rules = models.JSONField(default=list, blank=True)

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def clean(self):
        validate_pricing_rules(self.pricing_rules)

    def is_administered_by(self, user):
        if not user or not user.is_authenticated:
            return False
        if self.owner_id == user.id:
            return True
        return self.admins.filter(pk=user.pk).exists()

    def __str__(self):
        return self.name


# =========================
# BOOKING MODEL
# =========================

class BookingQuerySet(models.QuerySet):

    def occupying(self, now=None):
        """
        Bookings that hold their slot: confirmed ones, plus pending
        holds created within the hold window.
        """
        now = now or timezone.now()
        return self.filter(
            Q(status=Booking.CONFIRMED)
            | Q(status=Booking.PENDING, created_at__gte=now - hold_window())
        )

    def stale_holds(self, now=None):
        now = now or timezone.now()
        return self.filter(status=Booking.PENDING, expires_at__lt=now)


class Booking(models.Model):
    """
    A reservation of one turf slot.
    Created as a time-bounded hold, settled by payment reconciliation.
    """

    # Booking lifecycle states
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    EXPIRED = "expired"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (CONFIRMED, "Confirmed"),
        (CANCELLED, "Cancelled"),
        (EXPIRED, "Expired"),
    ]

    # Payment state (only reconciliation marks a booking as paid)
    UNPAID = "unpaid"
    PAID = "paid"
    REFUNDED = "refunded"

    PAYMENT_STATUS_CHOICES = [
        (UNPAID, "Unpaid"),
        (PAID, "Paid"),
        (REFUNDED, "Refunded"),
    ]

    # How a confirmed booking was settled
    GATEWAY = "gateway"
    MANUAL = "manual"

    SETTLEMENT_CHOICES = [
        (GATEWAY, "Gateway"),
        (MANUAL, "Manual"),
    ]

    turf = models.ForeignKey(
        Turf,
        on_delete=models.CASCADE,
        related_name="bookings"
    )

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="bookings"
    )

    booking_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()

    # Pricing snapshot taken at booking time
    applied_price_per_slot = models.DecimalField(max_digits=10, decimal_places=2)
    duration_hours = models.DecimalField(max_digits=5, decimal_places=2)
    total_amount = models.DecimalField(max_digits=10, decimal_places=2)
    pricing_rule_label = models.CharField(max_length=64)
    day_type = models.CharField(max_length=16)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING
    )

    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default=UNPAID
    )

    settlement_method = models.CharField(
        max_length=20,
        choices=SETTLEMENT_CHOICES,
        blank=True
    )

    # Set only while the booking is pending
    expires_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["turf", "booking_date", "start_time"]),
            models.Index(fields=["user", "-created_at"]),
            models.Index(fields=["status", "expires_at"]),
        ]
        constraints = [
            # At most one confirmed booking per slot
            models.UniqueConstraint(
                fields=["turf", "booking_date", "start_time"],
                condition=Q(status="confirmed"),
                name="unique_confirmed_slot",
            ),
        ]

    def clean(self):
        # end_time before start_time means the booking runs past midnight
        if self.start_time and self.end_time and self.start_time == self.end_time:
            raise ValidationError("start_time and end_time cannot be equal")

    def __str__(self):
        return f"{self.turf} | {self.booking_date} | {self.start_time:%H:%M}"
