from django.db import models
from django.db.models import Q

from Turf.models import Booking


class Payment(models.Model):
    """One gateway payment attempt for a booking."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (PENDING, "Pending"),
        (SUCCESS, "Success"),
        (FAILED, "Failed"),
        (CANCELLED, "Cancelled"),
    ]

    booking = models.ForeignKey(
        Booking,
        on_delete=models.CASCADE,
        related_name="payments"
    )

    # Gateway tran_id, also the idempotency key for notifications
    transaction_id = models.CharField(max_length=100, unique=True)

    amount = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=3, default="BDT")

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=PENDING
    )

    # Raw gateway payload of the last notification or redirect
    gateway_data = models.JSONField(default=dict, blank=True)
    validation_id = models.CharField(max_length=100, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                fields=["booking"],
                condition=Q(status="success"),
                name="unique_successful_payment_per_booking",
            ),
        ]

    def __str__(self):
        return f"Payment {self.transaction_id} for booking {self.booking_id} - {self.status}"
