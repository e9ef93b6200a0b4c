import logging

from django.db import IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from .exceptions import IllegalTransition, SlotAlreadyBooked, SlotTemporarilyHeld
from .models import Booking, Turf, hold_window
from .service import price_turf
from .utils import generate_hour_slots, operating_window, place_in_window

logger = logging.getLogger(__name__)


# Status changes reachable through update_booking_status
ALLOWED_TRANSITIONS = {
    Booking.PENDING: {Booking.CONFIRMED, Booking.CANCELLED, Booking.EXPIRED},
    Booking.CONFIRMED: {Booking.CANCELLED},
}


def can_manage(turf, user):
    return user.is_platform_admin or turf.is_administered_by(user)


class BookingService:
    """
    Booking lifecycle: hold creation, status transitions, cancellation
    and the privileged hard delete. Views should NOT touch the database
    directly.
    """

    # -----------------------------------------------------
    # CREATE (pending hold)
    # -----------------------------------------------------
    @staticmethod
    def create_booking(turf_id, user, booking_date, start_time, end_time, now=None):
        now = now or timezone.now()

        turf = Turf.objects.filter(pk=turf_id, is_active=True).first()
        if not turf:
            raise NotFound("Turf not found")

        BookingService.check_operating_hours(turf, start_time, end_time)

        with transaction.atomic():
            # Lock the turf row: concurrent creates for this turf queue up
            # here, so the conflict check and the insert act as one step.
            Turf.objects.select_for_update().get(pk=turf.pk)

            holders = set(
                Booking.objects.occupying(now)
                .filter(
                    turf=turf,
                    booking_date=booking_date,
                    start_time=start_time,
                )
                .values_list("status", flat=True)
            )

            if Booking.CONFIRMED in holders:
                raise SlotAlreadyBooked()
            if holders:
                raise SlotTemporarilyHeld()

            pricing = price_turf(turf, booking_date, start_time, end_time)

            booking = Booking.objects.create(
                turf=turf,
                user=user,
                booking_date=booking_date,
                start_time=start_time,
                end_time=end_time,
                applied_price_per_slot=pricing["price_per_slot"],
                duration_hours=pricing["duration_hours"],
                total_amount=pricing["total_price"],
                pricing_rule_label=pricing["applied_rule"],
                day_type=pricing["day_type"],
                status=Booking.PENDING,
                payment_status=Booking.UNPAID,
                created_at=now,
                expires_at=now + hold_window(),
            )

        logger.info(
            "Booking %s held: turf=%s date=%s start=%s total=%s",
            booking.id, turf.id, booking_date, start_time, booking.total_amount,
        )
        return booking, pricing

    @staticmethod
    def check_operating_hours(turf, start_time, end_time):
        slots = generate_hour_slots(turf.opening_time, turf.closing_time)

        if start_time not in slots:
            raise ValidationError({
                "startTime": "Start time must match one of the turf's hourly slots"
            })

        _, closes_at = operating_window(turf.opening_time, turf.closing_time)
        _, end_at = place_in_window(
            turf.opening_time, turf.closing_time, start_time, end_time
        )
        if end_at > closes_at:
            raise ValidationError({"endTime": "Outside operating hours"})

    # -----------------------------------------------------
    # STATUS TRANSITIONS
    # -----------------------------------------------------
    @staticmethod
    def update_booking_status(booking_id, new_status, principal, settlement_method=None):
        with transaction.atomic():
            booking = (
                Booking.objects
                .select_for_update()
                .select_related("turf")
                .filter(pk=booking_id)
                .first()
            )
            if not booking:
                raise NotFound("Booking not found")

            is_manager = can_manage(booking.turf, principal)
            is_owner = booking.user_id == principal.id

            # Owners may only cancel their own bookings
            if not is_manager and not (is_owner and new_status == Booking.CANCELLED):
                raise PermissionDenied("You are not allowed to change this booking")

            if new_status not in ALLOWED_TRANSITIONS.get(booking.status, set()):
                raise IllegalTransition(
                    f"Cannot change booking status from {booking.status} to {new_status}"
                )

            if settlement_method == Booking.MANUAL and new_status != Booking.CONFIRMED:
                raise IllegalTransition("Manual settlement only applies to confirmation")

            if new_status == Booking.CONFIRMED:
                if settlement_method == Booking.MANUAL:
                    booking.settlement_method = Booking.MANUAL
                elif booking.payment_status != Booking.PAID:
                    raise IllegalTransition("Cannot confirm a booking that has not been paid")

            previous = booking.status
            booking.status = new_status
            booking.expires_at = None

            try:
                with transaction.atomic():
                    booking.save(update_fields=[
                        "status", "settlement_method", "expires_at", "updated_at",
                    ])
            except IntegrityError:
                # Another booking is already confirmed for this slot
                raise SlotAlreadyBooked()

        logger.info(
            "Booking %s status %s -> %s by user %s",
            booking.id, previous, new_status, principal.id,
        )
        return booking

    @staticmethod
    def cancel_booking(booking_id, principal):
        booking = Booking.objects.filter(pk=booking_id).only("id", "user_id").first()
        if not booking:
            raise NotFound("Booking not found")

        if booking.user_id != principal.id:
            raise PermissionDenied("This booking does not belong to you")

        return BookingService.update_booking_status(
            booking_id, Booking.CANCELLED, principal
        )

    # -----------------------------------------------------
    # PRIVILEGED HARD DELETE (bypasses the state machine)
    # -----------------------------------------------------
    @staticmethod
    def delete_booking(booking_id, principal):
        if not principal.is_platform_admin:
            raise PermissionDenied("Only platform administrators can delete bookings")

        booking = Booking.objects.filter(pk=booking_id).first()
        if not booking:
            raise NotFound("Booking not found")

        booking.delete()
        logger.warning("Booking %s hard-deleted by user %s", booking_id, principal.id)

    # -----------------------------------------------------
    # READS
    # -----------------------------------------------------
    @staticmethod
    def list_user_bookings(user):
        return Booking.objects.filter(user=user).select_related("turf")

    @staticmethod
    def get_booking(booking_id, principal):
        booking = (
            Booking.objects
            .select_related("turf", "user")
            .filter(pk=booking_id)
            .first()
        )
        if not booking:
            raise NotFound("Booking not found")

        if booking.user_id != principal.id and not can_manage(booking.turf, principal):
            raise PermissionDenied("Forbidden")

        return booking

    # -----------------------------------------------------
    # HOUSEKEEPING
    # -----------------------------------------------------
    @staticmethod
    def expire_stale_holds(now=None):
        """Mark pending bookings past their expires_at as expired."""
        now = now or timezone.now()
        expired = Booking.objects.stale_holds(now).update(
            status=Booking.EXPIRED,
            expires_at=None,
            updated_at=now,
        )
        if expired:
            logger.info("Expired %s stale booking holds", expired)
        return expired
