"""Celery tasks for the booking domain."""

import logging
from smtplib import SMTPException

from celery import shared_task

from .booking_service import BookingService
from .models import Booking
from .notifications import send_booking_confirmation_email

logger = logging.getLogger(__name__)


@shared_task(name="bookings.expire_stale_holds")
def expire_stale_holds():
    """
    Periodic housekeeping (Celery beat, hourly).

    Availability and conflict checks already ignore stale holds; this only
    keeps stored statuses tidy for reporting.
    """
    return {"expired": BookingService.expire_stale_holds()}


@shared_task(
    name="bookings.send_booking_confirmation",
    autoretry_for=(SMTPException, ConnectionError),
    retry_backoff=True,
    max_retries=3,
)
def send_booking_confirmation(booking_id):
    booking = (
        Booking.objects
        .select_related("turf", "user")
        .filter(pk=booking_id)
        .first()
    )
    if not booking:
        logger.warning("Booking %s not found for confirmation email", booking_id)
        return False

    send_booking_confirmation_email(booking)
    return True
