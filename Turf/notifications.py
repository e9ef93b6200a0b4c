import logging

from django.conf import settings
from django.core.mail import send_mail

logger = logging.getLogger(__name__)


def send_booking_confirmation_email(booking):
    """Plain-text confirmation sent once a booking is paid and confirmed."""
    turf = booking.turf
    user = booking.user

    lines = [
        f"Hello {user.full_name or user.email},",
        "",
        f"Your booking for {turf.name} has been confirmed.",
        "",
        f"Turf: {turf.name}",
        f"Location: {turf.address or 'N/A'}",
        f"Date: {booking.booking_date:%A, %B %d, %Y}",
        f"Time: {booking.start_time:%H:%M} - {booking.end_time:%H:%M}",
        f"Total Price: {settings.PAYMENT_CURRENCY} {booking.total_amount}",
        f"Payment Status: {booking.payment_status}",
        "",
        "We look forward to seeing you!",
    ]

    send_mail(
        subject=f"Booking Confirmed for {turf.name}",
        message="\n".join(lines),
        from_email=settings.DEFAULT_FROM_EMAIL,
        recipient_list=[user.email],
    )
    logger.info("Confirmation email sent for booking %s to %s", booking.id, user.email)
