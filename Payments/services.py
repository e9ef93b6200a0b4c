import logging
import uuid
from decimal import Decimal, InvalidOperation
from urllib.parse import urlencode

from django.conf import settings
from django.db import DatabaseError, transaction
from django.urls import reverse
from django.utils import timezone
from rest_framework.exceptions import NotFound, PermissionDenied

from Turf.exceptions import (
    AlreadyPaid,
    GatewayValidationFailure,
    IllegalTransition,
    InternalError,
    PaymentGatewayUnavailable,
)
from Turf.models import Booking
from Turf.tasks import send_booking_confirmation

from . import gateway
from .models import Payment

logger = logging.getLogger(__name__)

# Gateway status flags that mean the money was captured
VALID_STATUSES = {"VALID", "VALIDATED"}

# Client pages the browser lands on after checkout
REDIRECT_PAGES = {
    "success": "booking-success",
    "fail": "booking-failed",
    "cancel": "booking-cancelled",
}

REDIRECT_PAYMENT_STATUS = {
    "fail": Payment.FAILED,
    "cancel": Payment.CANCELLED,
}


def new_transaction_id():
    return f"turf-booking-{uuid.uuid4()}"


def server_url(view_name, **kwargs):
    return f"{settings.SERVER_URL.rstrip('/')}{reverse(view_name, kwargs=kwargs)}"


def build_session_payload(booking, payment):
    user = booking.user
    tran_id = payment.transaction_id

    return {
        "total_amount": str(payment.amount),
        "currency": payment.currency,
        "tran_id": tran_id,
        "success_url": server_url("payment-success", transaction_id=tran_id),
        "fail_url": server_url("payment-fail", transaction_id=tran_id),
        "cancel_url": server_url("payment-cancel", transaction_id=tran_id),
        "ipn_url": server_url("payment-webhook"),
        "shipping_method": "NO",
        "product_name": "Turf Slot Booking",
        "product_category": "Service",
        "product_profile": "general",
        "cus_name": user.full_name or user.email,
        "cus_email": user.email,
        "cus_add1": "N/A",
        "cus_city": "N/A",
        "cus_country": "Bangladesh",
        "cus_phone": user.phone_number or "N/A",
        "value_a": str(booking.id),
    }


def _acknowledged(processed):
    return {"acknowledged": True, "processed": processed}


class PaymentService:
    """
    Gateway side of a booking: checkout initiation, notification
    reconciliation and browser redirects.
    """

    # -----------------------------------------------------
    # INITIATE
    # -----------------------------------------------------
    @staticmethod
    def initiate_payment(booking_id, principal):
        booking = (
            Booking.objects
            .select_related("user")
            .filter(pk=booking_id)
            .first()
        )
        if not booking:
            raise NotFound("Booking not found")

        if booking.user_id != principal.id:
            raise PermissionDenied("This booking does not belong to you")

        if booking.payment_status == Booking.PAID:
            raise AlreadyPaid()

        if booking.status in (Booking.CANCELLED, Booking.EXPIRED):
            raise IllegalTransition(f"Cannot pay for a {booking.status} booking")

        transaction_id = new_transaction_id()

        with transaction.atomic():
            # Earlier checkout sessions stay open at the gateway, so their
            # tran_ids are kept; a late notification for one still settles.
            superseded = (
                Payment.objects
                .filter(booking=booking, status=Payment.PENDING)
                .update(status=Payment.CANCELLED, updated_at=timezone.now())
            )
            if superseded:
                logger.info(
                    "Booking %s: %s earlier payment attempt(s) superseded",
                    booking.id, superseded,
                )

            payment = Payment.objects.create(
                booking=booking,
                transaction_id=transaction_id,
                amount=booking.total_amount,
                currency=settings.PAYMENT_CURRENCY,
            )

        try:
            redirect_url = gateway.init_session(build_session_payload(booking, payment))
        except gateway.SSLCommerzError:
            raise PaymentGatewayUnavailable()

        logger.info(
            "Payment %s initiated for booking %s amount=%s",
            transaction_id, booking.id, payment.amount,
        )
        return redirect_url

    # -----------------------------------------------------
    # RECONCILE (IPN)
    # -----------------------------------------------------
    @staticmethod
    def reconcile_notification(notification, raw_payload=None):
        """
        Apply a gateway notification.

        Only a notification the validator API confirms, for the stored
        amount, moves money state. The payment and its booking change
        together or not at all; repeated deliveries are acknowledged
        without side effects. Money captured for a booking that can no
        longer be confirmed is recorded, acknowledged and logged for a
        manual refund.
        """
        tran_id = notification["tran_id"]
        flag = notification["status"]

        if flag not in VALID_STATUSES:
            logger.info("Notification for %s with status %s ignored", tran_id, flag)
            return _acknowledged(False)

        validation = PaymentService.validate_with_gateway(tran_id, notification.get("val_id"))

        payment = Payment.objects.filter(transaction_id=tran_id).first()
        if not payment:
            logger.error("Payment record not found for transaction %s", tran_id)
            raise NotFound("Payment record not found")

        PaymentService.check_amount(payment, validation)

        if payment.status == Payment.SUCCESS:
            logger.info("Duplicate notification for %s acknowledged", tran_id)
            return _acknowledged(False)

        try:
            with transaction.atomic():
                payment = Payment.objects.select_for_update().get(pk=payment.pk)

                # A concurrent delivery may have won the lock first
                if payment.status == Payment.SUCCESS:
                    logger.info("Duplicate notification for %s acknowledged", tran_id)
                    return _acknowledged(False)

                booking = Booking.objects.select_for_update().get(pk=payment.booking_id)
                now = timezone.now()
                gateway_data = raw_payload if raw_payload is not None else dict(notification)

                # Booking already settled by another attempt: keep the record, refund by hand
                if Payment.objects.filter(booking_id=booking.id, status=Payment.SUCCESS).exists():
                    payment.gateway_data = gateway_data
                    payment.validation_id = notification.get("val_id", "")
                    payment.save(update_fields=["gateway_data", "validation_id", "updated_at"])
                    logger.critical(
                        "Booking %s already paid; transaction %s needs a manual refund",
                        booking.id, tran_id,
                    )
                    return _acknowledged(False)

                payment.status = Payment.SUCCESS
                payment.gateway_data = gateway_data
                payment.validation_id = notification.get("val_id", "")
                payment.paid_at = now
                payment.save()

                booking.payment_status = Booking.PAID

                reason = PaymentService.unconfirmable_reason(booking)
                if reason:
                    booking.save(update_fields=["payment_status", "updated_at"])
                    logger.critical(
                        "Payment %s captured but booking %s %s; needs a manual refund",
                        tran_id, booking.id, reason,
                    )
                    return _acknowledged(False)

                booking.status = Booking.CONFIRMED
                booking.settlement_method = Booking.GATEWAY
                booking.expires_at = None
                booking.save(update_fields=[
                    "status", "payment_status", "settlement_method", "expires_at", "updated_at",
                ])
        except DatabaseError as exc:
            logger.exception("Reconciliation of %s rolled back", tran_id)
            raise InternalError() from exc

        logger.info("Payment %s settled, booking %s confirmed", tran_id, booking.id)

        # Email is best-effort; the settlement above stands regardless
        try:
            send_booking_confirmation.delay(booking.id)
        except Exception:
            logger.exception("Could not dispatch confirmation email for booking %s", booking.id)

        return _acknowledged(True)

    @staticmethod
    def unconfirmable_reason(booking):
        """Why a paid booking cannot move to confirmed, or None."""
        if booking.status not in (Booking.PENDING, Booking.CONFIRMED):
            return f"is {booking.status}"

        if booking.status == Booking.PENDING:
            slot_taken = (
                Booking.objects
                .filter(
                    turf_id=booking.turf_id,
                    booking_date=booking.booking_date,
                    start_time=booking.start_time,
                    status=Booking.CONFIRMED,
                )
                .exclude(pk=booking.pk)
                .exists()
            )
            if slot_taken:
                return "lost its slot to another booking"

        return None

    @staticmethod
    def validate_with_gateway(tran_id, val_id):
        if not val_id:
            logger.critical("Notification for %s carries no val_id", tran_id)
            raise GatewayValidationFailure()

        try:
            validation = gateway.validate_transaction(val_id)
        except gateway.SSLCommerzError:
            raise PaymentGatewayUnavailable()

        if validation.get("status") not in VALID_STATUSES:
            logger.critical(
                "Gateway rejected val_id %s for %s: status=%s",
                val_id, tran_id, validation.get("status"),
            )
            raise GatewayValidationFailure()

        if validation.get("tran_id") != tran_id:
            logger.critical(
                "Transaction mismatch for val_id %s: notified %s, validated %s",
                val_id, tran_id, validation.get("tran_id"),
            )
            raise GatewayValidationFailure()

        return validation

    @staticmethod
    def check_amount(payment, validation):
        try:
            amount = Decimal(str(validation.get("amount")))
        except InvalidOperation:
            amount = None

        if amount != payment.amount:
            logger.critical(
                "Amount mismatch for %s: expected %s, validated %s",
                payment.transaction_id, payment.amount, validation.get("amount"),
            )
            raise GatewayValidationFailure("Validated amount does not match the payment")

        currency = validation.get("currency")
        if currency and currency != payment.currency:
            logger.critical(
                "Currency mismatch for %s: expected %s, validated %s",
                payment.transaction_id, payment.currency, currency,
            )
            raise GatewayValidationFailure("Validated currency does not match the payment")

    # -----------------------------------------------------
    # BROWSER REDIRECTS
    # -----------------------------------------------------
    @staticmethod
    def handle_redirect(outcome, transaction_id, payload):
        """Record a fail/cancel outcome and return the client page URL."""
        new_status = REDIRECT_PAYMENT_STATUS.get(outcome)

        if new_status:
            updated = (
                Payment.objects
                .filter(transaction_id=transaction_id)
                .exclude(status=Payment.SUCCESS)
                .update(status=new_status, gateway_data=payload, updated_at=timezone.now())
            )
            if updated:
                logger.info("Payment %s marked %s", transaction_id, new_status)

        query = urlencode({"transactionId": transaction_id})
        return f"{settings.CLIENT_URL.rstrip('/')}/{REDIRECT_PAGES[outcome]}?{query}"
