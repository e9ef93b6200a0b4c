from unittest.mock import patch

from django.core import mail
from django.db import DatabaseError
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from Payments import gateway
from Payments.models import Payment
from Turf.models import Booking
from Turf.tests.factories import future_date, make_booking, make_turf, make_user

from .factories import TRAN_ID, ipn_payload, make_payment, validation_document

VALIDATE = "Payments.services.gateway.validate_transaction"
DISPATCH = "Payments.services.send_booking_confirmation"


class PaymentWebhookTests(APITestCase):

    def setUp(self):
        self.turf = make_turf()
        self.player = make_user()
        self.booking = make_booking(self.turf, self.player, future_date())
        self.payment = make_payment(self.booking)
        self.url = reverse("payment-webhook")

    def deliver(self, **overrides):
        return self.client.post(self.url, ipn_payload(**overrides))

    def assert_untouched(self):
        self.payment.refresh_from_db()
        self.booking.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.PENDING)
        self.assertEqual(self.booking.status, Booking.PENDING)
        self.assertEqual(self.booking.payment_status, Booking.UNPAID)

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_valid_notification_settles_payment_and_booking(self, validate, dispatch):
        response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["status"], "success")
        validate.assert_called_once_with("2410181234501abcDEF")

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.SUCCESS)
        self.assertEqual(self.payment.validation_id, "2410181234501abcDEF")
        self.assertEqual(self.payment.gateway_data["bank_tran_id"], "241018123450qZcR7xVh1mT")
        self.assertIsNotNone(self.payment.paid_at)

        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.CONFIRMED)
        self.assertEqual(self.booking.payment_status, Booking.PAID)
        self.assertEqual(self.booking.settlement_method, Booking.GATEWAY)
        self.assertIsNone(self.booking.expires_at)

        dispatch.delay.assert_called_once_with(self.booking.id)

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_duplicate_delivery_is_idempotent(self, validate, dispatch):
        first = self.deliver()
        self.payment.refresh_from_db()
        paid_at = self.payment.paid_at

        second = self.deliver()

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data["message"], "Notification acknowledged")
        self.assertEqual(dispatch.delay.call_count, 1)

        self.payment.refresh_from_db()
        self.assertEqual(self.payment.paid_at, paid_at)
        self.assertEqual(Payment.objects.filter(status=Payment.SUCCESS).count(), 1)

    @patch(VALIDATE, return_value=validation_document())
    def test_duplicate_delivery_sends_one_email(self, validate):
        self.deliver()
        self.deliver()

        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(self.turf.name, mail.outbox[0].subject)

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_json_body_is_accepted(self, validate, dispatch):
        response = self.client.post(self.url, ipn_payload(), format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.payment_status, Booking.PAID)

    @patch(VALIDATE)
    def test_non_valid_status_is_acknowledged_without_changes(self, validate):
        response = self.deliver(status="FAILED")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        validate.assert_not_called()
        self.assert_untouched()

    @patch(VALIDATE, return_value=validation_document(status="INVALID_TRANSACTION"))
    def test_forged_notification_rejected(self, validate):
        with self.assertLogs("Payments.services", level="CRITICAL"):
            response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "GATEWAY_VALIDATION_FAILED")
        self.assert_untouched()

    @patch(VALIDATE, return_value=validation_document(transaction_id="turf-booking-someone-else"))
    def test_transaction_mismatch_rejected(self, validate):
        response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assert_untouched()

    @patch(VALIDATE, return_value=validation_document(amount="10.00"))
    def test_amount_mismatch_rejected(self, validate):
        response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error_code"], "GATEWAY_VALIDATION_FAILED")
        self.assert_untouched()

    @patch(VALIDATE)
    def test_valid_status_without_val_id_rejected(self, validate):
        response = self.deliver(val_id="")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        validate.assert_not_called()

    @patch(VALIDATE, return_value=validation_document(transaction_id="turf-booking-unknown"))
    def test_unknown_payment_is_404(self, validate):
        with self.assertLogs("Payments.services", level="ERROR"):
            response = self.deliver(tran_id="turf-booking-unknown")

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assert_untouched()

    @patch(VALIDATE, side_effect=gateway.SSLCommerzError("down"))
    def test_validator_unreachable_is_502(self, validate):
        response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assert_untouched()

    def test_missing_fields_rejected(self):
        response = self.client.post(self.url, {"val_id": "x"})

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("tran_id", response.data["errors"])

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_failure_rolls_back_both_records(self, validate, dispatch):
        with patch.object(Booking, "save", side_effect=DatabaseError("disk full")):
            response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error_code"], "INTERNAL_ERROR")
        self.assert_untouched()
        dispatch.delay.assert_not_called()

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_email_dispatch_failure_keeps_settlement(self, validate, dispatch):
        dispatch.delay.side_effect = ConnectionError("broker down")

        response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.booking.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.CONFIRMED)
        self.assertEqual(self.booking.payment_status, Booking.PAID)

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_cancelled_booking_is_paid_but_not_revived(self, validate, dispatch):
        Booking.objects.filter(pk=self.booking.pk).update(status=Booking.CANCELLED, expires_at=None)

        with self.assertLogs("Payments.services", level="CRITICAL"):
            response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.payment.refresh_from_db()
        self.booking.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.SUCCESS)
        self.assertEqual(self.booking.status, Booking.CANCELLED)
        self.assertEqual(self.booking.payment_status, Booking.PAID)
        dispatch.delay.assert_not_called()

        # Redelivery is a plain duplicate now
        self.assertEqual(self.deliver().status_code, status.HTTP_200_OK)

    @patch(DISPATCH)
    @patch(VALIDATE, return_value=validation_document())
    def test_lapsed_hold_that_lost_its_slot_stays_pending(self, validate, dispatch):
        rival = make_booking(
            self.turf, make_user(email="rival@example.com"), self.booking.booking_date,
            status=Booking.CONFIRMED,
            settlement_method=Booking.MANUAL,
            expires_at=None,
        )

        with self.assertLogs("Payments.services", level="CRITICAL"):
            response = self.deliver()

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.booking.refresh_from_db()
        rival.refresh_from_db()
        self.assertEqual(self.booking.status, Booking.PENDING)
        self.assertEqual(self.booking.payment_status, Booking.PAID)
        self.assertEqual(rival.status, Booking.CONFIRMED)
        self.payment.refresh_from_db()
        self.assertEqual(self.payment.status, Payment.SUCCESS)
        dispatch.delay.assert_not_called()
