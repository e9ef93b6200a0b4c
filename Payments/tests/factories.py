from decimal import Decimal

from Payments.models import Payment

TRAN_ID = "turf-booking-7f1c2a9e-1111-4c5d-9e2b-000000000001"


def make_payment(booking, transaction_id=TRAN_ID, **extra):
    fields = {
        "amount": booking.total_amount,
        "currency": "BDT",
        "status": Payment.PENDING,
    }
    fields.update(extra)
    return Payment.objects.create(booking=booking, transaction_id=transaction_id, **fields)


def ipn_payload(transaction_id=TRAN_ID, status="VALID", **extra):
    data = {
        "tran_id": transaction_id,
        "val_id": "2410181234501abcDEF",
        "status": status,
        "amount": "2000.00",
        "currency": "BDT",
        "bank_tran_id": "241018123450qZcR7xVh1mT",
        "card_type": "VISA-Dutch Bangla",
        "tran_date": "2024-10-18 12:34:45",
    }
    data.update(extra)
    return data


def validation_document(transaction_id=TRAN_ID, status="VALID", amount="2000.00", **extra):
    data = {
        "status": status,
        "tran_id": transaction_id,
        "val_id": "2410181234501abcDEF",
        "amount": amount,
        "currency": "BDT",
        "store_amount": str(Decimal(amount) * Decimal("0.975")),
    }
    data.update(extra)
    return data
