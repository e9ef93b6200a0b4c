import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# BOOKING CONFLICTS (409)
# -------------------------------------------------------------------
class SlotAlreadyBooked(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "This time slot is already booked for the selected date"
    default_code = "SLOT_ALREADY_BOOKED"


class SlotTemporarilyHeld(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = (
        "This time slot is temporarily held by another booking. "
        "Please try again in a few minutes"
    )
    default_code = "SLOT_TEMPORARILY_HELD"


# -------------------------------------------------------------------
# BUSINESS RULES (400)
# -------------------------------------------------------------------
class IllegalTransition(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "This status change is not allowed"
    default_code = "ILLEGAL_TRANSITION"


class AlreadyPaid(IllegalTransition):
    default_detail = "This booking has already been paid"
    default_code = "ALREADY_PAID"


# -------------------------------------------------------------------
# PAYMENT GATEWAY
# -------------------------------------------------------------------
class GatewayValidationFailure(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Payment notification failed gateway validation"
    default_code = "GATEWAY_VALIDATION_FAILED"


class PaymentGatewayUnavailable(APIException):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment gateway is unavailable, please try again"
    default_code = "PAYMENT_GATEWAY_UNAVAILABLE"


class InternalError(APIException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"
    default_code = "INTERNAL_ERROR"


# Stable codes for DRF's built-in exceptions
BUILTIN_CODES = {
    exceptions.ValidationError: "VALIDATION_ERROR",
    exceptions.ParseError: "VALIDATION_ERROR",
    exceptions.NotFound: "NOT_FOUND",
    exceptions.PermissionDenied: "FORBIDDEN",
    exceptions.NotAuthenticated: "NOT_AUTHENTICATED",
    exceptions.AuthenticationFailed: "NOT_AUTHENTICATED",
    exceptions.MethodNotAllowed: "METHOD_NOT_ALLOWED",
    exceptions.Throttled: "THROTTLED",
}


def _error_code(exc):
    for exc_class, code in BUILTIN_CODES.items():
        if type(exc) is exc_class:
            return code
    return getattr(exc, "default_code", "ERROR").upper()


def api_exception_handler(exc, context):
    """
    Render every error as {"status": "failed", "error_code", "message"}.
    Field validation errors also carry "errors"; unexpected exceptions
    become a generic 500 with no internals exposed.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s",
            view.__class__.__name__ if view else "view",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return Response(
            {
                "status": "failed",
                "error_code": InternalError.default_code,
                "message": InternalError.default_detail,
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    payload = {"status": "failed", "error_code": _error_code(exc)}

    if isinstance(exc, exceptions.ValidationError):
        payload["message"] = "Validation failed"
        payload["errors"] = response.data
    else:
        payload["message"] = str(exc.detail)

    response.data = payload
    return response
