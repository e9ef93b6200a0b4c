"""
SSLCommerz integration.

Two calls: the session API, which returns the hosted checkout page URL,
and the validator API, which confirms a notification out-of-band.
"""

import logging

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

SANDBOX_BASE_URL = "https://sandbox.sslcommerz.com"
LIVE_BASE_URL = "https://securepay.sslcommerz.com"

SESSION_PATH = "/gwprocess/v4/api.php"
VALIDATOR_PATH = "/validator/api/validationserverAPI.php"


class SSLCommerzError(Exception):
    """The gateway could not be reached or rejected the request."""


def _base_url():
    return LIVE_BASE_URL if settings.SSLCOMMERZ_IS_LIVE else SANDBOX_BASE_URL


def _credentials():
    return {
        "store_id": settings.SSLCOMMERZ_STORE_ID,
        "store_passwd": settings.SSLCOMMERZ_STORE_PASSWORD,
    }


def init_session(payment_data: dict) -> str:
    """
    Open a checkout session and return the GatewayPageURL.

    Raises:
        SSLCommerzError: network failure or a non-SUCCESS response
    """
    payload = {**_credentials(), **payment_data}

    try:
        response = requests.post(
            f"{_base_url()}{SESSION_PATH}",
            data=payload,
            timeout=settings.SSLCOMMERZ_TIMEOUT,
        )
        response.raise_for_status()
        result = response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("SSLCommerz session request failed for %s: %s", payment_data.get("tran_id"), e)
        raise SSLCommerzError(f"Session request failed: {e}") from e

    if result.get("status") != "SUCCESS" or not result.get("GatewayPageURL"):
        reason = result.get("failedreason") or "unknown reason"
        logger.error("SSLCommerz rejected session for %s: %s", payment_data.get("tran_id"), reason)
        raise SSLCommerzError(f"Session rejected: {reason}")

    return result["GatewayPageURL"]


def validate_transaction(val_id: str) -> dict:
    """
    Ask the validator API about ``val_id``.

    Returns the validator's JSON document (``status``, ``tran_id``,
    ``amount``, ``currency`` ...). Callers decide what counts as valid.
    """
    params = {"val_id": val_id, "format": "json", "v": 1, **_credentials()}

    try:
        response = requests.get(
            f"{_base_url()}{VALIDATOR_PATH}",
            params=params,
            timeout=settings.SSLCOMMERZ_TIMEOUT,
        )
        response.raise_for_status()
        return response.json()
    except (requests.exceptions.RequestException, ValueError) as e:
        logger.error("SSLCommerz validation request failed for val_id %s: %s", val_id, e)
        raise SSLCommerzError(f"Validation request failed: {e}") from e
