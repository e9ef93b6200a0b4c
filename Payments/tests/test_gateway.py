from unittest.mock import MagicMock, patch

import requests
from django.test import SimpleTestCase, override_settings

from Payments import gateway


def fake_response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class InitSessionTests(SimpleTestCase):

    @patch("Payments.gateway.requests.post")
    def test_returns_gateway_page(self, post):
        post.return_value = fake_response({
            "status": "SUCCESS",
            "GatewayPageURL": "https://sandbox.sslcommerz.com/EasyCheckOut/abc",
        })

        url = gateway.init_session({"tran_id": "turf-booking-1", "total_amount": "2000.00"})

        self.assertEqual(url, "https://sandbox.sslcommerz.com/EasyCheckOut/abc")
        called_url = post.call_args[0][0]
        self.assertTrue(called_url.startswith(gateway.SANDBOX_BASE_URL))
        sent = post.call_args[1]["data"]
        self.assertEqual(sent["store_id"], "teststore")
        self.assertEqual(sent["tran_id"], "turf-booking-1")

    @override_settings(SSLCOMMERZ_IS_LIVE=True)
    @patch("Payments.gateway.requests.post")
    def test_live_mode_uses_secure_host(self, post):
        post.return_value = fake_response({"status": "SUCCESS", "GatewayPageURL": "https://x"})

        gateway.init_session({"tran_id": "t"})
        self.assertTrue(post.call_args[0][0].startswith(gateway.LIVE_BASE_URL))

    @patch("Payments.gateway.requests.post")
    def test_rejected_session(self, post):
        post.return_value = fake_response({"status": "FAILED", "failedreason": "Store inactive"})

        with self.assertRaises(gateway.SSLCommerzError):
            gateway.init_session({"tran_id": "t"})

    @patch("Payments.gateway.requests.post", side_effect=requests.exceptions.Timeout)
    def test_network_failure(self, post):
        with self.assertRaises(gateway.SSLCommerzError):
            gateway.init_session({"tran_id": "t"})


class ValidateTransactionTests(SimpleTestCase):

    @patch("Payments.gateway.requests.get")
    def test_queries_validator(self, get):
        get.return_value = fake_response({"status": "VALID", "tran_id": "t"})

        result = gateway.validate_transaction("val-1")

        self.assertEqual(result["status"], "VALID")
        params = get.call_args[1]["params"]
        self.assertEqual(params["val_id"], "val-1")
        self.assertEqual(params["store_passwd"], "teststore@ssl")
        self.assertEqual(params["format"], "json")

    @patch("Payments.gateway.requests.get", side_effect=requests.exceptions.ConnectionError)
    def test_network_failure(self, get):
        with self.assertRaises(gateway.SSLCommerzError):
            gateway.validate_transaction("val-1")
