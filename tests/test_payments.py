import hashlib
import hmac
from decimal import Decimal

import requests

from app.services import payments
from app.services.payments import RazorpayGateway


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


def _gateway(**overrides):
    args = {"key_id": "rzp_test_key", "key_secret": "rzp_test_secret",
            "base_url": "https://api.razorpay.test/v1/", "timeout": 2}
    args.update(overrides)
    return RazorpayGateway(**args)


def test_to_paise():
    assert payments.to_paise(Decimal("199.00")) == 19900
    assert payments.to_paise(99.5) == 9950


def test_create_order_posts_amount_in_paise(monkeypatch):
    seen = {}

    def fake_post(url, json=None, auth=None, timeout=None):
        seen.update(url=url, json=json, auth=auth, timeout=timeout)
        return FakeResponse(200, {"id": "order_X1"})

    monkeypatch.setattr(payments.requests, "post", fake_post)
    result = _gateway().create_order(Decimal("299.00"), "INR", receipt="sub_1", notes={"planType": "premium"})
    assert result.ok
    assert result.data["id"] == "order_X1"
    assert seen["url"] == "https://api.razorpay.test/v1/orders"
    assert seen["json"] == {"amount": 29900, "currency": "INR", "receipt": "sub_1", "notes": {"planType": "premium"}}
    assert seen["auth"] == ("rzp_test_key", "rzp_test_secret")
    assert seen["timeout"] == 2


def test_timeout_is_reported_not_raised(monkeypatch):
    def slow_post(*args, **kwargs):
        raise requests.exceptions.Timeout()

    monkeypatch.setattr(payments.requests, "post", slow_post)
    result = _gateway().create_order(99, "INR", receipt="r")
    assert not result.ok
    assert result.kind == payments.KIND_TIMEOUT


def test_network_error_is_reported(monkeypatch):
    def refused(*args, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(payments.requests, "post", refused)
    result = _gateway().create_order(99, "INR", receipt="r")
    assert result.kind == payments.KIND_NETWORK
    assert "connection refused" in result.detail


def test_declined_order_carries_gateway_description(monkeypatch):
    monkeypatch.setattr(
        payments.requests, "post",
        lambda *a, **k: FakeResponse(400, {"error": {"description": "amount exceeds maximum"}}),
    )
    result = _gateway().create_order(99, "INR", receipt="r")
    assert result.kind == payments.KIND_DECLINED
    assert result.detail == "amount exceeds maximum"


def test_missing_keys_short_circuit(monkeypatch):
    def must_not_call(*args, **kwargs):
        raise AssertionError("gateway contacted without keys")

    monkeypatch.setattr(payments.requests, "post", must_not_call)
    result = _gateway(key_id="", key_secret="").create_order(99, "INR", receipt="r")
    assert result.kind == payments.KIND_CONFIG


def test_verify_payment_signature():
    good = hmac.new(b"rzp_test_secret", b"order_1|pay_1", hashlib.sha256).hexdigest()
    gateway = _gateway()
    assert gateway.verify_payment("order_1", "pay_1", good).ok
    bad = gateway.verify_payment("order_1", "pay_2", good)
    assert not bad.ok
    assert bad.kind == payments.KIND_SIGNATURE
    assert not gateway.verify_payment("order_1", "pay_1", None).ok


def test_gateway_reads_app_config(app):
    gateway = payments.get_gateway()
    assert gateway.key_id == "rzp_test_key"
    assert gateway.base_url == "https://api.razorpay.com/v1"
