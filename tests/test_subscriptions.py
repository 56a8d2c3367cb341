import hashlib
import hmac
from datetime import timedelta
from decimal import Decimal

import pytest
import requests

from app.errors import InvalidTransitionError
from app.services import subscriptions
from app.utils import utcnow
from app.version import API_PREFIX
from models import db
from models.subscription import Payment, VendorSubscription


def _hdr(token):
    return {"Authorization": f"Bearer {token}"}


def _sign(order_id, payment_id, secret="rzp_test_secret"):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class FakeResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        return self._payload


@pytest.fixture
def gateway_orders(monkeypatch):
    """Answer Razorpay order creation without the network."""
    calls = []

    def fake_post(url, json=None, auth=None, timeout=None):
        calls.append({"url": url, "json": json, "auth": auth, "timeout": timeout})
        return FakeResponse(200, {"id": f"order_{len(calls)}", "amount": json["amount"], "status": "created"})

    monkeypatch.setattr("app.services.payments.requests.post", fake_post)
    return calls


def _sub(vendor):
    db.session.expire_all()
    return VendorSubscription.query.filter_by(vendor_id=vendor.id).one()


def test_trial_grants_access_until_end_date(make_vendor):
    vendor = make_vendor()
    sub = _sub(vendor)
    assert subscriptions.has_access(sub, sub.start_date)
    assert subscriptions.has_access(sub, sub.end_date - timedelta(seconds=1))
    assert not subscriptions.has_access(sub, sub.end_date)
    assert not subscriptions.has_access(None)


def test_plan_price_by_cycle():
    assert subscriptions.plan_price("basic") == Decimal("99.00")
    assert subscriptions.plan_price("professional", "yearly") == Decimal("2388.00")


def test_sweep_expires_finished_trials(make_vendor):
    vendor = make_vendor()
    sub = _sub(vendor)
    counts = subscriptions.sweep(now=sub.end_date + timedelta(minutes=1))
    db.session.commit()
    assert counts == {"expired": 1, "grace_period": 0}
    assert _sub(vendor).status == "expired"


def test_sweep_leaves_running_subscriptions_alone(make_vendor):
    make_vendor(email="a@example.com", store_name="Trial Store")
    make_vendor(email="b@example.com", store_name="Paid Store", plan="basic", expired=True)
    counts = subscriptions.sweep()
    assert counts == {"expired": 0, "grace_period": 0}


def test_cancelled_subscription_gets_grace_then_expires(make_vendor):
    vendor = make_vendor(plan="professional")
    subscriptions.cancel(vendor.id)
    db.session.commit()
    first_end = _sub(vendor).end_date

    subscriptions.sweep(now=first_end + timedelta(hours=1))
    db.session.commit()
    sub = _sub(vendor)
    assert sub.status == "grace_period"
    assert sub.end_date == first_end + timedelta(days=30)
    assert subscriptions.has_access(sub, first_end + timedelta(days=1))

    subscriptions.sweep(now=sub.end_date)
    db.session.commit()
    assert _sub(vendor).status == "expired"


def test_invalid_transition_raises(make_vendor):
    vendor = make_vendor()
    with pytest.raises(InvalidTransitionError):
        subscriptions.transition(_sub(vendor), subscriptions.CANCELLED)


def test_activation_applies_plan_limits(make_vendor):
    vendor = make_vendor()
    now = utcnow()
    sub = subscriptions.transition(_sub(vendor), subscriptions.ACTIVE, now=now,
                                   plan_type="basic", billing_cycle="yearly")
    assert sub.is_trial is False
    assert sub.end_date == now + timedelta(days=365)
    assert (sub.max_products, sub.max_orders, sub.analytics_access) == (50, 500, False)
    assert sub.amount == Decimal("1188.00")


def test_get_subscription_endpoint(client, make_vendor):
    vendor = make_vendor()
    r = client.get(f"{API_PREFIX}/vendor/subscription", headers=_hdr(vendor.token))
    assert r.status_code == 200
    body = r.get_json()
    assert body["subscription"]["status"] == "trial"
    assert body["hasAccess"] is True


def test_subscription_endpoint_is_vendor_only(client, login):
    customer = login("buyer@example.com", "customer")
    r = client.get(f"{API_PREFIX}/vendor/subscription", headers=_hdr(customer["access"]))
    assert r.status_code == 403
    assert r.get_json()["error"] == "Vendor access required"


def test_upgrade_and_verify_activates_plan(client, make_vendor, gateway_orders):
    vendor = make_vendor()
    r = client.post(
        f"{API_PREFIX}/vendor/subscription/upgrade",
        json={"tier": "professional", "billing_cycle": "monthly"},
        headers=_hdr(vendor.token),
    )
    assert r.status_code == 200
    body = r.get_json()
    assert body["orderId"] == "order_1"
    assert body["amount"] == 199.0
    assert body["keyId"] == "rzp_test_key"
    assert gateway_orders[0]["json"]["amount"] == 19900
    assert gateway_orders[0]["auth"] == ("rzp_test_key", "rzp_test_secret")
    assert gateway_orders[0]["timeout"] == 10

    r = client.post(
        f"{API_PREFIX}/vendor/subscription/verify-payment",
        json={"orderId": "order_1", "paymentId": "pay_1", "signature": _sign("order_1", "pay_1")},
        headers=_hdr(vendor.token),
    )
    assert r.status_code == 200
    data = r.get_json()["subscription"]
    assert data["status"] == "active"
    assert data["planType"] == "professional"
    assert data["isTrial"] is False
    assert data["maxProducts"] == 200
    assert Payment.query.filter_by(gateway_order_id="order_1").one().status == "completed"


def test_bad_signature_records_failure_and_keeps_trial(client, make_vendor, gateway_orders):
    vendor = make_vendor()
    client.post(
        f"{API_PREFIX}/vendor/subscription/upgrade",
        json={"tier": "basic"},
        headers=_hdr(vendor.token),
    )
    r = client.post(
        f"{API_PREFIX}/vendor/subscription/verify-payment",
        json={"orderId": "order_1", "paymentId": "pay_1", "signature": "forged"},
        headers=_hdr(vendor.token),
    )
    assert r.status_code == 400
    assert r.get_json()["error"] == "Payment verification failed"
    db.session.expire_all()
    payment = Payment.query.filter_by(gateway_order_id="order_1").one()
    assert payment.status == "failed"
    assert payment.failure_reason == "Payment signature mismatch"
    assert _sub(vendor).status == "trial"


def test_gateway_timeout_surfaces_as_payment_error(client, make_vendor, monkeypatch):
    vendor = make_vendor()

    def slow_post(*args, **kwargs):
        raise requests.exceptions.Timeout("read timed out")

    monkeypatch.setattr("app.services.payments.requests.post", slow_post)
    r = client.post(
        f"{API_PREFIX}/vendor/subscription/upgrade",
        json={"tier": "premium"},
        headers=_hdr(vendor.token),
    )
    assert r.status_code == 400
    assert r.get_json()["error"] == "Could not create payment order, please try again"
    assert Payment.query.count() == 0


def test_unknown_tier_is_a_validation_error(client, make_vendor):
    vendor = make_vendor()
    r = client.post(
        f"{API_PREFIX}/vendor/subscription/upgrade",
        json={"tier": "platinum"},
        headers=_hdr(vendor.token),
    )
    assert r.status_code == 400
    assert r.get_json()["fields"] == ["tier"]


def test_verify_twice_is_rejected(client, make_vendor, gateway_orders):
    vendor = make_vendor()
    client.post(f"{API_PREFIX}/vendor/subscription/upgrade", json={"tier": "basic"}, headers=_hdr(vendor.token))
    payload = {"orderId": "order_1", "paymentId": "pay_1", "signature": _sign("order_1", "pay_1")}
    assert client.post(f"{API_PREFIX}/vendor/subscription/verify-payment", json=payload,
                       headers=_hdr(vendor.token)).status_code == 200
    r = client.post(f"{API_PREFIX}/vendor/subscription/verify-payment", json=payload, headers=_hdr(vendor.token))
    assert r.status_code == 400
    assert r.get_json()["error"] == "Payment already processed"


def test_cancel_keeps_access_until_period_end(client, make_vendor):
    vendor = make_vendor(plan="premium")
    r = client.post(f"{API_PREFIX}/vendor/subscription/cancel", headers=_hdr(vendor.token))
    assert r.status_code == 200
    sub = _sub(vendor)
    assert sub.status == "cancelled"
    assert sub.auto_renew is False
    assert subscriptions.has_access(sub)


def test_trial_cannot_be_cancelled(client, make_vendor):
    vendor = make_vendor()
    r = client.post(f"{API_PREFIX}/vendor/subscription/cancel", headers=_hdr(vendor.token))
    assert r.status_code == 400
    assert r.get_json()["error"] == "Cannot move subscription from trial to cancelled"


def test_sweep_task_runs_eagerly(make_vendor):
    from app.tasks.subscriptions import sweep_subscriptions_task

    vendor = make_vendor()
    sub = _sub(vendor)
    sub.end_date = utcnow() - timedelta(minutes=5)
    db.session.commit()

    result = sweep_subscriptions_task.delay()
    assert result.get() == {"expired": 1, "grace_period": 0}
    assert _sub(vendor).status == "expired"
