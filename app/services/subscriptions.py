"""Vendor subscription lifecycle.

``end_date`` is the only access cutoff; ``status`` records how the row got
there. Functions here flush but never commit: callers own the transaction.
"""
import logging
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import or_

from models import db
from models.subscription import VendorSubscription, Payment
from app.errors import (
    InvalidTransitionError,
    NotFoundError,
    PaymentVerificationError,
    ValidationError,
)
from app.metrics import SUBSCRIPTION_TRANSITIONS
from app.services import payments
from app.utils.clock import utcnow

logger = logging.getLogger(__name__)

TRIAL = "trial"
ACTIVE = "active"
CANCELLED = "cancelled"
GRACE_PERIOD = "grace_period"
EXPIRED = "expired"

TRIAL_DAYS = 20
GRACE_PERIOD_DAYS = 30
TRIAL_PLAN = "premium"
CURRENCY = "INR"

PLAN_LIMITS = {
    "basic": {
        "max_products": 50,
        "max_orders": 500,
        "storage_limit": 1000,
        "analytics_access": False,
        "priority_support": False,
    },
    "professional": {
        "max_products": 200,
        "max_orders": 2000,
        "storage_limit": 5000,
        "analytics_access": True,
        "priority_support": False,
    },
    "premium": {
        "max_products": 1000,
        "max_orders": 10000,
        "storage_limit": 10000,
        "analytics_access": True,
        "priority_support": True,
    },
}

PLAN_PRICES = {
    "basic": Decimal("99.00"),
    "professional": Decimal("199.00"),
    "premium": Decimal("299.00"),
}

BILLING_PERIOD_DAYS = {"monthly": 30, "yearly": 365}

ALLOWED_TRANSITIONS = {
    TRIAL: {ACTIVE, EXPIRED},
    ACTIVE: {ACTIVE, CANCELLED},
    CANCELLED: {GRACE_PERIOD, ACTIVE},
    GRACE_PERIOD: {EXPIRED, ACTIVE},
    EXPIRED: {ACTIVE},
}


def plan_price(plan_type: str, billing_cycle: str = "monthly") -> Decimal:
    monthly = PLAN_PRICES[plan_type]
    if billing_cycle == "yearly":
        return monthly * 12
    return monthly


def _apply_plan(sub: VendorSubscription, plan_type: str) -> None:
    for key, value in PLAN_LIMITS[plan_type].items():
        setattr(sub, key, value)
    sub.plan_type = plan_type


def start_trial(vendor_id: int, now=None) -> VendorSubscription:
    """Create the premium trial row for a newly approved vendor."""
    now = now or utcnow()
    end = now + timedelta(days=TRIAL_DAYS)
    sub = VendorSubscription(
        vendor_id=vendor_id,
        status=TRIAL,
        start_date=now,
        end_date=end,
        is_trial=True,
        trial_ends_at=end,
        auto_renew=False,
        amount=PLAN_PRICES[TRIAL_PLAN],
        currency=CURRENCY,
        billing_cycle="monthly",
    )
    _apply_plan(sub, TRIAL_PLAN)
    db.session.add(sub)
    db.session.flush()
    return sub


def has_access(sub: Optional[VendorSubscription], now=None) -> bool:
    if sub is None:
        return False
    now = now or utcnow()
    return now < sub.end_date


def get_subscription(vendor_id: int) -> VendorSubscription:
    sub = VendorSubscription.query.filter_by(vendor_id=vendor_id).first()
    if sub is None:
        raise NotFoundError("Subscription not found")
    return sub


def transition(sub: VendorSubscription, target: str, now=None, **changes) -> VendorSubscription:
    """Move ``sub`` to ``target`` if the lifecycle allows it."""
    source = sub.status
    if target not in ALLOWED_TRANSITIONS.get(source, set()):
        raise InvalidTransitionError(f"Cannot move subscription from {source} to {target}")
    now = now or utcnow()

    if target == ACTIVE:
        plan_type = changes.get("plan_type", sub.plan_type)
        billing_cycle = changes.get("billing_cycle", sub.billing_cycle or "monthly")
        _apply_plan(sub, plan_type)
        sub.start_date = now
        sub.end_date = now + timedelta(days=BILLING_PERIOD_DAYS[billing_cycle])
        sub.is_trial = False
        sub.auto_renew = True
        sub.cancelled_at = None
        sub.billing_cycle = billing_cycle
        sub.amount = plan_price(plan_type, billing_cycle)
        sub.currency = CURRENCY
    elif target == CANCELLED:
        sub.cancelled_at = now
        sub.auto_renew = False
    elif target == GRACE_PERIOD:
        sub.end_date = sub.end_date + timedelta(days=GRACE_PERIOD_DAYS)
    elif target == EXPIRED:
        sub.auto_renew = False

    sub.status = target
    SUBSCRIPTION_TRANSITIONS.labels(source, target).inc()
    logger.info("Subscription %s: %s -> %s", sub.id, source, target)
    return sub


def cancel(vendor_id: int, now=None) -> VendorSubscription:
    sub = get_subscription(vendor_id)
    return transition(sub, CANCELLED, now=now)


def sweep(now=None) -> dict:
    """Advance every subscription whose end_date has passed.

    trial -> expired, cancelled -> grace_period (end_date extended),
    grace_period -> expired. Active rows are left alone; they renew only
    through a verified payment.
    """
    now = now or utcnow()
    due = (
        VendorSubscription.query
        .filter(VendorSubscription.end_date <= now)
        .filter(or_(
            VendorSubscription.status == TRIAL,
            VendorSubscription.status == CANCELLED,
            VendorSubscription.status == GRACE_PERIOD,
        ))
        .all()
    )
    counts = {EXPIRED: 0, GRACE_PERIOD: 0}
    for sub in due:
        target = GRACE_PERIOD if sub.status == CANCELLED else EXPIRED
        transition(sub, target, now=now)
        counts[target] += 1
    return counts


def create_upgrade_order(vendor_id: int, plan_type: str, billing_cycle: str = "monthly",
                         gateway=None) -> Payment:
    """Raise a gateway order for a plan purchase and record it."""
    if plan_type not in PLAN_PRICES:
        raise ValidationError(f"Unknown plan: {plan_type}")
    if billing_cycle not in BILLING_PERIOD_DAYS:
        raise ValidationError(f"Unknown billing cycle: {billing_cycle}")
    get_subscription(vendor_id)

    gateway = gateway or payments.get_gateway()
    amount = plan_price(plan_type, billing_cycle)
    result = gateway.create_order(
        amount,
        CURRENCY,
        receipt=f"sub_{vendor_id}_{int(utcnow().timestamp())}",
        notes={"vendorId": str(vendor_id), "planType": plan_type, "billingCycle": billing_cycle},
    )
    if not result.ok:
        logger.warning("Gateway order failed for vendor %s: %s (%s)", vendor_id, result.kind, result.detail)
        raise PaymentVerificationError("Could not create payment order, please try again")

    payment = Payment(
        vendor_id=vendor_id,
        gateway_order_id=result.data["id"],
        plan_type=plan_type,
        billing_cycle=billing_cycle,
        amount=amount,
        currency=CURRENCY,
        status="created",
    )
    db.session.add(payment)
    db.session.flush()
    return payment


def verify_upgrade_payment(vendor_id: int, order_id: str, payment_id: str, signature: str,
                           gateway=None, now=None) -> VendorSubscription:
    """Activate the plan paid for by ``order_id`` once the signature checks out.

    A failed verification marks the payment failed and leaves the
    subscription unchanged; the caller should commit before raising to the
    client so the failure is recorded.
    """
    payment = Payment.query.filter_by(gateway_order_id=order_id, vendor_id=vendor_id).first()
    if payment is None:
        raise NotFoundError("Payment order not found")
    if payment.status == "completed":
        raise PaymentVerificationError("Payment already processed")

    gateway = gateway or payments.get_gateway()
    result = gateway.verify_payment(order_id, payment_id, signature)
    if not result.ok:
        payment.status = "failed"
        payment.gateway_payment_id = payment_id
        payment.failure_reason = result.detail
        logger.warning("Payment verification failed for vendor %s: %s", vendor_id, result.kind)
        return None

    sub = get_subscription(vendor_id)
    transition(sub, ACTIVE, now=now, plan_type=payment.plan_type, billing_cycle=payment.billing_cycle)
    payment.status = "completed"
    payment.gateway_payment_id = payment_id
    return sub
