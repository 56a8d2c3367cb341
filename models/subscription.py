from models import db, BIGINT
from datetime import datetime


class VendorSubscription(db.Model):
    __tablename__ = "vendor_subscriptions"

    id = db.Column(BIGINT, primary_key=True)
    vendor_id = db.Column(BIGINT, db.ForeignKey("users.id"), unique=True, nullable=False)

    plan_type = db.Column(db.String(20), nullable=False)      # basic, professional, premium
    status = db.Column(db.String(20), nullable=False)         # trial, active, cancelled, grace_period, expired
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime, nullable=False)         # access cutoff, whatever the status says
    is_trial = db.Column(db.Boolean, default=False)
    trial_ends_at = db.Column(db.DateTime, nullable=True)
    auto_renew = db.Column(db.Boolean, default=False)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    # Entitlements snapshotted from the plan at creation / conversion
    max_products = db.Column(db.Integer, nullable=False)
    max_orders = db.Column(db.Integer, nullable=False)
    storage_limit = db.Column(db.Integer, nullable=False)     # MB
    analytics_access = db.Column(db.Boolean, default=False)
    priority_support = db.Column(db.Boolean, default=False)

    # Billing
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="INR")
    billing_cycle = db.Column(db.String(20), nullable=False, default="monthly")

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "vendorId": self.vendor_id,
            "planType": self.plan_type,
            "status": self.status,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "isTrial": self.is_trial,
            "trialEndsAt": self.trial_ends_at.isoformat() if self.trial_ends_at else None,
            "autoRenew": self.auto_renew,
            "cancelledAt": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "maxProducts": self.max_products,
            "maxOrders": self.max_orders,
            "storageLimit": self.storage_limit,
            "analyticsAccess": self.analytics_access,
            "prioritySupport": self.priority_support,
            "amount": float(self.amount),
            "currency": self.currency,
            "billingCycle": self.billing_cycle,
        }


class Payment(db.Model):
    """One row per gateway order raised for a subscription purchase."""

    __tablename__ = "payments"

    id = db.Column(BIGINT, primary_key=True)
    vendor_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False, index=True)
    gateway_order_id = db.Column(db.String(64), unique=True, nullable=False)
    gateway_payment_id = db.Column(db.String(64), nullable=True)
    plan_type = db.Column(db.String(20), nullable=False)
    billing_cycle = db.Column(db.String(20), nullable=False, default="monthly")
    amount = db.Column(db.Numeric(10, 2), nullable=False)
    currency = db.Column(db.String(3), nullable=False, default="INR")
    status = db.Column(db.String(20), nullable=False, default="created")  # created, completed, failed
    failure_reason = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
