"""Vendor analytics: daily rollups plus cached range reports.

Cached reports are keyed under a per-vendor generation token; writing a
rollup replaces the token, which orphans every report cached for that
vendor.
"""
import logging
import uuid
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from decimal import Decimal

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from extensions import cache
from models import db
from models.analytics import VendorAnalytics
from models.order import Order, OrderItem
from models.user import User, ROLE_ADMIN, ROLE_VENDOR
from models.vendor import VendorProfile
from app.errors import AuthorizationError, NotFoundError, ValidationError
from app.services import subscriptions
from app.utils.clock import utcnow
from app.utils.db import transactional

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 30
GRANULARITIES = ("day", "week", "month")
TOP_PRODUCTS = 5


def _generation_key(vendor_id) -> str:
    return f"analytics:vendor:{vendor_id}:gen"


def _generation(vendor_id) -> str:
    gen = cache.get(_generation_key(vendor_id))
    if gen is None:
        gen = uuid.uuid4().hex
        cache.set(_generation_key(vendor_id), gen, timeout=0)
    return gen


def invalidate_vendor(vendor_id) -> None:
    cache.set(_generation_key(vendor_id), uuid.uuid4().hex, timeout=0)


def parse_day(value, field):
    if value in (None, ""):
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValidationError(f"{field} must be a date in YYYY-MM-DD format", fields=[field])


def resolve_range(start=None, end=None):
    end = end or utcnow().date()
    start = start or end - timedelta(days=DEFAULT_RANGE_DAYS)
    if start > end:
        raise ValidationError("startDate must not be after endDate", fields=["startDate"])
    return start, end


def resolve_vendor(user: User, requested_vendor_id=None) -> int:
    """Return the vendor id ``user`` may read analytics for."""
    if user.role == ROLE_ADMIN:
        if requested_vendor_id is None:
            raise ValidationError("vendorId is required", fields=["vendorId"])
        if db.session.get(User, requested_vendor_id) is None:
            raise NotFoundError("Vendor not found")
        return requested_vendor_id
    if user.role != ROLE_VENDOR:
        raise AuthorizationError("Access denied")
    sub = subscriptions.get_subscription(user.id)
    if not sub.analytics_access or not subscriptions.has_access(sub):
        raise AuthorizationError("Analytics access requires an active subscription with analytics")
    return user.id


def _bucket(day: date, granularity: str) -> str:
    if granularity == "week":
        return (day - timedelta(days=day.weekday())).isoformat()
    if granularity == "month":
        return day.strftime("%Y-%m")
    return day.isoformat()


def _growth(current, previous) -> float:
    if not previous:
        return 0.0
    return round((float(current) - float(previous)) / float(previous) * 100, 2)


def _day_bounds(start: date, end: date):
    lo = datetime.combine(start, time.min)
    return lo, datetime.combine(end, time.min) + timedelta(days=1)


def _rollups(vendor_id, start, end):
    return (
        VendorAnalytics.query
        .filter(VendorAnalytics.vendor_id == vendor_id)
        .filter(VendorAnalytics.date >= start)
        .filter(VendorAnalytics.date <= end)
        .order_by(VendorAnalytics.date.asc())
        .all()
    )


def _compute(vendor_id, start, end, granularity) -> dict:
    lo, hi = _day_bounds(start, end)
    in_range = (
        Order.query.filter(Order.vendor_id == vendor_id)
        .filter(Order.created_at >= lo)
        .filter(Order.created_at < hi)
        .filter(Order.status != "cancelled")
    )
    total_orders = in_range.count()
    revenue = (
        in_range.filter(Order.status == "delivered")
        .with_entities(func.coalesce(func.sum(Order.total_amount), 0))
        .scalar()
    )
    revenue = Decimal(str(revenue or 0))
    unique_customers = in_range.with_entities(func.count(func.distinct(Order.customer_id))).scalar() or 0

    current = _rollups(vendor_id, start, end)
    span = (end - start).days + 1
    previous = _rollups(vendor_id, start - timedelta(days=span), start - timedelta(days=1))

    cur_revenue = sum(Decimal(str(r.total_revenue or 0)) for r in current)
    prev_revenue = sum(Decimal(str(r.total_revenue or 0)) for r in previous)
    cur_orders = sum(r.total_orders for r in current)
    prev_orders = sum(r.total_orders for r in previous)

    series = OrderedDict()
    for row in current:
        key = _bucket(row.date, granularity)
        point = series.setdefault(key, {"period": key, "orders": 0, "revenue": 0.0, "views": 0})
        point["orders"] += row.total_orders
        point["revenue"] += float(row.total_revenue or 0)
        point["views"] += row.views

    top = (
        db.session.query(
            OrderItem.product_id,
            OrderItem.name,
            func.sum(OrderItem.quantity).label("units"),
            func.sum(OrderItem.subtotal).label("revenue"),
        )
        .join(Order, Order.id == OrderItem.order_id)
        .filter(Order.vendor_id == vendor_id)
        .filter(Order.created_at >= lo)
        .filter(Order.created_at < hi)
        .filter(Order.status != "cancelled")
        .group_by(OrderItem.product_id, OrderItem.name)
        .order_by(func.sum(OrderItem.subtotal).desc())
        .limit(TOP_PRODUCTS)
        .all()
    )

    return {
        "vendorId": vendor_id,
        "period": {"startDate": start.isoformat(), "endDate": end.isoformat(), "granularity": granularity},
        "summary": {
            "totalOrders": total_orders,
            "totalRevenue": float(revenue),
            "totalViews": sum(r.views for r in current),
            "uniqueCustomers": unique_customers,
            "averageOrderValue": round(float(revenue) / total_orders, 2) if total_orders else 0.0,
            "revenueGrowth": _growth(cur_revenue, prev_revenue),
            "ordersGrowth": _growth(cur_orders, prev_orders),
        },
        "timeSeries": list(series.values()),
        "topProducts": [
            {
                "productId": t.product_id,
                "name": t.name,
                "unitsSold": int(t.units or 0),
                "revenue": float(t.revenue or 0),
            }
            for t in top
        ],
    }


def get_vendor_analytics(vendor_id, start=None, end=None, granularity="day") -> dict:
    granularity = granularity or "day"
    if granularity not in GRANULARITIES:
        raise ValidationError("granularity must be one of day, week, month", fields=["granularity"])
    start, end = resolve_range(start, end)

    key = f"analytics:vendor:{vendor_id}:{_generation(vendor_id)}:{start}:{end}:{granularity}"
    cached = cache.get(key)
    if cached is not None:
        return cached
    report = _compute(vendor_id, start, end, granularity)
    cache.set(key, report, timeout=current_app.config.get("ANALYTICS_CACHE_TTL", 3600))
    return report


def _upsert_day(vendor_id, day) -> VendorAnalytics:
    row = VendorAnalytics.query.filter_by(vendor_id=vendor_id, date=day).first()
    if row is None:
        row = VendorAnalytics(vendor_id=vendor_id, date=day, views=0, total_orders=0, total_revenue=0)
        db.session.add(row)
        db.session.flush()
    return row


def record_daily_rollup(vendor_id, day=None) -> VendorAnalytics:
    """Recompute one vendor's orders and revenue for ``day`` (default yesterday)."""
    day = day or (utcnow().date() - timedelta(days=1))
    lo, hi = _day_bounds(day, day)
    day_orders = (
        Order.query.filter(Order.vendor_id == vendor_id)
        .filter(Order.created_at >= lo)
        .filter(Order.created_at < hi)
        .filter(Order.status != "cancelled")
    )
    count = day_orders.count()
    revenue = (
        day_orders.filter(Order.status == "delivered")
        .with_entities(func.coalesce(func.sum(Order.total_amount), 0))
        .scalar()
    )
    with transactional("Analytics rollup failed"):
        row = _upsert_day(vendor_id, day)
        row.total_orders = count
        row.total_revenue = Decimal(str(revenue or 0))
    invalidate_vendor(vendor_id)
    logger.info("Analytics rollup for vendor %s on %s: %s orders", vendor_id, day, count)
    return row


def rollup_all(day=None) -> int:
    vendor_ids = [p.user_id for p in VendorProfile.query.with_entities(VendorProfile.user_id).all()]
    for vendor_id in vendor_ids:
        record_daily_rollup(vendor_id, day)
    return len(vendor_ids)


def record_store_view(vendor_id, day=None) -> None:
    day = day or utcnow().date()
    try:
        with transactional("Failed to record store view"):
            row = _upsert_day(vendor_id, day)
            row.views = VendorAnalytics.views + 1
    except IntegrityError:
        # Lost the insert race for today's row; it exists now.
        with transactional("Failed to record store view"):
            row = _upsert_day(vendor_id, day)
            row.views = VendorAnalytics.views + 1
