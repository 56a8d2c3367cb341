from models import db, BIGINT
from datetime import datetime


class VendorAnalytics(db.Model):
    """Per-day rollup of a vendor's orders, revenue and store views."""

    __tablename__ = "vendor_analytics"
    __table_args__ = (
        db.UniqueConstraint("vendor_id", "date", name="uq_vendor_analytics_day"),
    )

    id = db.Column(BIGINT, primary_key=True)
    vendor_id = db.Column(BIGINT, db.ForeignKey("users.id"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    views = db.Column(db.Integer, default=0, nullable=False)
    total_orders = db.Column(db.Integer, default=0, nullable=False)
    total_revenue = db.Column(db.Numeric(12, 2), default=0, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TrendingSearch(db.Model):
    __tablename__ = "trending_searches"

    id = db.Column(BIGINT, primary_key=True)
    term = db.Column("query", db.String(100), unique=True, nullable=False)
    search_count = db.Column(db.Integer, default=0, nullable=False)
    last_searched = db.Column(db.DateTime, default=datetime.utcnow)
