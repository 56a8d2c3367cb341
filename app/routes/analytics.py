from flask import Blueprint, request
from app.errors import ValidationError
from app.services import analytics
from app.utils import auth_required, ok, role_required
from app.version import API_PREFIX

analytics_bp = Blueprint("analytics", __name__, url_prefix=API_PREFIX)


@analytics_bp.route("/analytics", methods=["GET"])
@auth_required
@role_required(["vendor:view_analytics", "admin"], message="Access denied")
def vendor_analytics():
    """Summary, time series and top products for a vendor over a date range."""
    raw_vendor = request.args.get("vendorId")
    try:
        requested = int(raw_vendor) if raw_vendor else None
    except ValueError:
        raise ValidationError("vendorId must be an integer", fields=["vendorId"])
    vendor_id = analytics.resolve_vendor(request.user, requested)
    report = analytics.get_vendor_analytics(
        vendor_id,
        start=analytics.parse_day(request.args.get("startDate"), "startDate"),
        end=analytics.parse_day(request.args.get("endDate"), "endDate"),
        granularity=request.args.get("granularity", "day"),
    )
    return ok(report, message="Analytics fetched")
