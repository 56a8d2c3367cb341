from flask import request
from app.schemas.vendor import RollupRequest
from app.services import analytics
from app.utils import ok, validate_schema
from . import admin_bp


@admin_bp.route("/analytics/rollup", methods=["POST"])
@validate_schema(RollupRequest)
def rollup():
    """Recompute daily analytics now instead of waiting for the nightly task."""
    data: RollupRequest = request.validated_data
    day = analytics.parse_day(data.date, "date")
    if data.vendorId is not None:
        row = analytics.record_daily_rollup(data.vendorId, day)
        return ok(message="Rollup written", vendors=1, date=row.date.isoformat())
    count = analytics.rollup_all(day)
    return ok(message="Rollup written", vendors=count)
