from flask import request
from app.errors import ValidationError
from app.services import registration
from app.utils import ok
from models.vendor import REGISTRATION_STATUSES
from . import admin_bp


@admin_bp.route("/vendor-registrations", methods=["GET"])
def list_registrations():
    status = request.args.get("status")
    if status and status not in REGISTRATION_STATUSES:
        raise ValidationError(f"status must be one of {', '.join(REGISTRATION_STATUSES)}", fields=["status"])
    rows = registration.list_registrations(status)
    return ok(message="Registrations fetched", registrations=[r.to_dict() for r in rows])


@admin_bp.route("/vendor-registrations/<int:request_id>", methods=["GET"])
def get_registration(request_id):
    req = registration.get_registration(request_id)
    return ok(message="Registration fetched", registration=req.to_dict())


@admin_bp.route("/vendor-registrations/<int:request_id>/approve", methods=["POST"])
def approve(request_id):
    """Approve a pending application and start the vendor's premium trial."""
    result = registration.approve_registration(request_id, request.user)
    return ok(
        message="Vendor approved successfully! Premium trial activated for 20 days.",
        **result,
    )


@admin_bp.route("/vendor-registrations/<int:request_id>/reject", methods=["POST"])
def reject(request_id):
    body = request.get_json(silent=True) or {}
    reason = (body.get("reason") or "").strip()
    if not reason:
        raise ValidationError("Rejection reason is required", fields=["reason"])
    req = registration.reject_registration(request_id, request.user, reason)
    return ok(message="Vendor registration rejected", registration=req.to_dict())
