from flask import Blueprint, request, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from app.services import registration
from app.utils import ok
from app.version import API_PREFIX

registration_bp = Blueprint("registration", __name__, url_prefix=f"{API_PREFIX}/vendor-registration")


@registration_bp.route("/submit", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["REGISTRATION_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many registration attempts from this IP",
)
def submit():
    """Accept a completed vendor application for admin review."""
    form = request.get_json(silent=True) or {}
    request_id = registration.submit_registration(form)
    return ok(
        message="Registration submitted successfully. You will be notified once approved.",
        requestId=request_id,
    )
