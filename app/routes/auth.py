from flask import Blueprint, request, current_app
from flask_limiter.util import get_remote_address
from extensions import limiter
from models.user import ROLE_CUSTOMER
from app.services import accounts
from app.schemas.auth import SignupRequest, LoginRequest
from app.utils import (
    ok,
    error,
    validate_schema,
    create_access_token,
    create_refresh_token,
    decode_token,
    TokenError,
)
from app.utils.auth import bearer_token
from app.version import API_PREFIX
from models import db
from models.user import User

auth_bp = Blueprint("auth", __name__, url_prefix=API_PREFIX)


def _token_pair(user):
    return {
        "access": create_access_token(user.id, user.role),
        "refresh": create_refresh_token(user.id),
        "expiresIn": current_app.config["ACCESS_TOKEN_LIFETIME_MIN"] * 60,
    }


@auth_bp.route("/auth/signup", methods=["POST"])
@validate_schema(SignupRequest)
def signup():
    """Create a customer account."""
    data: SignupRequest = request.validated_data
    user = accounts.create_user(data.name, data.email, data.password, role=ROLE_CUSTOMER, phone=data.phone)
    return ok({"user": user.to_dict(), **_token_pair(user)}, message="Account created", status=201)


@auth_bp.route("/auth/login", methods=["POST"])
@limiter.limit(
    lambda: current_app.config["LOGIN_LIMIT_PER_IP"],
    key_func=get_remote_address,
    error_message="Too many logins from this IP",
)
@validate_schema(LoginRequest)
def login():
    data: LoginRequest = request.validated_data
    user = accounts.authenticate(data.email, data.password)
    return ok({"user": user.to_dict(), **_token_pair(user)}, message="Logged in")


@auth_bp.route("/auth/refresh", methods=["POST"])
def refresh_tokens():
    j = request.get_json(silent=True) or {}
    token = j.get("refresh") or j.get("refresh_token", "")
    try:
        payload = decode_token(token, expected_type="refresh")
    except TokenError as e:
        return error(str(e), status=401)

    user = db.session.get(User, payload["sub"])
    if user is None:
        return error("User not found", status=401)
    return ok(_token_pair(user), message="Token refreshed")


@auth_bp.route("/logout", methods=["POST"])
def logout_handler():
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return error("Token missing", status=401)
    try:
        decode_token(bearer_token(auth))
    except TokenError as e:
        return error(str(e), status=401)
    return ok(message="Logged out")
