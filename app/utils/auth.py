from functools import wraps
from flask import request, g
from .responses import error
from app.auth.permissions import role_has_scope
from .jwt import decode_token, TokenError
from models import db
from models.user import User


def bearer_token(header: str) -> str:
    return header.split(" ", 1)[1] if header.startswith("Bearer ") else header


def auth_required(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        auth = request.headers.get("Authorization", "")
        if not auth:
            return error("Auth header missing", status=401)
        try:
            payload = decode_token(bearer_token(auth), expected_type="access")
        except TokenError as e:
            return error(str(e), status=401)

        user = db.session.get(User, payload["sub"])
        if user is None:
            return error("User not found", status=401)
        g.user_id = user.id
        g.role = user.role
        request.user = user
        return func(*args, **kwargs)

    return wrapper


def _to_set(obj):
    return set(obj) if isinstance(obj, (list, tuple, set)) else {obj}


def role_required(required, message="Forbidden"):
    """Authorize based on user role or scoped action."""
    required_set = _to_set(required)

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            role = getattr(g, "role", None)
            db_role = getattr(getattr(request, "user", None), "role", None)
            if db_role:
                role = db_role
            if not role:
                return error("Role missing", status=403)
            for entry in required_set:
                if ":" in entry:
                    r, action = entry.split(":", 1)
                    if role == r and role_has_scope(role, action):
                        break
                else:
                    if role == entry:
                        break
            else:
                return error(message, status=403)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
