from .responses import ok, error, validation_error_response
from .auth import auth_required, role_required
from .validation import missing_fields, validate_schema
from .db import transactional
from .jwt import (
    create_access_token,
    create_refresh_token,
    decode_token,
    TokenError,
)
from .passwords import hash_password, check_password
from .clock import utcnow

__all__ = [
    'ok',
    'error',
    'validation_error_response',
    'auth_required',
    'role_required',
    'create_access_token',
    'create_refresh_token',
    'decode_token',
    'TokenError',
    'missing_fields',
    'validate_schema',
    'transactional',
    'hash_password',
    'check_password',
    'utcnow',
]
