import logging
from flask import Blueprint
from werkzeug.exceptions import HTTPException
from app.utils.responses import error

errors_bp = Blueprint("errors_bp", __name__)


class MarketplaceError(Exception):
    """Base for every error surfaced to API callers."""

    status = 400
    default_message = "Request could not be processed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MarketplaceError):
    default_message = "Validation error"

    def __init__(self, message=None, fields=None):
        self.fields = list(fields or [])
        if message is None and self.fields:
            message = f"Missing required fields: {', '.join(self.fields)}"
        super().__init__(message)


class DuplicateRequestError(MarketplaceError):
    default_message = "A registration request with this email already exists"


class DuplicateUserError(MarketplaceError):
    default_message = "A user with this email already exists"


class ConflictError(MarketplaceError):
    default_message = "A user with this email already exists"


class AlreadyProcessedError(MarketplaceError):
    default_message = "Registration request has already been processed"


class InvalidTransitionError(MarketplaceError):
    default_message = "Subscription cannot move to the requested state"


class PaymentVerificationError(MarketplaceError):
    default_message = "Payment verification failed"


class AuthenticationError(MarketplaceError):
    status = 401
    default_message = "Authentication required"


class AuthorizationError(MarketplaceError):
    status = 403
    default_message = "Admin access required"


class NotFoundError(MarketplaceError):
    status = 404
    default_message = "Not found"


class TransactionError(MarketplaceError):
    status = 500
    default_message = "An unexpected error occurred. Please try again later."


class NotificationDeliveryError(MarketplaceError):
    """Email or socket delivery failed; never fatal to the triggering operation."""

    status = 502
    default_message = "Notification delivery failed"


@errors_bp.app_errorhandler(MarketplaceError)
def handle_marketplace_error(e):
    if e.status >= 500:
        logging.error("Request failed: %s", e, exc_info=e.__cause__ or e)
    return error(e.message, status=e.status)


@errors_bp.app_errorhandler(HTTPException)
def handle_http_exception(e):
    msg = e.description or getattr(e, "name", "HTTP Error")
    return error(msg, status=e.code, code=e.code)

@errors_bp.app_errorhandler(Exception)
def handle_unexpected_exception(e):
    logging.exception("Unhandled exception")
    return error(
        "An unexpected error occurred. Please try again later.",
        status=500,
        code=500,
    )
