"""Vendor onboarding: application intake and the admin approval gate."""
import logging
import re

from pydantic import ValidationError as SchemaError
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import db
from models.notification import Notification
from models.user import User, ROLE_ADMIN, ROLE_VENDOR
from models.vendor import (
    VendorRegistrationRequest,
    VendorProfile,
    STATUS_PENDING,
    STATUS_APPROVED,
    STATUS_REJECTED,
)
from app.errors import (
    AlreadyProcessedError,
    AuthorizationError,
    ConflictError,
    DuplicateRequestError,
    DuplicateUserError,
    MarketplaceError,
    NotFoundError,
    TransactionError,
    ValidationError,
)
from app.metrics import REGISTRATIONS_SUBMITTED, REGISTRATION_DECISIONS
from app.schemas.registration import VendorRegistrationForm
from app.services import mail, subscriptions
from app.utils.clock import utcnow
from app.utils.db import transactional
from app.utils.passwords import hash_password
from app.utils.validation import missing_fields

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("fullName", "email", "phone", "password", "companyName")
# Attempts at approval when a concurrent approval takes the chosen store slug.
SLUG_ATTEMPTS = 3


def slugify(company_name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (company_name or "").lower())
    return slug.strip("-")


def _unique_slug(company_name: str) -> str:
    base = slugify(company_name) or "store"
    slug, n = base, 1
    while VendorProfile.query.filter_by(store_slug=slug).first() is not None:
        n += 1
        slug = f"{base}-{n}"
    return slug


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def _open_request_exists(email: str) -> bool:
    return (
        VendorRegistrationRequest.query
        .filter(VendorRegistrationRequest.email == email)
        .filter(VendorRegistrationRequest.status != STATUS_REJECTED)
        .first()
        is not None
    )


def _require_admin(reviewer):
    if reviewer is None or getattr(reviewer, "role", None) != ROLE_ADMIN:
        raise AuthorizationError("Admin access required")


def submit_registration(form: dict) -> int:
    """Validate and store a vendor application; returns the request id."""
    missing = missing_fields(form, REQUIRED_FIELDS)
    if missing:
        raise ValidationError(fields=missing)
    try:
        data = VendorRegistrationForm.model_validate(form)
    except SchemaError as e:
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in e.errors()]
        raise ValidationError(f"Invalid fields: {', '.join(fields)}", fields=fields) from e

    email = _normalize_email(data.email)
    if _open_request_exists(email):
        raise DuplicateRequestError()
    if User.query.filter_by(email=email).first() is not None:
        raise DuplicateUserError()

    req = VendorRegistrationRequest(
        full_name=data.full_name,
        email=email,
        phone=data.phone,
        password_hash=hash_password(data.password),
        company_name=data.company_name,
        business_type=data.business_type,
        business_category=data.business_category,
        years_in_business=data.years_in_business,
        number_of_employees=data.number_of_employees,
        address_line1=data.address_line1,
        address_line2=data.address_line2,
        landmark=data.landmark,
        city=data.city,
        state=data.state or "Kerala",
        pin_code=data.pin_code,
        latitude=data.coordinates.lat if data.coordinates else None,
        longitude=data.coordinates.lng if data.coordinates else None,
        delivery_radius=data.delivery_radius or 5,
        agent_code=data.agent_code,
        agent_name=data.agent_name,
        agent_phone=data.agent_phone,
        agent_visit_date=data.agent_visit_date,
        reference_notes=data.reference_notes,
        gst_number=data.gst_number,
        gst_verified=data.gst_verified,
        gst_details=data.gst_details,
        gst_certificate=data.gst_certificate,
        logo=data.logo,
        banner=data.banner,
        tagline=data.tagline,
        # Every approved vendor starts on the premium trial.
        selected_package="premium",
        billing_cycle=data.billing_cycle or "monthly",
        add_ons=data.add_ons,
        terms_accepted=data.terms_accepted,
        privacy_accepted=data.privacy_accepted,
        status=STATUS_PENDING,
    )
    try:
        with transactional("Failed to store registration request"):
            db.session.add(req)
    except IntegrityError as e:
        raise DuplicateRequestError() from e

    REGISTRATIONS_SUBMITTED.inc()
    logger.info("Registration request %s submitted", req.id)

    mail.queue_email(
        req.email,
        "GrabtoGo Vendor Application Submitted",
        "application_submitted",
        application=req,
        trial_days=subscriptions.TRIAL_DAYS,
    )
    mail.queue_email(
        mail.admin_address(),
        f"New Vendor Application: {req.company_name}",
        "admin_new_application",
        application=req,
    )
    return req.id


def list_registrations(status=None):
    query = VendorRegistrationRequest.query
    if status:
        query = query.filter_by(status=status)
    return query.order_by(
        VendorRegistrationRequest.created_at.desc(),
        VendorRegistrationRequest.id.desc(),
    ).all()


def get_registration(request_id) -> VendorRegistrationRequest:
    req = db.session.get(VendorRegistrationRequest, request_id)
    if req is None:
        raise NotFoundError("Registration request not found")
    return req


def _mark_reviewed(request_id, reviewer_id, status, now, reason=None):
    values = {"status": status, "reviewed_by": reviewer_id, "reviewed_at": now}
    if reason is not None:
        values["rejection_reason"] = reason
    result = db.session.execute(
        update(VendorRegistrationRequest)
        .where(VendorRegistrationRequest.id == request_id)
        .where(VendorRegistrationRequest.status == STATUS_PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise AlreadyProcessedError()


def _create_vendor(req, reviewer, now):
    user = User(
        name=req.full_name,
        email=req.email,
        password_hash=req.password_hash,
        phone=req.phone,
        role=ROLE_VENDOR,
        email_verified_at=now,
    )
    db.session.add(user)
    db.session.flush()

    profile = VendorProfile(
        user_id=user.id,
        store_name=req.company_name,
        store_slug=_unique_slug(req.company_name),
        description=req.tagline or f"Welcome to {req.company_name}",
        address=req.full_address,
        city=req.city,
        state=req.state,
        zip_code=req.pin_code,
        latitude=req.latitude,
        longitude=req.longitude,
        delivery_radius=req.delivery_radius,
        business_license=req.gst_number,
        logo_url=req.logo,
        banner_url=req.banner,
        is_verified=True,
        is_active=True,
    )
    db.session.add(profile)
    db.session.flush()

    sub = subscriptions.start_trial(user.id, now=now)
    _mark_reviewed(req.id, reviewer.id, STATUS_APPROVED, now)
    return user, profile, sub


def approve_registration(request_id, reviewer) -> dict:
    """Turn a pending application into a vendor account on a premium trial.

    User, VendorProfile, VendorSubscription and the request's status change
    commit together or not at all. Emails and the in-app notification go
    out only after the commit and cannot undo it.
    """
    _require_admin(reviewer)
    req = get_registration(request_id)
    if req.status != STATUS_PENDING:
        raise AlreadyProcessedError()
    if User.query.filter_by(email=req.email).first() is not None:
        raise ConflictError()

    now = utcnow()
    for attempt in range(1, SLUG_ATTEMPTS + 1):
        try:
            with transactional("Vendor approval failed"):
                user, profile, sub = _create_vendor(req, reviewer, now)
            break
        except MarketplaceError:
            raise
        except IntegrityError as e:
            reason = str(e.orig)
            if "store_slug" in reason and attempt < SLUG_ATTEMPTS:
                logger.warning("Store slug for request %s taken concurrently, retrying", request_id)
                continue
            if "users" in reason and "email" in reason:
                raise ConflictError() from e
            raise TransactionError() from e
        except Exception as e:
            raise TransactionError() from e

    REGISTRATION_DECISIONS.labels("approved").inc()
    logger.info("Registration request %s approved by %s", req.id, reviewer.id)
    db.session.refresh(req)
    _after_approval(req, user, profile, sub)

    return {
        "userId": user.id,
        "vendorId": profile.id,
        "subscriptionId": sub.id,
    }


def _after_approval(req, user, profile, sub):
    mail.queue_email(
        req.email,
        "Welcome to GrabtoGo: your vendor account is approved",
        "vendor_approved",
        application=req,
        profile=profile,
        subscription=sub,
    )
    mail.queue_email(
        mail.admin_address(),
        f"Vendor Approved: {req.company_name}",
        "admin_vendor_approved",
        application=req,
        profile=profile,
        subscription=sub,
    )
    try:
        with transactional("Failed to store approval notification"):
            db.session.add(Notification(
                user_id=user.id,
                type="vendor",
                title="Account approved",
                message=(
                    f"Your store {profile.store_name} is live. Your premium trial "
                    f"runs until {sub.end_date:%d %b %Y}."
                ),
                data={"storeSlug": profile.store_slug, "subscriptionId": sub.id},
            ))
    except Exception:
        logger.exception("Approval notification for user %s not stored", user.id)


def reject_registration(request_id, reviewer, reason: str) -> VendorRegistrationRequest:
    _require_admin(reviewer)
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason is required", fields=["reason"])
    req = get_registration(request_id)
    if req.status != STATUS_PENDING:
        raise AlreadyProcessedError()

    with transactional("Vendor rejection failed"):
        _mark_reviewed(req.id, reviewer.id, STATUS_REJECTED, utcnow(), reason=reason.strip())

    db.session.refresh(req)
    REGISTRATION_DECISIONS.labels("rejected").inc()
    logger.info("Registration request %s rejected by %s", req.id, reviewer.id)
    mail.queue_email(
        req.email,
        "Update on your GrabtoGo vendor application",
        "vendor_rejected",
        application=req,
    )
    return req
