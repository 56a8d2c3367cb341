import logging
from sqlalchemy.exc import IntegrityError

from models import db
from models.user import User, ROLE_CUSTOMER, ROLE_ADMIN
from app.errors import AuthenticationError, DuplicateUserError
from app.utils.clock import utcnow
from app.utils.db import transactional
from app.utils.passwords import hash_password, check_password

logger = logging.getLogger(__name__)


def create_user(name, email, password, role=ROLE_CUSTOMER, phone=None, verified=False) -> User:
    email = email.strip().lower()
    if User.query.filter_by(email=email).first() is not None:
        raise DuplicateUserError()
    user = User(
        name=name,
        email=email,
        password_hash=hash_password(password),
        phone=phone,
        role=role,
        email_verified_at=utcnow() if verified else None,
    )
    try:
        with transactional("Failed to create user"):
            db.session.add(user)
    except IntegrityError as e:
        raise DuplicateUserError() from e
    logger.info("User %s created with role %s", user.id, role)
    return user


def create_admin(name, email, password) -> User:
    return create_user(name, email, password, role=ROLE_ADMIN, verified=True)


def authenticate(email, password) -> User:
    user = User.query.filter_by(email=(email or "").strip().lower()).first()
    if user is None or not check_password(password, user.password_hash):
        raise AuthenticationError("Invalid email or password")
    return user
