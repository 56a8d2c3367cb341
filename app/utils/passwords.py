import bcrypt
from flask import current_app, has_app_context

DEFAULT_ROUNDS = 12
# bcrypt only reads the first 72 bytes and newer releases reject longer input.
MAX_PASSWORD_BYTES = 72


def _rounds() -> int:
    if has_app_context():
        return int(current_app.config.get("BCRYPT_ROUNDS", DEFAULT_ROUNDS))
    return DEFAULT_ROUNDS


def _pwd_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:MAX_PASSWORD_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=_rounds())
    return bcrypt.hashpw(_pwd_bytes(password), salt).decode("utf-8")


def check_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(_pwd_bytes(password), password_hash.encode("utf-8"))
    except ValueError:
        return False
