import re
from datetime import datetime, timedelta, timezone

import jwt
from flask import current_app
from passlib.hash import bcrypt

from alfitra import db
from alfitra.config import config


EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def _truncate_password(plain_password: str) -> str:
    """Helper to consistently truncate password to its first 72 UTF-8 bytes."""
    # Encode to bytes, take the first 72 bytes, and decode back to a string,
    # ignoring any incomplete multi-byte characters at the truncation point.
    password_bytes = plain_password.encode('utf-8')[:72]
    return password_bytes.decode('utf-8', errors='ignore')


def hash_password(plain_password: str) -> str:
    """
    Hash password using bcrypt with the configured cost factor. It is
    truncated to the first 72 bytes of its UTF-8 encoding before hashing.
    """
    truncated = _truncate_password(plain_password)
    return bcrypt.using(rounds=config.BCRYPT_ROUNDS).hash(truncated)


def verify_password(plain_password: str, password_hash: str) -> bool:
    """Verify a password against a hash, using the same truncation as hash_password."""
    truncated = _truncate_password(plain_password)
    try:
        return bcrypt.verify(truncated, password_hash)
    except ValueError:
        # Malformed stored hash
        return False


def normalize_email(email) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(email and EMAIL_REGEX.match(email))


def validate_password(password: str) -> tuple[bool, str | None]:
    """
    Basic server-side password validation on the trimmed password.
    Returns (is_valid, error_message).
    """
    min_length = config.MIN_PASSWORD_LENGTH
    if len(password.strip()) < min_length:
        return False, f"Password must be at least {min_length} characters"
    return True, None


def create_token(user) -> str:
    """Issue a signed token carrying the user's id and role."""
    now = datetime.now(timezone.utc)
    payload = {
        "id": user.id,
        "role": user.role,
        "iat": now,
        "exp": now + timedelta(days=config.TOKEN_EXPIRY_DAYS),
    }
    return jwt.encode(payload, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Verify signature and expiry.
    Raises jwt.InvalidTokenError (or a subclass) when the token is rejected.
    """
    payload = jwt.decode(
        token,
        config.JWT_SECRET,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["exp", "id"]},
    )
    return payload


def load_user_from_authorization(header: str | None):
    """
    Resolve an ``Authorization: Bearer <token>`` header to a User.
    Returns None for a missing, malformed, expired or orphaned token.
    """
    from alfitra.auth.models import User
    from alfitra.security import SecurityLogger

    if not header:
        return None
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        SecurityLogger.log_invalid_token("Malformed Authorization header")
        return None

    try:
        payload = decode_token(token.strip())
    except jwt.ExpiredSignatureError:
        SecurityLogger.log_invalid_token("Token expired")
        return None
    except jwt.InvalidTokenError as e:
        SecurityLogger.log_invalid_token(f"Invalid token: {e}")
        return None

    try:
        user = db.session.get(User, int(payload["id"]))
    except (ValueError, TypeError):
        SecurityLogger.log_invalid_token("Invalid subject")
        return None
    if user is None:
        current_app.logger.warning(f"Token for unknown user id {payload.get('id')}")
    return user
