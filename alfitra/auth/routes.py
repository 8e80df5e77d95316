from flask import current_app, jsonify
from flask_login import current_user
from sqlalchemy.exc import IntegrityError

from alfitra import db
from alfitra.config import config
from alfitra.auth import auth_bp
from alfitra.auth.models import User, PROFILE_FIELDS
from alfitra.auth.utils import (
    create_token,
    hash_password,
    is_valid_email,
    normalize_email,
    validate_password,
    verify_password,
)
from alfitra.common.decorators import get_json_body, login_required
from alfitra.common.errors import ValidationError
from alfitra.security import SecurityLogger


def _required_text(data: dict, key: str, label: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{label} is required")
    return value


@auth_bp.route("/", methods=["GET"])
def auth_root():
    """Simple health/info endpoint for auth API."""
    base_path = config.AUTH_API_PREFIX
    return jsonify(
        {
            "success": True,
            "message": "Auth API is running",
            "endpoints": [
                f"{base_path}/signup",
                f"{base_path}/login",
                f"{base_path}/me",
                f"{base_path}/profile",
            ],
        }
    ), 200


@auth_bp.route("/signup", methods=["POST"])
def signup():
    data = get_json_body()

    name = _required_text(data, "name", "Name").strip()
    email = _required_text(data, "email", "Email").strip()
    password = _required_text(data, "password", "Password")

    if not is_valid_email(email):
        raise ValidationError("Invalid email format")

    ok, error = validate_password(password)
    if not ok:
        raise ValidationError(error)

    email = normalize_email(email)
    if User.query.filter_by(email=email).first():
        raise ValidationError("Email already in use")

    user = User(name=name, email=email, password_hash=hash_password(password.strip()))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.session.rollback()
        raise ValidationError("Email already in use")

    SecurityLogger.log_signup(user.id, user.email)
    return jsonify({
        "success": True,
        "token": create_token(user),
        "user": user.public_dict(),
    }), 201


@auth_bp.route("/login", methods=["POST"])
def login():
    data = get_json_body()

    email = normalize_email(_required_text(data, "email", "Email"))
    password = _required_text(data, "password", "Password")

    user = User.query.filter_by(email=email).first()
    if not user:
        SecurityLogger.log_failed_login(email, "Unknown email")
        raise ValidationError("Invalid credentials")
    if not verify_password(password.strip(), user.password_hash):
        SecurityLogger.log_failed_login(email, "Wrong password")
        raise ValidationError("Invalid credentials")

    SecurityLogger.log_successful_login(user.id, user.email)
    return jsonify({
        "success": True,
        "token": create_token(user),
        "user": user.public_dict(),
    }), 200


@auth_bp.route("/me", methods=["GET"])
@login_required
def me():
    return jsonify({"success": True, "user": current_user.profile_dict()}), 200


@auth_bp.route("/profile", methods=["PUT"])
@login_required
def update_profile():
    """
    Partial update of the teacher profile. Only whitelisted keys present in
    the body change; everything else (email, role, password) is ignored.
    """
    data = get_json_body()

    updates = {}
    for field in PROFILE_FIELDS:
        if field not in data:
            continue
        value = data[field]
        if field == "age":
            if value in (None, ""):
                value = None
            elif isinstance(value, bool):
                raise ValidationError("Age must be a whole number")
            else:
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    raise ValidationError("Age must be a whole number")
                if value < 0:
                    raise ValidationError("Age must be a whole number")
        elif field == "name":
            if not isinstance(value, str) or not value.strip():
                raise ValidationError("Name cannot be empty")
            value = value.strip()
        else:
            value = "" if value is None else str(value).strip()
        updates[field] = value

    for field, value in updates.items():
        setattr(current_user, field, value)
    db.session.commit()

    current_app.logger.info(f"Profile updated for user {current_user.id}: {sorted(updates)}")
    return jsonify({"success": True, "user": current_user.profile_dict()}), 200
