from functools import wraps

from flask import request
from flask_login import current_user

from alfitra.common.errors import AuthenticationError, AuthorizationError, ValidationError


def login_required(f):
    """Decorator to require a valid bearer token for a route."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError("Unauthorized")
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require the admin role for a route."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_user.is_authenticated:
            raise AuthenticationError("Unauthorized")
        if not current_user.is_admin():
            from alfitra.security import SecurityLogger
            SecurityLogger.log_unauthorized_access(request.path, user_id=current_user.id)
            raise AuthorizationError("Admin access required")
        return f(*args, **kwargs)
    return decorated_function


def get_json_body() -> dict:
    """Return the request JSON object, or an empty dict for an empty body."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data
