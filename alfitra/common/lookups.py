"""Entity lookups that short-circuit with NotFoundError."""
from alfitra import db
from alfitra.common.errors import NotFoundError, ValidationError


def get_or_404(model, ident, label: str):
    """Fetch ``model`` by primary key or raise NotFoundError('<label> not found')."""
    try:
        ident = int(ident)
    except (TypeError, ValueError):
        raise NotFoundError(f"{label} not found")
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFoundError(f"{label} not found")
    return obj


def parse_id(value, label: str) -> int:
    """Coerce a client-supplied id, rejecting blanks and non-integers with a 400."""
    if value is None or value == "" or isinstance(value, bool):
        raise ValidationError(f"{label} is required")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}")


def parse_bool(data: dict, key: str) -> bool:
    """Read a required boolean flag from a JSON body."""
    value = data.get(key)
    if not isinstance(value, bool):
        raise ValidationError(f"{key} must be true or false")
    return value
