"""Admin blueprint: module evaluation, leaderboards and participant views."""
from flask import Blueprint
from alfitra.config import config

admin_bp = Blueprint('admin', __name__, url_prefix=config.ADMIN_API_PREFIX)

from alfitra.admin import routes  # noqa: E402,F401
