"""
Modules blueprint: sections, modules and their quiz days.

Admins create modules (Quran or Seerat section), add quiz days to them and
toggle each day's lifecycle flags; participants list what has been published.
"""
from flask import Blueprint
from alfitra.config import config

modules_bp = Blueprint("modules", __name__, url_prefix=config.API_PREFIX)

from alfitra.modules import routes  # noqa: E402,F401
