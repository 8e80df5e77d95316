"""
Reference materials: PDFs attached to modules or questions.

Files are stored in Cloudinary as raw resources; downloads from the store are
proxied so participants always get an attachment with a clean filename.
"""
from flask import Blueprint
from alfitra.config import config

materials_bp = Blueprint("materials", __name__, url_prefix=config.API_PREFIX)

from alfitra.materials import routes  # noqa: E402,F401
