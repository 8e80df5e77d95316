"""
Quiz module: questions, quiz taking and scoring.

Admins append MCQ and fill-in-the-blank questions to quiz days; participants
fetch a quiz with shuffled options and save (or re-save) their answers while
responses are open.
"""
from flask import Blueprint
from alfitra.config import config

quiz_bp = Blueprint('quiz', __name__, url_prefix=config.API_PREFIX)

from alfitra.quiz import routes, admin_routes  # noqa: E402,F401
