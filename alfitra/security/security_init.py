"""
Security initialization module.

This module initializes all security features for the Flask application.
"""

from flask import Flask
from flask_cors import CORS

from .security_headers import SecurityHeaders


def init_security(app: Flask, cors_origins=None):
    """
    Initialize all security features for the Flask app.

    Args:
        app: Flask application instance
        cors_origins: Front-end origins allowed to call the API; empty disables CORS
    """
    SecurityHeaders.init_app(app)
    if cors_origins:
        CORS(app, origins=cors_origins, supports_credentials=True)

    app.logger.info("Security features initialized")
