"""
Security headers module.

Adds security headers to every API response.
"""

from flask import request, current_app


class SecurityHeaders:
    """
    Security headers middleware.

    The API only serves JSON and PDF downloads, so the policy is
    stricter than a page-serving app would allow.
    """

    @staticmethod
    def init_app(app):
        """
        Initialize security headers for the Flask app.

        Args:
            app: Flask application instance
        """
        @app.after_request
        def add_security_headers(response):
            """Add security headers to all responses."""
            response.headers['Content-Security-Policy'] = "default-src 'none'; frame-ancestors 'none'"

            # X-Content-Type-Options: Prevent MIME type sniffing
            response.headers['X-Content-Type-Options'] = 'nosniff'
            response.headers['X-Frame-Options'] = 'DENY'
            response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

            # Authenticated API data must never be cached by shared proxies
            if request.headers.get('Authorization'):
                response.cache_control.private = True
                response.cache_control.no_store = True

            # Strict-Transport-Security: Force HTTPS (only in production)
            if current_app.config.get('ENV_NAME') == 'production':
                response.headers['Strict-Transport-Security'] = (
                    'max-age=31536000; includeSubDomains'
                )

            if 'Server' in response.headers:
                del response.headers['Server']

            return response
