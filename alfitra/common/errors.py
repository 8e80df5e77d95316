"""
API error taxonomy.

Route handlers raise these; the handlers registered by ``register_error_handlers``
turn them into the JSON envelope ``{"success": False, "error": ...}``.
"""
from flask import current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code

    def to_response(self):
        return jsonify({"success": False, "error": self.message}), self.status_code


class ValidationError(ApiError):
    status_code = 400
    default_message = "Invalid request"


class AuthenticationError(ApiError):
    status_code = 401
    default_message = "Unauthorized"


class AuthorizationError(ApiError):
    status_code = 403
    default_message = "Forbidden"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not found"


class UpstreamError(ApiError):
    """Object-store or database failure."""
    status_code = 500
    default_message = "Upstream service failed"


def register_error_handlers(app):
    """Map the taxonomy and unexpected failures to JSON responses."""
    from alfitra import db

    @app.errorhandler(ApiError)
    def handle_api_error(e):
        if e.status_code >= 500:
            current_app.logger.error(f"{request.method} {request.path} failed: {e.message}")
        return e.to_response()

    @app.errorhandler(SQLAlchemyError)
    def handle_db_error(e):
        db.session.rollback()
        current_app.logger.exception(f"Database error on {request.method} {request.path}")
        return jsonify({"success": False, "error": "Database error"}), 500

    @app.errorhandler(404)
    def handle_404(e):
        current_app.logger.warning(f"404 error: {request.method} {request.path}")
        return jsonify({
            "success": False,
            "error": f"Route not found: {request.method} {request.path}",
            "path": request.path,
            "method": request.method,
        }), 404

    @app.errorhandler(405)
    def handle_405(e):
        current_app.logger.warning(f"405 error: {request.method} {request.path}")
        return jsonify({
            "success": False,
            "error": f"Method not allowed: {request.method} {request.path}",
            "path": request.path,
            "method": request.method,
        }), 405

    @app.errorhandler(413)
    def handle_413(e):
        return jsonify({"success": False, "error": "Uploaded file is too large"}), 413

    @app.errorhandler(Exception)
    def handle_unexpected(e):
        if isinstance(e, HTTPException):
            return jsonify({"success": False, "error": e.description}), e.code
        db.session.rollback()
        current_app.logger.exception(f"Unhandled error on {request.method} {request.path}")
        message = "Internal server error"
        if current_app.debug:
            message = f"{message}: {e}"
        return jsonify({"success": False, "error": message}), 500
