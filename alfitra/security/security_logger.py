"""
Security logging module.

Specialized logging for security events such as failed logins,
signups and role violations.
"""

from flask import request, current_app
from datetime import datetime


class SecurityLogger:
    """
    Security event logger.

    Logs security-related events for monitoring and auditing.
    """

    @staticmethod
    def log_failed_login(email: str, reason: str = "Invalid credentials"):
        """
        Log a failed login attempt.

        Args:
            email: Email address used in login attempt
            reason: Reason for failure
        """
        current_app.logger.warning(
            f"SECURITY: Failed login attempt - Email: {email}, "
            f"IP: {request.remote_addr}, Reason: {reason}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_successful_login(user_id: int, email: str):
        """
        Log a successful login.

        Args:
            user_id: User ID
            email: User email
        """
        current_app.logger.info(
            f"SECURITY: Successful login - User ID: {user_id}, "
            f"Email: {email}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_signup(user_id: int, email: str):
        current_app.logger.info(
            f"SECURITY: New account - User ID: {user_id}, "
            f"Email: {email}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_invalid_token(reason: str):
        """
        Log a rejected bearer token.

        Args:
            reason: Why the token was rejected (expired, bad signature, ...)
        """
        current_app.logger.warning(
            f"SECURITY: Invalid token - Reason: {reason}, "
            f"Path: {request.path}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_unauthorized_access(resource: str, user_id: int = None):
        """
        Log unauthorized access attempt.

        Args:
            resource: Resource that was accessed
            user_id: User ID if authenticated
        """
        user_info = f"User ID: {user_id}" if user_id else "Unauthenticated"
        current_app.logger.warning(
            f"SECURITY: Unauthorized access - {user_info}, "
            f"Resource: {resource}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )

    @staticmethod
    def log_file_access(material_id: int, user_id: int, proxied: bool):
        status = "Proxied" if proxied else "Redirected"
        current_app.logger.info(
            f"SECURITY: Material download - {status} - User ID: {user_id}, "
            f"Material: {material_id}, IP: {request.remote_addr}, "
            f"Time: {datetime.utcnow().isoformat()}"
        )
