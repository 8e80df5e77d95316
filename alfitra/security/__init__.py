"""
Security module for the application.

This module provides:
- Security headers (and CORS for the front-end origins)
- Security logging
"""

from .security_headers import SecurityHeaders
from .security_logger import SecurityLogger
from .security_init import init_security

__all__ = [
    'SecurityHeaders',
    'SecurityLogger',
    'init_security',
]
