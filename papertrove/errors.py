# papertrove/errors.py

"""
Application error taxonomy.

Services raise these; the HTTP layer renders them into the
``{success, message, data, error?}`` envelope with the matching status code.
"""

from typing import Optional


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail


class ValidationError(AppError):
    """Missing or malformed input"""
    status_code = 400


class AuthError(AppError):
    """Bad credential"""
    status_code = 401


class ForbiddenError(AppError):
    """Self-action guard / insufficient role"""
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate unique key"""
    status_code = 409


class UnexpectedError(AppError):
    """Store or filesystem failure"""
    status_code = 500
