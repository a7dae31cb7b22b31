"""
Error types raised by services and rendered by the app-level error handlers
as ``{"error": "<message>"}``.
"""
from __future__ import annotations


class ApiError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(ApiError):
    status_code = 400


class ConflictError(ApiError):
    """Duplicate rows or deletes blocked by dependent rows (reported as 400)."""
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404


class ForbiddenError(ApiError):
    status_code = 403
