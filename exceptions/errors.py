"""
Custom exception classes for the application.

Every error carries a stable code, a human-readable message, an HTTP
status and optional details, and renders to the standard error envelope.
"""

from typing import Optional, Any
from datetime import datetime, timezone


class AppError(Exception):
    """
    Base exception for all application errors.

    All custom exceptions inherit from this.

    Attributes:
        code: Error code (e.g., "SESSION_NOT_FOUND")
        message: Human-readable message
        status_code: HTTP status code
        details: Additional context
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: Optional[dict[str, Any]] = None
    ):
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to API response format."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "timestamp": self.timestamp
            }
        }


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(
        self,
        resource: str,
        identifier: str,
        code: Optional[str] = None
    ):
        super().__init__(
            code=code or f"{resource.upper()}_NOT_FOUND",
            message=f"{resource} not found",
            status_code=404,
            details={"id": identifier}
        )


class ValidationError(AppError):
    """Validation failed (422)."""

    def __init__(
        self,
        message: str,
        code: str = "VALIDATION_ERROR",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=422,
            details=details
        )


class ConflictError(AppError):
    """Operation conflicts with the current state (409)."""

    def __init__(
        self,
        message: str,
        code: str = "CONFLICT",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details
        )


class ExternalServiceError(AppError):
    """External source failure (503)."""

    def __init__(
        self,
        service: str,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code or f"{service.upper()}_ERROR",
            message=message,
            status_code=503,
            details={"service": service, **(details or {})}
        )


class AuthenticationError(AppError):
    """Authentication failed (401)."""

    def __init__(
        self,
        message: str,
        code: str = "AUTHENTICATION_FAILED",
        details: Optional[dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            status_code=401,
            details=details
        )


# ===================
# SOURCE ERRORS
# ===================

class SourceUnavailableError(ExternalServiceError):
    """Operator directory or item source unreachable or malformed."""

    def __init__(self, source: str, reason: str):
        super().__init__(
            service=source,
            code="SOURCE_UNAVAILABLE",
            message=f"{source} is unavailable",
            details={"reason": reason}
        )


class SheetNotFoundError(NotFoundError):
    """Product workbook has no sheet for the store."""

    def __init__(self, store_name: str):
        super().__init__(
            resource="Sheet",
            identifier=store_name,
            code="SHEET_NOT_FOUND"
        )


# ===================
# AUTH ERRORS
# ===================

class InvalidCredentialsError(AuthenticationError):
    """Username/password pair not in the operator directory."""

    def __init__(self, username: str):
        super().__init__(
            code="INVALID_CREDENTIALS",
            message="用户名或密码错误",
            details={"username": username}
        )


# ===================
# SESSION ERRORS
# ===================

class SessionNotFoundError(NotFoundError):
    """Session not found (expired, discarded, or never opened)."""

    def __init__(self, session_id: str):
        super().__init__(
            resource="Session",
            identifier=session_id,
            code="SESSION_NOT_FOUND"
        )


class EmptySessionError(ValidationError):
    """A session cannot be entered with zero items."""

    def __init__(self, store_name: str):
        super().__init__(
            code="EMPTY_SESSION",
            message="Cannot start a session without items",
            details={"store_name": store_name}
        )


class InvalidModeOperationError(ConflictError):
    """Operation not available in the session's mode."""

    def __init__(self, operation: str, mode: str, allowed: list[str]):
        super().__init__(
            code="INVALID_MODE_OPERATION",
            message=f"{operation} is not available in {mode} mode",
            details={"operation": operation, "mode": mode, "allowed_modes": allowed}
        )


class InvalidCursorPositionError(ValidationError):
    """Jump target outside the item list."""

    def __init__(self, index: int, total: int):
        super().__init__(
            code="INVALID_CURSOR_POSITION",
            message=f"Index {index} is out of range",
            details={"index": index, "valid_range": [0, max(total - 1, 0)]}
        )


class InvalidItemError(ValidationError):
    """New item rejected."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(
            code="INVALID_ITEM",
            message=message,
            details=details
        )
