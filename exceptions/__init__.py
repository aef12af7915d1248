"""
Custom exceptions module.
"""

from exceptions.errors import (
    # Base exceptions
    AppError,
    NotFoundError,
    ValidationError,
    ConflictError,
    ExternalServiceError,
    AuthenticationError,

    # Sources
    SourceUnavailableError,
    SheetNotFoundError,

    # Auth
    InvalidCredentialsError,

    # Session
    SessionNotFoundError,
    EmptySessionError,
    InvalidModeOperationError,
    InvalidCursorPositionError,
    InvalidItemError,
)

__all__ = [
    # Base
    "AppError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "ExternalServiceError",
    "AuthenticationError",

    # Sources
    "SourceUnavailableError",
    "SheetNotFoundError",

    # Auth
    "InvalidCredentialsError",

    # Session
    "SessionNotFoundError",
    "EmptySessionError",
    "InvalidModeOperationError",
    "InvalidCursorPositionError",
    "InvalidItemError",
]
