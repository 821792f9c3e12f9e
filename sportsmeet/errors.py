"""
Service-level error kinds.

Services raise these; the exception handlers in responses.py render them into
the response envelope. Routes never catch them.
"""
from enum import Enum
from typing import Optional


class ErrorCode(Enum):
    """Machine-readable error codes."""

    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"
    INVALID_STATE = "INVALID_STATE"
    CAPACITY = "CAPACITY"
    DUPLICATE = "DUPLICATE"
    VALIDATION = "VALIDATION_ERROR"


class ServiceError(Exception):
    """Base business error with code and user-safe message."""

    code: ErrorCode = ErrorCode.INVALID_STATE

    def __init__(self, message: str, code: Optional[ErrorCode] = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class NotFoundError(ServiceError):
    """Activity, order, registration, comment or user is absent."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str = "Resource") -> None:
        super().__init__(f"{resource} not found")
        self.resource = resource


class ForbiddenError(ServiceError):
    """Ownership or role violation."""

    code = ErrorCode.FORBIDDEN


class InvalidStateError(ServiceError):
    """Requested transition is not allowed from the current lifecycle state."""

    code = ErrorCode.INVALID_STATE


class CapacityError(ServiceError):
    """Activity has no remaining seats (or a release would underflow the counter)."""

    code = ErrorCode.CAPACITY

    def __init__(self, message: str = "Activity is full") -> None:
        super().__init__(message)


class DuplicateError(ServiceError):
    """Uniqueness violation on username, email, registration, order or comment."""

    code = ErrorCode.DUPLICATE


class ValidationError(ServiceError):
    """Malformed input detected past schema validation."""

    code = ErrorCode.VALIDATION


class InvalidTokenError(Exception):
    """Bearer token is missing, malformed, wrongly signed or expired."""
