"""
Custom exception classes for the application.
"""

from typing import Any


class AppException(Exception):
    """Base exception for application errors."""

    def __init__(
        self,
        message: str,
        code: str = "APP_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize application exception.

        Args:
            message: Human-readable error message.
            code: Machine-readable error code.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class ValidationError(AppException):
    """Raised when request validation fails (distinct from pydantic ValidationError)."""

    def __init__(
        self,
        message: str = "One or more validation errors occurred",
        errors: dict[str, list[str]] | None = None,
    ) -> None:
        self.errors = errors or {}
        super().__init__(message, "VALIDATION_ERROR", {"errors": self.errors})


class NotFoundError(AppException):
    """Raised when a referenced resource does not exist."""

    def __init__(self, resource_type: str, resource_id: Any) -> None:
        self.resource_type = resource_type
        self.resource_id = str(resource_id)
        super().__init__(
            f"{resource_type} with id: {resource_id} doesn't exist",
            "NOT_FOUND",
            {"resource_type": resource_type, "resource_id": self.resource_id},
        )


class DuplicateEmailError(AppException):
    """Raised when a contact email is already taken."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(
            f"Contact with email '{email}' already exists.",
            "DUPLICATE_EMAIL",
            {"email": email},
        )


class AuthenticationError(AppException):
    """Raised when authentication fails."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTH_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, code, details)


class TokenExpiredError(AuthenticationError):
    """Raised when a token has expired."""

    def __init__(
        self,
        message: str = "Token has expired",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "TOKEN_EXPIRED", details)


class InvalidTokenError(AuthenticationError):
    """Raised when a token is invalid."""

    def __init__(
        self,
        message: str = "Invalid token",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, "INVALID_TOKEN", details)


class RateLimitExceededError(AppException):
    """Raised when a client exceeds a request rate policy."""

    def __init__(self, policy: str, retry_after: int) -> None:
        self.policy = policy
        self.retry_after = retry_after
        super().__init__(
            "Too many requests. Please try again later.",
            "RATE_LIMITED",
            {"policy": policy, "retry_after": retry_after},
        )
