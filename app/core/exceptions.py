"""
Base exception classes for application-wide error handling.

Every domain error raised by the services carries a human-readable message,
a machine-readable error code and optional details, so views can turn it
into a JSON body with ``to_dict()`` and pick an HTTP status from its class.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ValidationError - Bad or missing input (HTTP 400)
    ├── NotFoundError - Resource not found (HTTP 404)
    ├── ConflictError - State conflicts such as duplicates (HTTP 409)
    └── ExternalServiceError - Third-party service failures (HTTP 502)

Usage:
    from core.exceptions import ConflictError, ValidationError

    raise ValidationError("billing_interval must be 'month' or 'year'")

    raise ConflictError(
        "Email mismatch between customer and checkout request.",
        error_code="CUSTOMER_EMAIL_CONFLICT",
        details={"organization_id": organization_id},
    )

    try:
        ...
    except BaseApplicationError as e:
        return Response(e.to_dict(), status=400)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Base exception for all application-specific errors.

    Attributes:
        message: Human-readable error description
        error_code: Machine-readable code for client-side handling
        details: Additional error context (field errors, identifiers, etc.)
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Convert exception to dictionary for API response.

        Example:
            {
                "error": "Subscription plan with UID 'gold' not found",
                "error_code": "PLAN_NOT_FOUND",
                "details": {"plan_id": "gold"}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"details={self.details!r})"
        )


class ValidationError(BaseApplicationError):
    """
    Raised when input validation fails.

    Use for malformed headers, unknown billing intervals, price ids with
    the wrong format and other inputs that will never succeed as sent.
    """

    default_error_code: str = "VALIDATION_ERROR"


class NotFoundError(BaseApplicationError):
    """
    Raised when a requested resource is not found.

    Use for single-resource lookups where existence is expected: a plan,
    a price, a local record keyed by a provider id.
    """

    default_error_code: str = "NOT_FOUND"


class ConflictError(BaseApplicationError):
    """
    Raised when an operation conflicts with current resource state.

    Note:
        HTTP 409 Conflict is the appropriate status for these errors.
    """

    default_error_code: str = "CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    Raised when an external service call fails.

    Note:
        Log the original error for debugging but don't expose
        internal details to clients in production.
        HTTP 502 Bad Gateway is the appropriate status.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
