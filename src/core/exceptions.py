"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"

    # Not found errors (404)
    ACCOUNT_NOT_FOUND = "ACCOUNT_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_TARGET = "INVALID_TARGET"
    INVALID_VIEWER = "INVALID_VIEWER"
    INVALID_ROLE_CHANGE = "INVALID_ROLE_CHANGE"
    INVALID_PROFILE = "INVALID_PROFILE"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500/502/503)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    STORE_UNAVAILABLE = "STORE_UNAVAILABLE"
    IDENTITY_PROVIDER_ERROR = "IDENTITY_PROVIDER_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(
        self,
        message: str = "Access denied",
        error_code: ErrorCode = ErrorCode.FORBIDDEN,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=403,
        )


class AccountNotFoundError(AppException):
    """Account not found (or not visible to the caller)."""

    def __init__(self, account_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ACCOUNT_NOT_FOUND,
            message=f"Account not found: {account_id}",
            status_code=404,
            details={"account_id": account_id},
        )


class InvalidTargetError(AppException):
    """The unlock target is not an eligible host."""

    def __init__(self, target_id: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_TARGET,
            message=f"Profile cannot be unlocked: {reason}",
            status_code=400,
            details={"target_id": target_id, "reason": reason},
        )


class InvalidViewerError(AppException):
    """The viewer is not allowed to perform this unlock."""

    def __init__(self, viewer_id: str, reason: str = "cannot unlock your own profile") -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_VIEWER,
            message=f"Invalid viewer: {reason}",
            status_code=400,
            details={"viewer_id": viewer_id, "reason": reason},
        )


class InvalidRoleChangeError(AppException):
    """A role transition that the account lifecycle does not allow."""

    def __init__(self, account_id: str, current_role: str, requested_role: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ROLE_CHANGE,
            message=f"Cannot change role from {current_role} to {requested_role}",
            status_code=400,
            details={
                "account_id": account_id,
                "current_role": current_role,
                "requested_role": requested_role,
            },
        )


class ProfileValidationError(AppException):
    """Profile update rejected."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_PROFILE,
            message=message,
            status_code=400,
            details={"field": field},
        )


class StoreUnavailableError(AppException):
    """The account store could not be reached. Safe to retry."""

    def __init__(self, message: str = "Account store temporarily unavailable") -> None:
        super().__init__(
            error_code=ErrorCode.STORE_UNAVAILABLE,
            message=message,
            status_code=503,
            details={"retryable": True},
        )


class IdentityDeletionError(AppException):
    """The identity provider refused or failed to delete an identity."""

    def __init__(self, account_id: str, reason: str) -> None:
        super().__init__(
            error_code=ErrorCode.IDENTITY_PROVIDER_ERROR,
            message=f"Could not delete identity {account_id}: {reason}",
            status_code=502,
            details={"account_id": account_id, "reason": reason},
        )
