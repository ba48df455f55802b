from __future__ import annotations

from enum import Enum
from typing import Optional


class AuthErrorKind(str, Enum):
    VALIDATION = 'validation'
    ALREADY_AUTHENTICATED = 'already_authenticated'
    NOT_FOUND = 'not_found'
    LOCKED_OUT = 'locked_out'
    EMAIL_NOT_CONFIRMED = 'email_not_confirmed'
    INVALID_CREDENTIAL = 'invalid_credential'
    INVALID_OR_EXPIRED = 'invalid_or_expired'
    UNAUTHORIZED = 'unauthorized'
    FORBIDDEN = 'forbidden'
    CANCELLED = 'cancelled'


class AppError(Exception):
    """Base class for domain errors that the HTTP layer maps to responses.

    ``kind`` is the tagged error kind callers branch on. ``message`` carries the
    full detail for logs, ``public_message`` is what a response may show.
    """

    status_code: int = 400
    error_code: str = 'VALIDATION_ERROR'
    kind: AuthErrorKind = AuthErrorKind.VALIDATION
    public_message: Optional[str] = None
    public_type: Optional[str] = None

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

    @property
    def safe_message(self) -> str:
        return self.public_message or self.message

    @property
    def error_type(self) -> str:
        return self.public_type or type(self).__name__


class ValidationError(AppError):
    status_code = 400
    error_code = 'VALIDATION_ERROR'
    kind = AuthErrorKind.VALIDATION


class AlreadyAuthenticatedError(ValidationError):
    kind = AuthErrorKind.ALREADY_AUTHENTICATED

    def __init__(self, message: str = 'User is already authenticated') -> None:
        super().__init__(message)


class NotFoundError(AppError):
    status_code = 404
    error_code = 'NOT_FOUND'
    kind = AuthErrorKind.NOT_FOUND


class UserNotFoundError(NotFoundError):
    def __init__(self, message: str = 'User not found') -> None:
        super().__init__(message)


class UnknownUsernameError(UserNotFoundError):
    # Shares the credential message so responses cannot be used to enumerate users.
    status_code = 401
    error_code = 'INVALID_CREDENTIALS'
    public_message = 'Invalid credentials'
    public_type = 'InvalidCredentialError'


class RefreshTokenNotFoundError(NotFoundError):
    def __init__(self, message: str = 'Refresh token not found') -> None:
        super().__init__(message)


class InvalidCredentialError(ValidationError):
    status_code = 401
    error_code = 'INVALID_CREDENTIALS'
    kind = AuthErrorKind.INVALID_CREDENTIAL
    public_message = 'Invalid credentials'
    public_type = 'InvalidCredentialError'


class BusinessRuleError(AppError):
    status_code = 400
    error_code = 'BUSINESS_RULE_VIOLATION'


class LockedOutError(BusinessRuleError):
    kind = AuthErrorKind.LOCKED_OUT

    def __init__(self, message: str = 'User account is locked out') -> None:
        super().__init__(message)


class EmailNotConfirmedError(BusinessRuleError):
    kind = AuthErrorKind.EMAIL_NOT_CONFIRMED

    def __init__(self, message: str = 'Email not verified') -> None:
        super().__init__(message)


class InvalidOrExpiredTokenError(AppError):
    status_code = 401
    error_code = 'INVALID_OR_EXPIRED_TOKEN'
    kind = AuthErrorKind.INVALID_OR_EXPIRED

    def __init__(self, message: str = 'Refresh token is not active or has expired') -> None:
        super().__init__(message)


class UnauthorizedError(AppError):
    status_code = 401
    error_code = 'UNAUTHORIZED_ACCESS'
    kind = AuthErrorKind.UNAUTHORIZED


class ForbiddenError(AppError):
    status_code = 403
    error_code = 'FORBIDDEN_ACCESS'
    kind = AuthErrorKind.FORBIDDEN


class OperationCancelledError(AppError):
    status_code = 499
    error_code = 'OPERATION_CANCELLED'
    kind = AuthErrorKind.CANCELLED

    def __init__(self, message: str = 'Operation cancelled') -> None:
        super().__init__(message)


class ConfigurationError(RuntimeError):
    """Raised at startup when required configuration is missing or invalid."""
