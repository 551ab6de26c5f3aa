"""
Error taxonomy for the account service.

Every expected failure is an ``AppError`` subclass with a fixed,
user-facing message and the HTTP status it maps to. Handlers never build
status codes themselves; the application's exception handler reads them
from the error.
"""
from typing import Dict, Optional

from fastapi import status

BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


class AppError(Exception):
    """Base class for errors that map directly to an HTTP response."""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "An unexpected error occurred"
    headers: Optional[Dict[str, str]] = None

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


# --- 401: credential and token problems ---

class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid email or password"
    headers = BEARER_CHALLENGE


class AuthenticationRequiredError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Authentication required"
    headers = BEARER_CHALLENGE


class InvalidTokenError(AppError):
    # Signature mismatch, malformed token and expiry all share this message.
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid or expired token"
    headers = BEARER_CHALLENGE


# --- 403: authorization and account status problems ---

class AccountSuspendedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is suspended"


class AccountInactiveError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is inactive"


class AccountNotActiveError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Account is not active"


class InsufficientPermissionsError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Insufficient permissions"


class AccessDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Access denied"


# --- 4xx: resource problems ---

class BadRequestError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Bad request"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "User not found"


class DuplicateKeyError(AppError):
    status_code = status.HTTP_409_CONFLICT
    message = "User with this email already exists"


# --- 500: misconfiguration ---

class EncodingError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Token generation failed"
