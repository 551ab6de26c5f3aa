"""
Authentication middleware.

This module provides request gates for:
- Bearer token authentication
- Role-based access control
- Ownership-or-admin checks on per-user resources

Each gate is a plain function (easy to test, no framework involved) plus a
FastAPI dependency that applies it to the current request. Routes chain
gates through their ``dependencies=[...]`` list; a failing gate raises and
the error becomes the response.
"""
from typing import Iterable, Optional

from fastapi import Depends, Header, Request

from account_service.auth.jwt import Principal, decode_token, extract_bearer
from account_service.config import Settings
from account_service.dependencies import get_app_settings
from account_service.errors import (
    AccessDeniedError,
    AuthenticationRequiredError,
    InsufficientPermissionsError,
)
from account_service.users.models import UserRole


def authenticate(header_value: Optional[str], secret: str) -> Principal:
    """
    Turn an Authorization header into a Principal.

    Raises:
        AuthenticationRequiredError: No "Bearer <token>" header
        InvalidTokenError: Token fails verification or has expired
    """
    token = extract_bearer(header_value)
    if token is None:
        raise AuthenticationRequiredError()

    claims = decode_token(token, secret)
    return Principal(user_id=claims.user_id, email=claims.email, role=claims.role)


def check_roles(principal: Optional[Principal], roles: Iterable[UserRole]) -> Principal:
    """Pass if the principal holds one of ``roles`` (an empty set means any)."""
    if principal is None:
        raise AuthenticationRequiredError()

    required = set(roles)
    if required and principal.role not in required:
        raise InsufficientPermissionsError()
    return principal


def check_owner_or_admin(principal: Optional[Principal], owner_id: Optional[str]) -> Principal:
    """Pass if the principal owns the resource or is an admin."""
    if principal is None:
        raise AuthenticationRequiredError()

    if principal.user_id == (owner_id or "").lower() or principal.role == UserRole.ADMIN:
        return principal
    raise AccessDeniedError()


async def get_current_principal(
    request: Request,
    authorization: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> Principal:
    """
    FastAPI dependency for the authentication gate.

    Attaches the principal to ``request.state.principal`` for later gates
    and handlers.
    """
    principal = authenticate(authorization, settings.jwt_secret)
    request.state.principal = principal
    return principal


class AuthGuard:
    """
    Factories for role and ownership gates.
    """

    @staticmethod
    def has_roles(*roles: UserRole):
        """
        Dependency to check if the user has any of the specified roles.

        Args:
            roles: Accepted roles (any match is sufficient)

        Returns:
            Dependency function
        """
        async def verify_roles(principal: Principal = Depends(get_current_principal)) -> Principal:
            return check_roles(principal, roles)

        return verify_roles

    @staticmethod
    def is_self_or_admin(user_id_param: str = "id"):
        """
        Dependency to check if request targets the authenticated user or comes from an admin.

        Args:
            user_id_param: Name of the path parameter holding the owner's id

        Returns:
            Dependency function
        """
        async def verify_self_or_admin(
            request: Request,
            principal: Principal = Depends(get_current_principal),
        ) -> Principal:
            return check_owner_or_admin(principal, request.path_params.get(user_id_param))

        return verify_self_or_admin
