"""
Authentication router.

This module provides FastAPI router for authentication endpoints:
- User registration and login
- Current user profile
- Token refresh and logout
- Liveness ping
"""
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, status

from account_service.auth.jwt import Principal
from account_service.auth.middleware import get_current_principal
from account_service.auth.service import AuthService, LoginResult
from account_service.base_service import BaseService
from account_service.dependencies import get_auth_service, get_user_service
from account_service.errors import AppError, NotFoundError
from account_service.users.schemas import LoginInput, UserCreate
from account_service.users.service import UserService

router = APIRouter(tags=["auth"])

base_service = BaseService("auth")


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register_user(
    user_data: UserCreate,
    users: UserService = Depends(get_user_service),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Register a new user and sign them in.

    Args:
        user_data: User registration data

    Returns:
        Envelope with the new user, a token and its lifetime
    """
    user_info = (await users.create_user(user_data)).unwrap()
    grant = auth.issue_token(user_info)

    base_service.log_event("user.registered", {"id": user_info.id, "email": user_info.email})

    return base_service.api_response(
        message="User registered successfully",
        data=LoginResult(user=user_info, token=grant.token, expires_in=grant.expires_in),
        status_code=status.HTTP_201_CREATED,
    )


@router.post("/login")
async def login(
    login_data: LoginInput,
    auth: AuthService = Depends(get_auth_service),
):
    """
    Authenticate a user and return a token.

    Args:
        login_data: Email and password

    Returns:
        Envelope with user, token and expiresIn
    """
    try:
        result = (await auth.login(login_data)).unwrap()
    except AppError as e:
        base_service.log_event("user.login.failed", {"email": login_data.email, "reason": e.message})
        raise

    base_service.log_event("user.login", {"id": result.user.id, "email": result.user.email})
    return base_service.api_response(message="Login successful", data=result)


@router.get("/me")
async def get_current_user_info(
    principal: Principal = Depends(get_current_principal),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Get information about the current authenticated user.
    """
    user_info = await auth.get_current_user(principal.user_id)
    if user_info is None:
        raise NotFoundError()

    return base_service.api_response(message="User profile retrieved", data=user_info)


@router.post("/refresh")
async def refresh_token(
    principal: Principal = Depends(get_current_principal),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Issue a new token for the current authenticated user.

    The token presented with this request stays valid until it expires.
    """
    grant = (await auth.refresh_token(principal.user_id)).unwrap()

    base_service.log_event("user.token.refreshed", {"id": principal.user_id})
    return base_service.api_response(message="Token refreshed successfully", data=grant)


@router.post("/logout")
async def logout(principal: Principal = Depends(get_current_principal)):
    """
    Log out. Tokens are stateless, so the client simply discards its token.
    """
    base_service.log_event("user.logout", {"id": principal.user_id})
    return base_service.api_response(message="Logout successful")


@router.get("/ping")
async def ping():
    """
    Health check endpoint for the auth service.
    """
    return base_service.api_response(
        message="Auth service is alive",
        data={"timestamp": datetime.now(timezone.utc).isoformat()},
    )
