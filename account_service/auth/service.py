"""
Authentication service.

Login, token refresh and current-user lookup. Expected failures come back
as ``Err`` values; nothing here distinguishes an unknown email from a wrong
password, and account status is only revealed to callers who proved they
know the password.
"""
import secrets
from functools import lru_cache
from typing import Optional, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import Field

from account_service.auth.jwt import Principal, encode_token
from account_service.auth.passwords import hash_password, verify_password
from account_service.config import Settings
from account_service.errors import (
    AccountInactiveError,
    AccountNotActiveError,
    AccountSuspendedError,
    InvalidCredentialsError,
    NotFoundError,
)
from account_service.results import Err, Ok, Result
from account_service.users.models import User, UserRole, UserStatus
from account_service.users.schemas import CamelModel, LoginInput, UserOut
from account_service.users.store import UserStore


@lru_cache()
def placeholder_hash(work_factor: int) -> str:
    """A hash no password matches, at the configured cost."""
    return hash_password(secrets.token_urlsafe(32), work_factor)


class TokenGrant(CamelModel):
    """Token response model."""
    token: str
    expires_in: str = Field(..., description="Configured token lifetime, e.g. '7d'")


class LoginResult(TokenGrant):
    """Login response: the public user alongside the token."""
    user: UserOut


class AuthService:
    """
    Orchestrates credential checks and token issuance.
    """
    def __init__(self, store: UserStore, settings: Settings):
        self.store = store
        self.settings = settings

    def issue_token(self, user: Union[User, UserOut]) -> TokenGrant:
        """Sign a fresh token for a user record or its public projection."""
        principal = Principal(user_id=user.id, email=user.email, role=UserRole(user.role))
        token = encode_token(principal, self.settings.jwt_secret, self.settings.token_ttl)
        return TokenGrant(token=token, expires_in=self.settings.jwt_expires_in)

    async def login(self, login_data: LoginInput) -> Result[LoginResult]:
        """
        Authenticate a user and issue a token.

        Args:
            login_data: Email and password

        Returns:
            Ok(LoginResult) on success; otherwise Err with
            InvalidCredentialsError, AccountSuspendedError or
            AccountInactiveError
        """
        user = await self.store.find_by_email_including_password(login_data.email)
        if user is None:
            # Unknown emails still pay for one bcrypt check.
            password_hash = await run_in_threadpool(placeholder_hash, self.settings.salt_work_factor)
        else:
            password_hash = user.password_hash

        valid = await run_in_threadpool(verify_password, login_data.password, password_hash)
        if user is None or not valid:
            return Err(InvalidCredentialsError())

        if user.status == UserStatus.SUSPENDED.value:
            return Err(AccountSuspendedError())
        if user.status == UserStatus.INACTIVE.value:
            return Err(AccountInactiveError())

        grant = self.issue_token(user)

        return Ok(LoginResult(
            user=UserOut.model_validate(user),
            token=grant.token,
            expires_in=grant.expires_in,
        ))

    async def refresh_token(self, user_id: str) -> Result[TokenGrant]:
        """
        Re-issue a token for an already authenticated user.

        The password is not checked again, and the previous token stays
        valid until it expires on its own.
        """
        user = await self.store.find_by_id(user_id)
        if user is None:
            return Err(NotFoundError())
        if user.status != UserStatus.ACTIVE.value:
            return Err(AccountNotActiveError())

        return Ok(self.issue_token(user))

    async def get_current_user(self, user_id: str) -> Optional[UserOut]:
        user = await self.store.find_by_id(user_id)
        if user is None:
            return None
        return UserOut.model_validate(user)
