"""
User management service.

This module provides functionality for:
- User creation (self-registration and admin-created accounts)
- User lookup by id
- Profile updates, including password changes
- Account removal
- Paginated listing
"""
import math
import re
from typing import Union

from fastapi.concurrency import run_in_threadpool

from account_service.auth.passwords import hash_password
from account_service.base_service import BaseService
from account_service.config import Settings
from account_service.errors import BadRequestError, DuplicateKeyError, NotFoundError
from account_service.results import Err, Ok, Result
from account_service.users.models import UserRole, UserStatus
from account_service.users.schemas import AdminUserCreate, UserCreate, UserOut, UserPage, UserUpdate
from account_service.users.store import UserStore

USER_ID_PATTERN = re.compile(r"^[0-9a-f]{32}$")
# Largest row offset a 64-bit database integer can hold.
MAX_OFFSET = 2 ** 63 - 1

service = BaseService("users")


def normalize_id(user_id: str) -> str:
    """Ids are stored as lowercase hex; accept either case from callers."""
    return (user_id or "").lower()


def invalid_id(user_id: str) -> bool:
    return not USER_ID_PATTERN.match(user_id)


class UserService:
    """
    Service for user management operations.
    """
    def __init__(self, store: UserStore, settings: Settings):
        self.store = store
        self.settings = settings

    async def create_user(self, user_data: Union[UserCreate, AdminUserCreate]) -> Result[UserOut]:
        """
        Create a new user.

        Args:
            user_data: Validated registration data. Self-registration always
                gets the default role; admin-created users keep theirs.

        Returns:
            Ok with the public user, or Err(DuplicateKeyError)
        """
        if await self.store.find_by_email(user_data.email) is not None:
            return Err(DuplicateKeyError())

        role = getattr(user_data, "role", UserRole.USER)
        status = getattr(user_data, "status", UserStatus.ACTIVE)
        password_hash = await run_in_threadpool(
            hash_password, user_data.password, self.settings.salt_work_factor
        )

        try:
            user = await self.store.create({
                "email": user_data.email,
                "name": user_data.name,
                "password_hash": password_hash,
                "role": role.value,
                "status": status.value,
            })
        except DuplicateKeyError as e:
            # Lost a race with a concurrent registration.
            return Err(e)

        service.log_event("user.created", {"id": user.id, "email": user.email, "role": user.role})
        return Ok(UserOut.model_validate(user))

    async def get_user(self, user_id: str) -> Result[UserOut]:
        user_id = normalize_id(user_id)
        if invalid_id(user_id):
            return Err(BadRequestError("Invalid user ID format"))

        user = await self.store.find_by_id(user_id)
        if user is None:
            return Err(NotFoundError())
        return Ok(UserOut.model_validate(user))

    async def update_user(self, user_id: str, update_data: UserUpdate) -> Result[UserOut]:
        """
        Update user information.

        A new password is re-hashed before it is stored.

        Returns:
            Ok with the updated user, Err(NotFoundError) if missing, or
            Err(DuplicateKeyError) if the new email is taken
        """
        user_id = normalize_id(user_id)
        if invalid_id(user_id):
            return Err(BadRequestError("Invalid user ID format"))

        changes = update_data.changes()
        if "password" in changes:
            changes["password_hash"] = await run_in_threadpool(
                hash_password, changes.pop("password"), self.settings.salt_work_factor
            )

        try:
            user = await self.store.update_by_id(user_id, changes)
        except DuplicateKeyError as e:
            return Err(e)

        if user is None:
            return Err(NotFoundError())

        service.log_event("user.updated", {
            "id": user_id,
            "fields_updated": sorted(update_data.changes().keys()),
        })
        return Ok(UserOut.model_validate(user))

    async def delete_user(self, user_id: str) -> Result[bool]:
        user_id = normalize_id(user_id)
        if invalid_id(user_id):
            return Err(BadRequestError("Invalid user ID format"))

        if not await self.store.delete_by_id(user_id):
            return Err(NotFoundError())

        service.log_event("user.deleted", {"id": user_id})
        return Ok(True)

    async def list_users(self, page: int = 1, limit: int = 10) -> Result[UserPage]:
        """
        Get one page of users, newest first.

        Returns:
            Ok with users, total, page and total_pages, or
            Err(BadRequestError) for out-of-range pagination
        """
        if (
            page < 1
            or limit < 1
            or limit > self.settings.pagination_max_limit
            or (page - 1) * limit > MAX_OFFSET
        ):
            return Err(BadRequestError("Invalid pagination parameters"))

        users, total = await self.store.count_and_page(page, limit)
        return Ok(UserPage(
            users=[UserOut.model_validate(u) for u in users],
            total=total,
            page=page,
            total_pages=math.ceil(total / limit),
        ))
