"""
User management router.

Admin-gated CRUD over the user collection:
- Admins create users with any role
- Admins and moderators list users
- Owners and admins read, update and delete a single user
"""
from typing import Optional

from fastapi import APIRouter, Depends, status

from account_service.auth.jwt import Principal
from account_service.auth.middleware import AuthGuard
from account_service.base_service import BaseService
from account_service.config import Settings
from account_service.dependencies import get_app_settings, get_user_service
from account_service.errors import InsufficientPermissionsError
from account_service.users.models import UserRole
from account_service.users.schemas import AdminUserCreate, UserUpdate
from account_service.users.service import UserService

router = APIRouter(tags=["users"])

base_service = BaseService("users")


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(AuthGuard.has_roles(UserRole.ADMIN))],
)
async def create_user(
    user_data: AdminUserCreate,
    users: UserService = Depends(get_user_service),
):
    """Create a user on behalf of an admin."""
    user_info = (await users.create_user(user_data)).unwrap()
    return base_service.api_response(
        message="User created successfully",
        data=user_info,
        status_code=status.HTTP_201_CREATED,
    )


@router.get(
    "",
    dependencies=[Depends(AuthGuard.has_roles(UserRole.ADMIN, UserRole.MODERATOR))],
)
async def list_users(
    page: int = 1,
    limit: Optional[int] = None,
    users: UserService = Depends(get_user_service),
    settings: Settings = Depends(get_app_settings),
):
    """
    Get users, newest first.

    Args:
        page: 1-based page number
        limit: Page size, defaults to the configured pagination limit
    """
    if limit is None:
        limit = settings.pagination_default_limit
    result = (await users.list_users(page, limit)).unwrap()
    return base_service.api_response(message="Users retrieved successfully", data=result)


@router.get("/{user_id}", dependencies=[Depends(AuthGuard.is_self_or_admin("user_id"))])
async def get_user(
    user_id: str,
    users: UserService = Depends(get_user_service),
):
    user_info = (await users.get_user(user_id)).unwrap()
    return base_service.api_response(message="User retrieved successfully", data=user_info)


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    principal: Principal = Depends(AuthGuard.is_self_or_admin("user_id")),
    users: UserService = Depends(get_user_service),
):
    """
    Update a user. Only admins may change role or status.
    """
    if update_data.changes_access and principal.role != UserRole.ADMIN:
        raise InsufficientPermissionsError()

    user_info = (await users.update_user(user_id, update_data)).unwrap()
    return base_service.api_response(message="User updated successfully", data=user_info)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    principal: Principal = Depends(AuthGuard.is_self_or_admin("user_id")),
    users: UserService = Depends(get_user_service),
):
    (await users.delete_user(user_id)).unwrap()

    base_service.log_event("user.removed", {"id": user_id, "by": principal.user_id})
    return base_service.api_response(message="User deleted successfully")
