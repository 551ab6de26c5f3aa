"""
Credential store backed by SQLAlchemy.

All reads exclude the password hash unless the caller explicitly asks for
it with ``find_by_email_including_password``. Emails are stored and looked
up in normalized form, and the unique index on ``users.email`` is the final
guard against duplicates.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import undefer

from account_service.base_service import Database
from account_service.errors import DuplicateKeyError
from account_service.users.models import User, normalize_email


class UserStore:
    """Persistence operations for user records."""

    def __init__(self, database: Database):
        self.database = database

    async def find_by_email_including_password(self, email: str) -> Optional[User]:
        """Look up a user by email with ``password_hash`` loaded."""
        async with self.database.session() as db:
            result = await db.execute(
                select(User)
                .options(undefer(User.password_hash))
                .where(User.email == normalize_email(email))
            )
            return result.scalar_one_or_none()

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.database.session() as db:
            result = await db.execute(
                select(User).where(User.email == normalize_email(email))
            )
            return result.scalar_one_or_none()

    async def find_by_id(self, user_id: str) -> Optional[User]:
        async with self.database.session() as db:
            return await db.get(User, user_id)

    async def create(self, fields: Dict[str, Any]) -> User:
        """
        Insert a new user.

        Args:
            fields: Column values; ``email`` and ``password_hash`` are required

        Returns:
            The stored user

        Raises:
            DuplicateKeyError: If the email is already registered
        """
        values = dict(fields)
        values["email"] = normalize_email(values["email"])

        async with self.database.session() as db:
            user = User(**values)
            db.add(user)
            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateKeyError() from None
            await db.refresh(user)
            return user

    async def update_by_id(self, user_id: str, fields: Dict[str, Any]) -> Optional[User]:
        """
        Apply a partial update.

        Returns:
            The updated user, or None if no user has this id

        Raises:
            DuplicateKeyError: If the new email belongs to another user
        """
        values = dict(fields)
        if "email" in values:
            values["email"] = normalize_email(values["email"])

        async with self.database.session() as db:
            user = await db.get(User, user_id)
            if user is None:
                return None

            for key, value in values.items():
                setattr(user, key, value)

            try:
                await db.commit()
            except IntegrityError:
                await db.rollback()
                raise DuplicateKeyError() from None
            await db.refresh(user)
            return user

    async def delete_by_id(self, user_id: str) -> bool:
        async with self.database.session() as db:
            result = await db.execute(delete(User).where(User.id == user_id))
            await db.commit()
            return result.rowcount > 0

    async def count_and_page(self, page: int, limit: int) -> Tuple[List[User], int]:
        """Return one page of users (newest first) and the total count."""
        async with self.database.session() as db:
            total = await db.scalar(select(func.count()).select_from(User))
            result = await db.execute(
                select(User)
                .order_by(User.created_at.desc(), User.id)
                .offset((page - 1) * limit)
                .limit(limit)
            )
            return list(result.scalars().all()), total or 0
