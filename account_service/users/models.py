"""
User account model.

Defines the SQLAlchemy model backing the credential store and the
role/status vocabularies shared with tokens and schemas.
"""
import enum
import uuid

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import deferred

from account_service.base_service import Base, utc_now


class UserRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    MODERATOR = "moderator"


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"


def generate_user_id() -> str:
    return uuid.uuid4().hex


def normalize_email(email: str) -> str:
    """Canonical form used for storage and lookups."""
    return email.strip().lower()


class User(Base):
    """User account with credentials, role and status."""
    __tablename__ = "users"

    id = Column(String(32), primary_key=True, default=generate_user_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    name = Column(String(50), nullable=False)
    # Never loaded implicitly; only the "including password" lookup undefers it.
    password_hash = deferred(Column(String, nullable=False), raiseload=True)
    role = Column(String(20), nullable=False, default=UserRole.USER.value)
    status = Column(String(20), nullable=False, default=UserStatus.ACTIVE.value)
    created_at = Column(DateTime(timezone=True), default=utc_now, index=True)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role}>"
