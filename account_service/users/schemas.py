"""
Request and response models for user accounts.

Incoming payloads are validated here, at the boundary, before anything
reaches the services. Outgoing models are the public projection of a user
and never include the password hash.
"""
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from account_service.users.models import UserRole, UserStatus, normalize_email

NAME_PATTERN = r"^[a-zA-Z\s'-]+$"
PASSWORD_PATTERN = r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])"
EMAIL_MIN_LENGTH = 5
EMAIL_MAX_LENGTH = 255
BCRYPT_MAX_BYTES = 72


class CamelModel(BaseModel):
    """Serializes to camelCase on the wire, accepts either form on input."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _clean_email(v: Any) -> Any:
    if not isinstance(v, str):
        return v
    v = normalize_email(v)
    if len(v) < EMAIL_MIN_LENGTH:
        raise ValueError(f"Email must be at least {EMAIL_MIN_LENGTH} characters long")
    if len(v) > EMAIL_MAX_LENGTH:
        raise ValueError(f"Email cannot exceed {EMAIL_MAX_LENGTH} characters")
    return v


def _check_name(v: Optional[str]) -> Optional[str]:
    if v is not None and not re.match(NAME_PATTERN, v):
        raise ValueError("Name can only contain letters, spaces, hyphens, and apostrophes")
    return v


def _check_password(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not re.match(PASSWORD_PATTERN, v):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character"
        )
    if len(v.encode("utf-8")) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password cannot exceed {BCRYPT_MAX_BYTES} bytes")
    return v


class LoginInput(CamelModel):
    """Model for user login."""
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class UserCreate(CamelModel):
    """Model for user registration."""
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v):
        return _check_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v):
        return _clean_email(v)

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v):
        return _check_password(v)

    @model_validator(mode="after")
    def passwords_match(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class AdminUserCreate(UserCreate):
    """Registration performed by an admin, who may choose the role and status."""
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE


class UserUpdate(CamelModel):
    """Model for updating a user. Role and status changes are admin-only."""
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8)
    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def name_must_be_valid(cls, v):
        return _check_name(v)

    @field_validator("email", mode="before")
    @classmethod
    def clean_email(cls, v):
        return _clean_email(v)

    @field_validator("password")
    @classmethod
    def password_must_be_strong(cls, v):
        return _check_password(v)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if not self.changes():
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> Dict[str, Any]:
        """Fields actually supplied, keyed by attribute name."""
        return self.model_dump(exclude_none=True, mode="json")

    @property
    def changes_access(self) -> bool:
        return self.role is not None or self.status is not None


class UserOut(CamelModel):
    """Model for user information returned to clients."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    status: UserStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserPage(CamelModel):
    """One page of users."""
    users: List[UserOut]
    total: int
    page: int
    total_pages: int
