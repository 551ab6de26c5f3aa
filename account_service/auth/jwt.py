"""
JWT token handling for authentication.

This module provides functionality for:
- Creating signed, time-boxed JWT tokens
- Validating JWT tokens
- Extracting bearer tokens from the Authorization header
- Parsing human-readable token lifetimes ("7d", "12h", "30m")
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import jwt
from pydantic import BaseModel

from account_service.errors import EncodingError, InvalidTokenError
from account_service.users.models import UserRole

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
BEARER_PREFIX = "Bearer "

# Accepts the `ms` npm package grammar, e.g. "7d", "12h", "90 minutes".
DURATION_PATTERN = re.compile(
    r"^(?P<amount>-?(?:\d+)?\.?\d+) *"
    r"(?P<unit>milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m|"
    r"hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?$",
    re.IGNORECASE,
)

UNIT_SECONDS = {
    "y": 365.25 * 86400,
    "w": 7 * 86400,
    "d": 86400,
    "h": 3600,
    "m": 60,
    "s": 1,
    "ms": 0.001,
}


class Principal(BaseModel):
    """The authenticated caller, derived from a verified token."""
    user_id: str
    email: str
    role: UserRole


class TokenClaims(Principal):
    """Verified token payload."""
    issued_at: datetime
    expires_at: datetime


def _unit_key(unit: Optional[str]) -> str:
    if unit is None:
        return "ms"
    unit = unit.lower()
    if unit.startswith("ms") or unit.startswith("milli"):
        return "ms"
    if unit.startswith("mi") or unit == "m":
        return "m"
    return unit[0]


def _seconds(seconds: float, original) -> timedelta:
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        raise ValueError(f"Duration out of range: {original!r}") from None


def parse_duration(value: Union[timedelta, int, float, str]) -> timedelta:
    """
    Convert a lifetime into a timedelta.

    Args:
        value: timedelta, number of seconds, or a string such as "7d",
            "12h", "90 minutes" or "500ms". A bare numeric string is
            read as milliseconds.

    Returns:
        The duration as a timedelta

    Raises:
        ValueError: If the value cannot be parsed or is out of range
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        return _seconds(value, value)

    match = DURATION_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if match is None:
        raise ValueError(f"Invalid duration: {value!r}")

    amount = float(match.group("amount"))
    return _seconds(amount * UNIT_SECONDS[_unit_key(match.group("unit"))], value)


def expiry_from(issued_at: datetime, lifetime: timedelta) -> datetime:
    """Expiry instant for a token issued at ``issued_at``; ValueError if out of range."""
    try:
        return issued_at + lifetime
    except OverflowError:
        raise ValueError(f"Token lifetime out of range: {lifetime}") from None


def encode_token(
    principal: Principal,
    secret: str,
    ttl: Union[timedelta, int, float, str],
    now: Optional[datetime] = None,
) -> str:
    """
    Create a signed JWT for a principal.

    Args:
        principal: User id, email and role to embed
        secret: HMAC signing secret
        ttl: Token lifetime (see parse_duration)
        now: Issue time, defaults to the current UTC time

    Returns:
        Encoded JWT token string

    Raises:
        EncodingError: If the secret is empty or the lifetime is not positive
            or too large to represent
    """
    if not secret:
        raise EncodingError()
    issued_at = now or datetime.now(timezone.utc)
    try:
        lifetime = parse_duration(ttl)
        expires_at = expiry_from(issued_at, lifetime)
    except ValueError:
        raise EncodingError() from None
    if lifetime <= timedelta(0):
        raise EncodingError()

    payload = {
        "sub": principal.user_id,
        "email": principal.email,
        "role": principal.role.value,
        "iat": issued_at,
        "exp": expires_at,
    }
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> TokenClaims:
    """
    Verify a JWT and return its claims.

    Args:
        token: JWT token string
        secret: HMAC signing secret

    Returns:
        TokenClaims for a valid, unexpired token

    Raises:
        InvalidTokenError: For any bad signature, malformed token, missing
            claim or expired token
    """
    if not token or not secret:
        raise InvalidTokenError()
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            options={"require": ["exp", "iat", "sub"]},
        )
        return TokenClaims(
            user_id=payload["sub"],
            email=payload["email"],
            role=payload["role"],
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
    except (jwt.PyJWTError, KeyError, TypeError, ValueError) as e:
        logger.debug("Token rejected: %s", e.__class__.__name__)
        raise InvalidTokenError() from None


def extract_bearer(header_value: Optional[str]) -> Optional[str]:
    """Return the token from a "Bearer <token>" header, or None."""
    if not header_value or not header_value.startswith(BEARER_PREFIX):
        return None
    return header_value[len(BEARER_PREFIX):] or None
