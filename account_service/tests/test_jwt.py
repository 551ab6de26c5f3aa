"""
Tests for the JWT token codec.
"""
import base64
import json
import time
from datetime import datetime, timedelta, timezone

import jwt as pyjwt
import pytest

from account_service.auth.jwt import (
    Principal,
    decode_token,
    encode_token,
    extract_bearer,
    parse_duration,
)
from account_service.errors import EncodingError, InvalidTokenError
from account_service.users.models import UserRole

SECRET = "super-secret-jwt-token-for-testing-only"
PRINCIPAL = Principal(user_id="0123456789abcdef0123456789abcdef", email="user@example.com", role=UserRole.USER)


def _b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode()


def _b64_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def test_round_trip():
    """Decoding returns the claims that were encoded."""
    token = encode_token(PRINCIPAL, SECRET, timedelta(hours=1))
    claims = decode_token(token, SECRET)

    assert claims.user_id == PRINCIPAL.user_id
    assert claims.email == PRINCIPAL.email
    assert claims.role == UserRole.USER
    assert claims.expires_at - claims.issued_at == timedelta(hours=1)


def test_round_trip_with_duration_string():
    token = encode_token(PRINCIPAL.model_copy(update={"role": UserRole.ADMIN}), SECRET, "7d")
    claims = decode_token(token, SECRET)

    assert claims.role == UserRole.ADMIN
    assert claims.expires_at - claims.issued_at == timedelta(days=7)


def test_encoding_is_deterministic_for_same_timestamp():
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first = encode_token(PRINCIPAL, SECRET, "1h", now=now)
    second = encode_token(PRINCIPAL, SECRET, "1h", now=now)
    later = encode_token(PRINCIPAL, SECRET, "1h", now=now + timedelta(seconds=1))

    assert first == second
    assert first != later


def test_wrong_secret_rejected():
    token = encode_token(PRINCIPAL, SECRET, "1h")
    with pytest.raises(InvalidTokenError):
        decode_token(token, "a-completely-different-secret-value")


def test_tampered_claims_rejected():
    """Changing the payload without re-signing breaks the signature."""
    token = encode_token(PRINCIPAL, SECRET, "1h")
    header, payload, signature = token.split(".")

    claims = json.loads(_b64_decode(payload))
    claims["role"] = "admin"
    forged = ".".join([header, _b64(json.dumps(claims).encode()), signature])

    with pytest.raises(InvalidTokenError):
        decode_token(forged, SECRET)


def test_short_lived_token_expires():
    token = encode_token(PRINCIPAL, SECRET, timedelta(milliseconds=1))
    time.sleep(0.05)
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_expired_and_forged_tokens_look_the_same():
    expired = encode_token(PRINCIPAL, SECRET, "1h", now=datetime.now(timezone.utc) - timedelta(hours=2))
    forged = encode_token(PRINCIPAL, "another-secret-entirely-for-signing", "1h")

    with pytest.raises(InvalidTokenError) as expired_exc:
        decode_token(expired, SECRET)
    with pytest.raises(InvalidTokenError) as forged_exc:
        decode_token(forged, SECRET)

    assert expired_exc.value.message == forged_exc.value.message
    assert expired_exc.value.status_code == forged_exc.value.status_code == 401


@pytest.mark.parametrize("token", ["", "not-a-token", "a.b.c"])
def test_malformed_token_rejected(token):
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_missing_claims_rejected():
    now = int(time.time())
    token = pyjwt.encode({"sub": "user-1", "iat": now, "exp": now + 3600}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_unknown_role_rejected():
    now = int(time.time())
    token = pyjwt.encode(
        {"sub": "user-1", "email": "a@example.com", "role": "superuser", "iat": now, "exp": now + 3600},
        SECRET,
        algorithm="HS256",
    )
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_unsigned_token_rejected():
    now = int(time.time())
    token = pyjwt.encode(
        {"sub": "user-1", "email": "a@example.com", "role": "admin", "iat": now, "exp": now + 3600},
        None,
        algorithm="none",
    )
    with pytest.raises(InvalidTokenError):
        decode_token(token, SECRET)


def test_empty_secret_cannot_encode():
    with pytest.raises(EncodingError):
        encode_token(PRINCIPAL, "", "1h")


@pytest.mark.parametrize("ttl", [
    timedelta(0),
    timedelta(seconds=-5),
    0,
    "-1h",
    "eventually",
    "9000y",
    "99999999999d",
    10 ** 20,
    timedelta.max,
])
def test_non_positive_or_invalid_ttl_cannot_encode(ttl):
    with pytest.raises(EncodingError):
        encode_token(PRINCIPAL, SECRET, ttl)


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc123", "abc123"),
    ("bearer abc123", None),
    ("BEARER abc123", None),
    ("Bearerabc123", None),
    ("Basic dXNlcjpwYXNz", None),
    ("Bearer ", None),
    ("", None),
    (None, None),
])
def test_extract_bearer(header, expected):
    assert extract_bearer(header) == expected


@pytest.mark.parametrize("value, expected", [
    ("7d", timedelta(days=7)),
    ("12h", timedelta(hours=12)),
    ("30m", timedelta(minutes=30)),
    ("45s", timedelta(seconds=45)),
    ("500ms", timedelta(milliseconds=500)),
    ("100", timedelta(milliseconds=100)),
    ("2 weeks", timedelta(weeks=2)),
    ("90 minutes", timedelta(minutes=90)),
    ("1.5h", timedelta(minutes=90)),
    (60, timedelta(seconds=60)),
    (timedelta(hours=3), timedelta(hours=3)),
])
def test_parse_duration(value, expected):
    assert parse_duration(value) == expected


@pytest.mark.parametrize("value", ["soon", "7 fortnights", "", "d7", "99999999999d", 10 ** 20, float("inf")])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)
