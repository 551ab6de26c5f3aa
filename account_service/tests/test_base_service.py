import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from account_service.base_service import ApiResponse, BaseService, Database
from account_service.config import Settings
from account_service.errors import NotFoundError
from account_service.results import Err, Ok

base_service = BaseService("pytest")


def body(response: ApiResponse) -> dict:
    return json.loads(response.body)


def test_api_response_envelope():
    response = base_service.api_response(data={"created_at": "now"}, message="done")
    assert response.status_code == 200
    assert body(response) == {"success": True, "message": "done", "data": {"created_at": "now"}}

    # Envelope omits data when there is none.
    assert body(base_service.api_response(message="empty")) == {"success": True, "message": "empty"}


def test_error_response_envelope():
    response = base_service.error_response(
        404, "Route not found", error="The requested endpoint does not exist", headers={"X-Test": "1"}
    )
    assert response.status_code == 404
    assert response.headers["x-test"] == "1"
    assert body(response) == {
        "success": False,
        "message": "Route not found",
        "error": "The requested endpoint does not exist",
    }

    response = base_service.error_response(400, "Validation failed", errors=[{"path": "email"}])
    assert body(response)["errors"] == [{"path": "email"}]


def test_log_event_and_error(caplog):
    with caplog.at_level("INFO", logger="account_service"):
        base_service.log_event("pytest_log_event", {"foo": "bar"})
        assert any("pytest_log_event" in m for m in caplog.text.splitlines())
    with caplog.at_level("ERROR", logger="account_service"):
        try:
            raise ValueError("test error")
        except ValueError as e:
            base_service.log_error(e, context="pytest")
        assert any("test error" in m and "Context: pytest" in m for m in caplog.text.splitlines())


@pytest.mark.asyncio
async def test_database_ping_reports_failure(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
    assert await database.ping() is False
    await database.dispose()


def test_results():
    assert Ok(3).unwrap() == 3
    assert Ok(3).ok is True

    err = Err(NotFoundError())
    assert err.ok is False
    with pytest.raises(NotFoundError):
        err.unwrap()


# Settings

def test_settings_from_env():
    settings = Settings.from_env({
        "APP_ENV": "production",
        "JWT_SECRET": "prod-secret",
        "JWT_EXPIRES_IN": "12h",
        "PORT": "8080",
        "SALT_WORK_FACTOR": "13",
        "ALLOWED_ORIGINS": "https://a.example.com, https://b.example.com,",
        "LOG_LEVEL": "warning",
    })
    assert settings.environment == "production"
    assert settings.port == 8080
    assert settings.salt_work_factor == 13
    assert settings.token_ttl == timedelta(hours=12)
    assert settings.allowed_origins == ["https://a.example.com", "https://b.example.com"]
    assert settings.log_level == "WARNING"


def test_environment_defaults():
    dev = Settings.from_env({})
    assert dev.environment == "development"
    assert dev.jwt_secret
    assert dev.jwt_expires_in == "7d"

    test = Settings.from_env({"APP_ENV": "test"})
    assert test.salt_work_factor == 4


def test_production_requires_secret():
    with pytest.raises(ValidationError, match="JWT_SECRET"):
        Settings.from_env({"APP_ENV": "production"})


@pytest.mark.parametrize("overrides", [
    {"SALT_WORK_FACTOR": "3"},
    {"SALT_WORK_FACTOR": "32"},
    {"JWT_EXPIRES_IN": "forever"},
    {"PAGINATION_MAX_LIMIT": "0"},
    {"JWT_EXPIRES_IN": "9000y"},
    {"JWT_EXPIRES_IN": "99999999999d"},
])
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValidationError):
        Settings.from_env({"APP_ENV": "test", **overrides})
