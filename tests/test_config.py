from datetime import timedelta

import pytest

from app.core.config import Settings, build_lockout_policy, build_token_config
from app.core.errors import ConfigurationError
from app.models.enums import UserRole


def test_defaults_without_env_file(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    settings = Settings(_env_file=None)
    assert settings.JWT_SECRET is None
    assert settings.JWT_ALGORITHM == "HS256"
    assert settings.REFRESH_TOKEN_EXPIRE_DAYS == 7
    assert settings.LOCKOUT_MAX_FAILED_ATTEMPTS == 5
    assert settings.LOCKOUT_MINUTES == 15
    assert settings.DATABASE_URL.startswith("mysql+pymysql://")


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with pytest.raises(ConfigurationError):
        build_token_config(Settings(_env_file=None))


def test_short_secret_is_rejected():
    with pytest.raises(ConfigurationError):
        build_token_config(Settings(_env_file=None, JWT_SECRET="too-short"))


def test_token_config_is_built_from_settings():
    settings = Settings(
        _env_file=None,
        JWT_SECRET="x" * 40,
        JWT_ISSUER="issuer",
        JWT_AUDIENCE="audience",
        ACCESS_TOKEN_EXPIRE_MINUTES=5,
        REFRESH_TOKEN_EXPIRE_DAYS=3,
    )
    config = build_token_config(settings)
    assert config.secret == "x" * 40
    assert config.issuer == "issuer"
    assert config.audience == "audience"
    assert config.access_ttl == timedelta(minutes=5)
    assert config.refresh_ttl == timedelta(days=3)


def test_lockout_policy_from_settings():
    policy = build_lockout_policy(Settings(_env_file=None, LOCKOUT_MAX_FAILED_ATTEMPTS=3, LOCKOUT_MINUTES=1))
    assert policy.max_failed_attempts == 3
    assert policy.window == timedelta(minutes=1)


@pytest.mark.parametrize("minutes", [0, -5])
def test_non_positive_lockout_window_is_rejected(minutes):
    with pytest.raises(ConfigurationError):
        build_lockout_policy(Settings(_env_file=None, LOCKOUT_MINUTES=minutes))


def test_cors_origins_parses_comma_list():
    settings = Settings(_env_file=None, CORS_ORIGINS="https://a.test, https://b.test")
    assert settings.CORS_ORIGINS == ["https://a.test", "https://b.test"]


def test_role_list_parsing():
    assert UserRole.parse_list("Admin, user, admin") == [UserRole.ADMIN, UserRole.USER]
    assert UserRole.parse_list("") == []
