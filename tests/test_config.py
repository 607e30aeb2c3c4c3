"""Tests for environment configuration."""

import pytest

from scooked.config.provider import EnvConfigProvider

ENV_VARS = [
    "REDIS_URL", "REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD",
    "STORE_ENABLED", "APP_ID", "INITIAL_AUTH_TOKEN", "AUTH_TOKEN_SECRET",
    "ANONYMOUS_AUTH", "SCOOKED_IDENTITY", "SESSION_DURATION_SECONDS",
    "TICK_INTERVAL_SECONDS", "RETRY_MAX_ATTEMPTS", "RETRY_DELAY_MS",
    "API_PORT", "API_HOST", "API_DEBUG", "LOG_LEVEL",
]


@pytest.fixture
def provider(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return EnvConfigProvider()


def test_defaults(provider):
    store = provider.get_store_config()
    assert store.url is None
    assert not store.is_configured
    assert store.app_id == "scooked-default-app"

    auth = provider.get_auth_config()
    assert auth.initial_token is None
    assert auth.anonymous_enabled is True

    session = provider.get_session_config()
    assert session.duration_ms == 600_000
    assert session.tick_interval == 1.0
    assert session.retry_max_attempts == 3
    assert session.retry_delay_ms == 1000

    api = provider.get_api_config()
    assert api.port == 8080
    assert api.log_level == "INFO"


def test_redis_url_wins(provider, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")
    monkeypatch.setenv("REDIS_HOST", "ignored")

    store = provider.get_store_config()
    assert store.url == "redis://cache:6380/2"
    assert store.is_configured


def test_redis_host_with_service_link_port(provider, monkeypatch):
    monkeypatch.setenv("REDIS_HOST", "redis")
    monkeypatch.setenv("REDIS_PORT", "tcp://10.0.0.5:6379")
    monkeypatch.setenv("REDIS_DB", "1")

    assert provider.get_store_config().url == "redis://redis:6379/1"


def test_store_can_be_disabled(provider, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://cache:6379/0")
    monkeypatch.setenv("STORE_ENABLED", "false")

    assert not provider.get_store_config().is_configured


def test_session_overrides(provider, monkeypatch):
    monkeypatch.setenv("SESSION_DURATION_SECONDS", "90")
    monkeypatch.setenv("RETRY_DELAY_MS", "0")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert provider.get_session_config().duration_ms == 90_000
    assert provider.get_session_config().retry_delay_ms == 0
    assert provider.get_api_config().log_level == "DEBUG"


@pytest.mark.parametrize(
    "name,value",
    [("SESSION_DURATION_SECONDS", "0"), ("RETRY_MAX_ATTEMPTS", "zero"), ("RETRY_DELAY_MS", "-5")],
)
def test_invalid_numbers_are_rejected(provider, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        provider.get_session_config()


def test_empty_token_is_ignored(provider, monkeypatch):
    monkeypatch.setenv("INITIAL_AUTH_TOKEN", "")
    assert provider.get_auth_config().initial_token is None
