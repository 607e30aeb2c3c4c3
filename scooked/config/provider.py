"""Configuration provider following Black Box Design principles."""
import os
from dataclasses import dataclass
from typing import Optional, Protocol


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


def _env_int(name: str, default: str, minimum: int = 0) -> int:
    raw = os.getenv(name, default)
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass
class StoreConfig:
    """Remote session store configuration."""
    enabled: bool
    url: Optional[str]
    password: Optional[str]
    app_id: str

    @property
    def is_configured(self) -> bool:
        """Check if the remote store can be reached at all."""
        return self.enabled and bool(self.url)


@dataclass
class AuthConfig:
    """Identity configuration."""
    initial_token: Optional[str]
    token_secret: Optional[str]
    anonymous_enabled: bool
    identity: Optional[str]


@dataclass
class SessionConfig:
    """Session timer configuration."""
    duration_ms: int
    tick_interval: float
    retry_max_attempts: int
    retry_delay_ms: int


@dataclass
class APIConfig:
    """API configuration."""
    port: int
    host: str
    debug: bool
    log_level: str


class ConfigProvider(Protocol):
    """Protocol for configuration providers."""

    def get_store_config(self) -> StoreConfig:
        """Get remote store configuration."""
        ...

    def get_auth_config(self) -> AuthConfig:
        """Get identity configuration."""
        ...

    def get_session_config(self) -> SessionConfig:
        """Get session timer configuration."""
        ...

    def get_api_config(self) -> APIConfig:
        """Get API configuration."""
        ...


class EnvConfigProvider:
    """Environment-based configuration provider."""

    def get_store_config(self) -> StoreConfig:
        """
        Get remote store configuration from environment variables.

        REDIS_URL wins over the REDIS_HOST/REDIS_PORT/REDIS_DB triple. With
        neither set the service runs offline.
        """
        url = os.getenv("REDIS_URL")
        host = os.getenv("REDIS_HOST")
        if not url and host:
            # Port may arrive in tcp://host:port form from K8s service links
            port_env = os.getenv("REDIS_PORT", "6379")
            port = port_env.split(":")[-1] if port_env.startswith("tcp://") else port_env
            url = f"redis://{host}:{int(port)}/{_env_int('REDIS_DB', '0')}"

        return StoreConfig(
            enabled=_env_bool("STORE_ENABLED", "true"),
            url=url,
            password=os.getenv("REDIS_PASSWORD"),
            app_id=os.getenv("APP_ID", "scooked-default-app"),
        )

    def get_auth_config(self) -> AuthConfig:
        """Get identity configuration from environment variables."""
        return AuthConfig(
            initial_token=os.getenv("INITIAL_AUTH_TOKEN") or None,
            token_secret=os.getenv("AUTH_TOKEN_SECRET") or None,
            anonymous_enabled=_env_bool("ANONYMOUS_AUTH", "true"),
            identity=os.getenv("SCOOKED_IDENTITY") or None,
        )

    def get_session_config(self) -> SessionConfig:
        """Get session timer configuration from environment variables."""
        return SessionConfig(
            duration_ms=_env_int("SESSION_DURATION_SECONDS", "600", minimum=1) * 1000,
            tick_interval=float(os.getenv("TICK_INTERVAL_SECONDS", "1")),
            retry_max_attempts=_env_int("RETRY_MAX_ATTEMPTS", "3", minimum=1),
            retry_delay_ms=_env_int("RETRY_DELAY_MS", "1000"),
        )

    def get_api_config(self) -> APIConfig:
        """Get API configuration from environment variables."""
        return APIConfig(
            port=_env_int("API_PORT", "8080"),
            host=os.getenv("API_HOST", "0.0.0.0"),
            debug=_env_bool("API_DEBUG", "false"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
