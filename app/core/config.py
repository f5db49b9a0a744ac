"""Configuration management for the Hackathon Core service.

Configuration is loaded from environment variables into nested
pydantic-settings groups. Variable names follow the sibling services'
conventions (DB_*, AUTH_*, NOTIFICATION_*).
"""

from __future__ import annotations

from enum import StrEnum
from functools import lru_cache

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ASYNCPG_DRIVER = "+asyncpg"
DEFAULT_HEALTH_PATH = "/health"


def join_health_url(base_url: str, path: str) -> str:
    """Join a service base URL and a health path, tolerating a missing leading slash."""
    path = path or DEFAULT_HEALTH_PATH
    separator = "" if path.startswith("/") else "/"
    return f"{base_url.rstrip('/')}{separator}{path}"


def _parse_bool(v: bool | str) -> bool:
    if isinstance(v, str):
        return v.strip().lower() in ("true", "1", "yes", "on")
    return v


class AppEnvironment(StrEnum):
    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class LogLevel(StrEnum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AppConfig(BaseSettings):
    name: str = Field(default="hackathon-core-service")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="1.0.0")
    log_level: LogLevel = Field(default=LogLevel.INFO)
    api_prefix: str = Field(default="/api/v1")

    model_config = SettingsConfigDict(env_prefix="APP_", extra="ignore")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v.strip().lower())

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.strip().upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3002, validation_alias=AliasChoices("server_port", "port"))
    workers: int = Field(default=1)

    model_config = SettingsConfigDict(env_prefix="SERVER_", extra="ignore")


class DatabaseConfig(BaseSettings):
    """Postgres connection parameters.

    host, port and database default to empty so that the startup readiness
    gate can report an incomplete configuration instead of silently
    connecting to a default.
    """

    host: str = Field(default="")
    port: str = Field(default="")
    database: str = Field(default="")
    username: str = Field(default="postgres")
    password: SecretStr = Field(default=SecretStr(""))
    pool_size: int = Field(default=10)
    max_overflow: int = Field(default=10)
    pool_timeout: int = Field(default=30)
    pool_recycle: int = Field(default=1800)
    echo: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="DB_", extra="ignore")

    @field_validator("port", mode="before")
    @classmethod
    def coerce_port(cls, v: int | str | None) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def missing_fields(self) -> list[str]:
        """Names of the required connection parameters that are not set."""
        required = {"DB_HOST": self.host, "DB_PORT": self.port, "DB_DATABASE": self.database}
        return [name for name, value in required.items() if not value]

    @property
    def async_url(self) -> str:
        password = self.password.get_secret_value()
        return (
            f"postgresql{ASYNCPG_DRIVER}://{self.username}:{password}"
            f"@{self.host}:{self.port}/{self.database}"
        )


class IdentityServiceConfig(BaseSettings):
    """Sibling identity (auth) service."""

    service_url: str = Field(default="")
    health_path: str = Field(default=DEFAULT_HEALTH_PATH)
    timeout_seconds: float = Field(default=10.0)

    model_config = SettingsConfigDict(env_prefix="AUTH_", extra="ignore")

    @property
    def health_url(self) -> str:
        return join_health_url(self.service_url, self.health_path)


class NotificationServiceConfig(BaseSettings):
    """Sibling notification (email) service."""

    service_url: str = Field(default="")
    health_path: str = Field(default=DEFAULT_HEALTH_PATH)
    timeout_seconds: float = Field(default=15.0)
    retry_attempts: int = Field(default=3)

    model_config = SettingsConfigDict(env_prefix="NOTIFICATION_", extra="ignore")

    @property
    def health_url(self) -> str:
        return join_health_url(self.service_url, self.health_path)


class StartupConfig(BaseSettings):
    """Startup readiness gate policy."""

    health_check_enabled: bool = Field(default=True)
    max_attempts: int = Field(default=3, ge=1)
    retry_delay_ms: int = Field(default=5000, ge=0)
    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    database_connect_check: bool = Field(default=False)

    model_config = SettingsConfigDict(env_prefix="STARTUP_", extra="ignore")

    @field_validator("health_check_enabled", "database_connect_check", mode="before")
    @classmethod
    def parse_flags(cls, v: bool | str) -> bool:
        return _parse_bool(v)

    @property
    def retry_delay_seconds(self) -> float:
        return self.retry_delay_ms / 1000


class SecurityConfig(BaseSettings):
    api_key_enabled: bool = Field(default=True)
    api_keys: str = Field(default="", validation_alias=AliasChoices("api_keys", "api_key"))
    cors_origin: str = Field(default="http://localhost:3000")
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "DELETE", "PATCH"])

    model_config = SettingsConfigDict(extra="ignore")

    @field_validator("api_key_enabled", mode="before")
    @classmethod
    def parse_api_key_enabled(cls, v: bool | str) -> bool:
        return _parse_bool(v)

    @property
    def api_keys_list(self) -> list[str]:
        return [key.strip() for key in self.api_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


class ObservabilityConfig(BaseSettings):
    log_format: str = Field(default="json")
    metrics_token: str | None = Field(default=None)
    swagger_enabled: bool = Field(default=True)

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    @field_validator("swagger_enabled", mode="before")
    @classmethod
    def parse_swagger_enabled(cls, v: bool | str) -> bool:
        return _parse_bool(v)


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    identity: IdentityServiceConfig = Field(default_factory=IdentityServiceConfig)
    notification: NotificationServiceConfig = Field(default_factory=NotificationServiceConfig)
    startup: StartupConfig = Field(default_factory=StartupConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
