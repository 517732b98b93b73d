#!/usr/bin/env python3
"""
Centralized Configuration Module using Pydantic Settings

This module provides type-safe, environment-based configuration for the
geo-cache proxy. All configuration is centralized here so that the store
adapter, the upstream client and the read-through cache agree on key
namespaces and TTLs.

Architectural Decision: Pydantic Settings for type safety and validation
- Environment variable loading with .env support
- Type validation at startup (fail fast on misconfiguration)
- Grouped views (settings.redis, settings.cache, ...) for each consumer
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    """
    Redis configuration for the key-value store adapter.

    STAGE-0.1: Redis connection configuration
    """

    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ReconnectSettings(BaseSettings):
    """
    Reconnection policy for the store adapter.

    STAGE-0.2: Store reconnection policy

    Consumed by ReconnectPolicy; business logic never sees these values.
    """

    REDIS_RECONNECT_MAX_ATTEMPTS: int = Field(default=10, description="Connection attempts before giving up")
    REDIS_RECONNECT_MAX_TOTAL_BACKOFF: float = Field(
        default=30.0, description="Upper bound on total time spent reconnecting (seconds)"
    )
    REDIS_RECONNECT_BASE_DELAY: float = Field(default=0.1, description="Initial backoff delay (seconds)")
    REDIS_RECONNECT_MAX_DELAY: float = Field(default=3.0, description="Maximum single backoff delay (seconds)")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class CacheSettings(BaseSettings):
    """
    Read-through cache configuration.

    STAGE-2: Cache namespace and TTL policy

    EXPIRE_SECONDS applies to OK responses and to every read hit,
    SHORT_EXPIRE_SECONDS applies to ZERO_RESULTS responses.
    """

    REDIS_NAMESPACE: str = Field(default="geo-cache", description="Prefix for canonical keys and metrics")
    EXPIRE_SECONDS: int = Field(default=2592000, description="Standard TTL (30 days)")
    SHORT_EXPIRE_SECONDS: int = Field(default=86400, description="ZERO_RESULTS TTL (1 day)")

    @field_validator("REDIS_NAMESPACE")
    @classmethod
    def validate_namespace(cls, v):
        """Namespace becomes a key component and must not contain the delimiter."""
        if not v or ":" in v:
            raise ValueError("REDIS_NAMESPACE must be non-empty and must not contain ':'")
        return v

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class UpstreamSettings(BaseSettings):
    """
    Upstream geolocation API configuration.

    STAGE-4: Upstream client configuration
    """

    GOOGLE_API_KEY: str | None = Field(default=None, description="Default upstream API credential")
    UPSTREAM_BASE_URL: str = Field(
        default="https://maps.googleapis.com", description="Upstream API origin (no trailing slash)"
    )
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Upstream request timeout in seconds")

    @field_validator("UPSTREAM_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class LoggingSettings(BaseSettings):
    """
    Logging configuration for structured logging.

    STAGE-L: Logging configuration
    """

    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class ApplicationSettings(BaseSettings):
    """
    General application settings.

    STAGE-0: Application initialization
    """

    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="geo-cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")

    model_config = SettingsConfigDict(env_prefix="", case_sensitive=True)


class Settings(BaseSettings):
    """
    Main settings class that aggregates all configuration sections.

    STAGE-0: Centralized configuration initialization

    Usage:
        from geocache.core.config.settings import get_settings

        settings = get_settings()
        namespace = settings.cache.REDIS_NAMESPACE
        api_key = settings.upstream.GOOGLE_API_KEY
    """

    # Redis settings
    REDIS_HOST: str = Field(default="localhost", description="Redis server host")
    REDIS_PORT: int = Field(default=6379, description="Redis server port")
    REDIS_DB: int = Field(default=0, description="Redis database number")
    REDIS_PASSWORD: str | None = Field(default=None, description="Redis password (if required)")
    REDIS_MAX_CONNECTIONS: int = Field(default=50, description="Maximum pooled connections")
    REDIS_SOCKET_TIMEOUT: int = Field(default=5, description="Socket timeout in seconds")
    REDIS_SOCKET_CONNECT_TIMEOUT: int = Field(default=5, description="Connection timeout in seconds")
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(default=30, description="Health check interval in seconds")

    # Reconnection policy
    REDIS_RECONNECT_MAX_ATTEMPTS: int = Field(default=10, description="Connection attempts before giving up")
    REDIS_RECONNECT_MAX_TOTAL_BACKOFF: float = Field(default=30.0, description="Total reconnect budget (seconds)")
    REDIS_RECONNECT_BASE_DELAY: float = Field(default=0.1, description="Initial backoff delay (seconds)")
    REDIS_RECONNECT_MAX_DELAY: float = Field(default=3.0, description="Maximum single backoff delay (seconds)")

    # Cache settings
    REDIS_NAMESPACE: str = Field(default="geo-cache", description="Prefix for canonical keys and metrics")
    EXPIRE_SECONDS: int = Field(default=2592000, description="Standard TTL (30 days)")
    SHORT_EXPIRE_SECONDS: int = Field(default=86400, description="ZERO_RESULTS TTL (1 day)")

    # Upstream settings
    GOOGLE_API_KEY: str | None = Field(default=None, description="Default upstream API credential")
    UPSTREAM_BASE_URL: str = Field(default="https://maps.googleapis.com", description="Upstream API origin")
    UPSTREAM_TIMEOUT: float = Field(default=10.0, description="Upstream request timeout in seconds")

    # Logging settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: Literal["json", "console"] = Field(default="json", description="Log output format")

    # Application settings
    ENVIRONMENT: Literal["development", "staging", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    APP_NAME: str = Field(default="geo-cache", description="Application name")
    APP_VERSION: str = Field(default="1.0.0", description="Application version")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=8000, description="API port")

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of {valid_levels}")
        return v.upper()

    # Nested configuration views

    @property
    def redis(self) -> RedisSettings:
        """Get Redis settings."""
        return RedisSettings(
            REDIS_HOST=self.REDIS_HOST,
            REDIS_PORT=self.REDIS_PORT,
            REDIS_DB=self.REDIS_DB,
            REDIS_PASSWORD=self.REDIS_PASSWORD,
            REDIS_MAX_CONNECTIONS=self.REDIS_MAX_CONNECTIONS,
            REDIS_SOCKET_TIMEOUT=self.REDIS_SOCKET_TIMEOUT,
            REDIS_SOCKET_CONNECT_TIMEOUT=self.REDIS_SOCKET_CONNECT_TIMEOUT,
            REDIS_HEALTH_CHECK_INTERVAL=self.REDIS_HEALTH_CHECK_INTERVAL,
        )

    @property
    def reconnect(self) -> ReconnectSettings:
        """Get store reconnection settings."""
        return ReconnectSettings(
            REDIS_RECONNECT_MAX_ATTEMPTS=self.REDIS_RECONNECT_MAX_ATTEMPTS,
            REDIS_RECONNECT_MAX_TOTAL_BACKOFF=self.REDIS_RECONNECT_MAX_TOTAL_BACKOFF,
            REDIS_RECONNECT_BASE_DELAY=self.REDIS_RECONNECT_BASE_DELAY,
            REDIS_RECONNECT_MAX_DELAY=self.REDIS_RECONNECT_MAX_DELAY,
        )

    @property
    def cache(self) -> CacheSettings:
        """Get cache settings."""
        return CacheSettings(
            REDIS_NAMESPACE=self.REDIS_NAMESPACE,
            EXPIRE_SECONDS=self.EXPIRE_SECONDS,
            SHORT_EXPIRE_SECONDS=self.SHORT_EXPIRE_SECONDS,
        )

    @property
    def upstream(self) -> UpstreamSettings:
        """Get upstream API settings."""
        return UpstreamSettings(
            GOOGLE_API_KEY=self.GOOGLE_API_KEY,
            UPSTREAM_BASE_URL=self.UPSTREAM_BASE_URL,
            UPSTREAM_TIMEOUT=self.UPSTREAM_TIMEOUT,
        )

    @property
    def logging(self) -> LoggingSettings:
        """Get logging settings."""
        return LoggingSettings(LOG_LEVEL=self.LOG_LEVEL, LOG_FORMAT=self.LOG_FORMAT)

    @property
    def app(self) -> ApplicationSettings:
        """Get application settings."""
        return ApplicationSettings(
            ENVIRONMENT=self.ENVIRONMENT,
            APP_NAME=self.APP_NAME,
            APP_VERSION=self.APP_VERSION,
            API_HOST=self.API_HOST,
            API_PORT=self.API_PORT,
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance (singleton pattern)
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get the global settings instance (singleton).

    STAGE-0.3: Settings initialization

    Returns:
        Settings: Global settings instance
    """
    global _settings

    if _settings is None:
        _settings = Settings()

    return _settings


def reload_settings() -> Settings:
    """
    Reload settings (useful for testing).

    Returns:
        Settings: New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
