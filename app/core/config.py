"""Configuration management for the Trade Hub backend.

Configuration is loaded from environment variables. Relay credentials keep
the legacy ``N8N_WEBHOOK_URL`` / ``OPENAI_API_KEY`` names as fallbacks.
"""

from __future__ import annotations

import os
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from urllib.parse import urlsplit

from pydantic import AliasChoices, Field, SecretStr, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


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
    name: str = Field(default="trade-hub-backend")
    env: AppEnvironment = Field(default=AppEnvironment.LOCAL)
    version: str = Field(default="1.0.0")
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default=LogLevel.INFO)

    model_config = SettingsConfigDict(env_prefix="APP_")

    @field_validator("env", mode="before")
    @classmethod
    def validate_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        if isinstance(v, AppEnvironment):
            return v
        return AppEnvironment(v)

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        if isinstance(v, LogLevel):
            return v
        return LogLevel(v.upper())


class ServerConfig(BaseSettings):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3001)

    model_config = SettingsConfigDict(env_prefix="SERVER_")


class StorageConfig(BaseSettings):
    """Location and retention of the JSON snapshot store."""

    data_path: Path = Field(default=Path("./data"))
    snapshot_filename: str = Field(default="trade-data.json")
    backup_dirname: str = Field(default="backups")
    backup_retention: int = Field(default=10, ge=1)
    audit_log_limit: int = Field(default=1000, ge=1)

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    @property
    def snapshot_file(self) -> Path:
        return self.data_path / self.snapshot_filename

    @property
    def backup_path(self) -> Path:
        return self.data_path / self.backup_dirname


class RelayConfig(BaseSettings):
    """Outbound automation webhook settings."""

    webhook_url: str = Field(
        default="",
        validation_alias=AliasChoices("relay_webhook_url", "n8n_webhook_url"),
    )
    openai_api_key: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices("openai_api_key", "relay_openai_api_key"),
    )
    timeout_seconds: float = Field(default=30.0)
    test_timeout_seconds: float = Field(default=5.0)

    model_config = SettingsConfigDict(env_prefix="RELAY_", populate_by_name=True)

    @property
    def webhook_configured(self) -> bool:
        return bool(self.webhook_url.strip())

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_api_key.get_secret_value())

    @property
    def enabled(self) -> bool:
        return self.webhook_configured or self.openai_configured


class FallbackConfig(BaseSettings):
    """Thresholds for the local stand-in analysis used when the relay is down."""

    high_value_compliance_amount: float = Field(default=1_000_000)
    compliance_penalty: int = Field(default=10)
    preferred_pair_bonus: int = Field(default=5)
    high_risk_amount: float = Field(default=500_000)
    high_risk_score_increment: int = Field(default=20)
    preferred_origin_risk_discount: int = Field(default=10)
    preferred_origin_country: str = Field(default="India")
    preferred_destination_country: str = Field(default="United States")

    model_config = SettingsConfigDict(env_prefix="FALLBACK_")


class SecurityConfig(BaseSettings):
    cors_allowed_origins: str = Field(default="*")
    cors_allow_credentials: bool = Field(default=False)
    cors_allow_methods: list[str] = Field(default=["GET", "POST", "PUT", "OPTIONS"])
    cors_allow_headers: list[str] = Field(default=["Content-Type", "X-Request-ID"])
    max_request_size_bytes: int = Field(default=5_242_880)
    max_response_size_bytes: int = Field(default=20_971_520)

    model_config = SettingsConfigDict(env_prefix="SECURITY_")

    @field_validator("cors_allowed_origins", mode="after")
    @classmethod
    def validate_cors_allowed_origins(cls, v: str | list[str]) -> list[str]:
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v


class ObservabilityConfig(BaseSettings):
    service_name: str = Field(default="trade-hub-backend")
    otlp_endpoint: str | None = Field(
        default=None,
        validation_alias=AliasChoices("exporter_otlp_endpoint", "otlp_endpoint"),
    )
    otlp_insecure: bool = Field(
        default=True,
        validation_alias=AliasChoices("exporter_otlp_insecure", "otlp_insecure"),
    )
    log_record_format: str = Field(default="json")

    model_config = SettingsConfigDict(env_prefix="OTEL_")

    @model_validator(mode="after")
    def apply_exporter_env_fallbacks(self) -> ObservabilityConfig:
        """Support standard OpenTelemetry env names used in container orchestration."""
        if not self.otlp_endpoint:
            endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT") or os.getenv("OTEL_OTLP_ENDPOINT")
            if endpoint:
                self.otlp_endpoint = endpoint

        insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE")
        if insecure is not None:
            self.otlp_insecure = insecure.strip().lower() in {"1", "true", "yes", "on"}

        return self


class Settings(BaseSettings):
    app: AppConfig = Field(default_factory=AppConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    relay: RelayConfig = Field(default_factory=RelayConfig)
    fallback: FallbackConfig = Field(default_factory=FallbackConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
    metrics_token: str | None = Field(default=None)

    @model_validator(mode="after")
    def validate_production_settings(self) -> Settings:
        if self.app.env != AppEnvironment.PROD:
            return self
        if self.observability.otlp_endpoint and self.observability.otlp_insecure:
            raise ValueError("OTLP insecure mode is not allowed in production")
        if self.relay.webhook_configured and urlsplit(self.relay.webhook_url).scheme != "https":
            raise ValueError("Relay webhook URL must use https in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reload_settings() -> Settings:
    get_settings.cache_clear()
    return get_settings()
