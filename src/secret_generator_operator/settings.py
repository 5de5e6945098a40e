"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from secret_generator_operator.constants import (
    DEFAULT_SECRET_ENCODING,
    DEFAULT_SECRET_LENGTH,
    DEFAULT_SSH_KEY_LENGTH,
)
from secret_generator_operator.models import GeneratorConfig


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation policy
    regenerate_insecure: bool = Field(
        default=False,
        validation_alias="REGENERATE_INSECURE",
        description="Regenerate every field of secrets not marked secure",
    )
    secret_length: int = Field(
        default=DEFAULT_SECRET_LENGTH,
        ge=0,
        validation_alias="SECRET_LENGTH",
        description="Default length of generated values",
    )
    secret_encoding: str = Field(
        default=DEFAULT_SECRET_ENCODING,
        validation_alias="SECRET_ENCODING",
        description="Default encoding (base64, base64url, base32, hex, raw)",
    )
    ssh_key_length: int = Field(
        default=DEFAULT_SSH_KEY_LENGTH,
        ge=1024,
        validation_alias="SSH_KEY_LENGTH",
        description="Default RSA key size in bits for ssh-keypair secrets",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="WATCH_NAMESPACES",
        description="Comma-separated list of namespaces to watch (empty = all namespaces)",
    )

    # Operator behavior
    dry_run: bool = Field(
        default=False,
        validation_alias="DRY_RUN",
        description="Run in dry-run mode (generated values are never written)",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to watch all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None

    def generator_config(self) -> GeneratorConfig:
        """Build the generation policy handed to the reconciler."""
        return GeneratorConfig(
            regenerate_insecure=self.regenerate_insecure,
            secret_length=self.secret_length,
            secret_encoding=self.secret_encoding,
            ssh_key_length=self.ssh_key_length,
        )


# Global settings instance - initialized once at module import
settings = Settings()
