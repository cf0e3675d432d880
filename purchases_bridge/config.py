"""
Application Configuration - Pydantic Settings for type-safe config.

FAIL FAST - Malformed config is rejected at startup.
"""

import sys

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMATS = ("json", "console")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigurationError(Exception):
    """Raised when critical configuration is missing or invalid."""

    pass


class Settings(BaseSettings):
    """Bridge settings loaded from environment variables."""

    # Channel Configuration
    channel_name: str = "purchases_flutter"
    # "package.module:attribute" resolving to a zero-argument SDK factory
    sdk_factory: str = ""

    # API Configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_title: str = "Purchases Bridge"
    api_version: str = "0.1.0"
    api_description: str = "Method-call and event channel over the purchasing SDK"

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json or console

    # Observability - Metrics
    metrics_enabled: bool = True

    # Observability - Tracing
    tracing_enabled: bool = False
    otlp_endpoint: str = "http://otel-collector:4317"
    otlp_insecure: bool = True
    service_name: str = "purchases-bridge"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_critical_config(self) -> "Settings":
        """
        FAIL FAST: Validate configuration at startup.

        A bridge with an unusable logger or SDK factory path must not start.
        """
        errors: list[str] = []

        if self.log_format not in LOG_FORMATS:
            errors.append(f"LOG_FORMAT must be one of {LOG_FORMATS}, got: {self.log_format}")

        if self.log_level.upper() not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {LOG_LEVELS}, got: {self.log_level}")

        if self.sdk_factory:
            module_name, _, attribute = self.sdk_factory.partition(":")
            if not module_name or not attribute:
                errors.append(
                    f"SDK_FACTORY must look like 'package.module:attribute', got: {self.sdk_factory}"
                )

        if not self.channel_name:
            errors.append("CHANNEL_NAME cannot be empty")

        if errors:
            error_msg = "\n".join(
                [
                    "",
                    "=" * 60,
                    "CONFIGURATION ERROR - BRIDGE CANNOT START",
                    "=" * 60,
                    *[f"  ✗ {e}" for e in errors],
                    "=" * 60,
                    "",
                ]
            )
            print(error_msg, file=sys.stderr)
            raise ConfigurationError(error_msg)

        return self


# Global settings instance - validates at import time
settings = Settings()


def get_settings() -> Settings:
    """Get bridge settings instance."""
    return settings
