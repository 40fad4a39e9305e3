"""Application configuration using Pydantic Settings.

Configuration is loaded from environment variables.

Optionally, point `ENV_FILE` at a local env file (for development). The file
only fills variables that are not already set in the environment.
"""

import os
from enum import Enum
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppEnvironment(str, Enum):
    """Application environment values."""

    LOCAL = "local"
    TEST = "test"
    PROD = "prod"


class RuleStoreBackend(str, Enum):
    """Where saved rules are persisted."""

    MEMORY = "memory"
    FILESYSTEM = "filesystem"
    HTTP = "http"


class MetadataSource(str, Enum):
    """Where the trigger/action/fact catalog comes from."""

    BUILTIN = "builtin"
    HTTP = "http"


_env_file = os.getenv("ENV_FILE")
if _env_file:
    env_path = Path(_env_file)
    if env_path.exists() and env_path.is_file():
        from rule_canvas.core.dotenv import load_env_file

        load_env_file(env_path, overwrite=False)


class Settings(BaseSettings):
    """
    Application settings with type validation.

    Every field has a local-development default so the service starts with
    an in-memory rule store and the built-in metadata catalog.
    """

    model_config = SettingsConfigDict(
        env_file=os.getenv("ENV_FILE") or None, env_prefix="", extra="ignore"
    )

    # Application
    app_env: AppEnvironment = AppEnvironment.LOCAL
    app_name: str = "rule-canvas"
    app_log_level: str = "INFO"

    # Observability
    observability_enabled: bool = True
    observability_structured_logs: bool = True
    observability_request_id_header: str = "X-Request-ID"

    # OpenTelemetry Configuration
    otel_enabled: bool = False
    otel_service_name: str = "rule-canvas"
    otel_exporter_otlp_endpoint: str = "http://localhost:4317"
    otel_exporter_otlp_headers: str | None = None
    otel_traces_sampler: str = "parent_trace_always"
    otel_traces_sampler_arg: float = 1.0

    # Remote rule store
    rule_store_backend: RuleStoreBackend = RuleStoreBackend.MEMORY
    rule_store_url: str = "http://localhost:8080"
    rule_store_timeout_s: float = 10.0
    rule_store_dir: str = ".local/rule-library"

    # Rule metadata provider
    rule_metadata_source: MetadataSource = MetadataSource.BUILTIN

    # Metrics token for protecting /metrics endpoint
    metrics_token: str | None = None

    # CORS Configuration
    cors_origins: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins string into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @field_validator("app_env", mode="before")
    @classmethod
    def validate_app_env(cls, v: str | AppEnvironment) -> AppEnvironment:
        """Validate and parse app_env to AppEnvironment enum."""
        if isinstance(v, AppEnvironment):
            return v
        try:
            return AppEnvironment(v.lower())
        except ValueError:
            raise ValueError(
                f"app_env must be one of {[e.value for e in AppEnvironment]}, got '{v}'"
            )

    @field_validator("rule_store_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the rule store base URL."""
        return v.strip().rstrip("/")

    @field_validator("rule_store_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("rule_store_timeout_s must be positive")
        return v

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """
        Validate production-specific settings.

        These checks prevent insecure configurations from being deployed to production.
        """
        if self.app_env == AppEnvironment.PROD:
            if self.rule_store_backend == RuleStoreBackend.MEMORY:
                raise ValueError("RULE_STORE_BACKEND=memory is not allowed in production")

            is_http = self.rule_store_backend == RuleStoreBackend.HTTP
            if is_http and not self.rule_store_url.startswith("https://"):
                raise ValueError("RULE_STORE_URL must use HTTPS in production")

            for origin in self.cors_origins_list:
                if "localhost" in origin or "127.0.0.1" in origin:
                    raise ValueError(
                        f"CORS origins must not contain localhost in production: {origin}"
                    )

        return self


settings = Settings()
