"""
Unit tests for application settings.

Tests cover:
- Defaults for local development
- Normalization of the rule store URL and CORS origins
- Production guard rails
"""

import pytest
from pydantic import ValidationError

from rule_canvas.core.config import (
    AppEnvironment,
    MetadataSource,
    RuleStoreBackend,
    Settings,
)


class TestDefaults:
    """Tests for local-development defaults."""

    @pytest.mark.anyio
    async def test_backend_and_metadata_from_kwargs(self):
        """Test that backend and metadata source parse from strings."""
        settings = Settings(rule_store_backend="filesystem", rule_metadata_source="http")
        assert settings.rule_store_backend == RuleStoreBackend.FILESYSTEM
        assert settings.rule_metadata_source == MetadataSource.HTTP

    @pytest.mark.anyio
    async def test_app_env_case_insensitive(self):
        """Test that APP_ENV is parsed case-insensitively."""
        assert Settings(app_env="LOCAL").app_env == AppEnvironment.LOCAL

    @pytest.mark.anyio
    async def test_invalid_app_env(self):
        """Test that an unknown APP_ENV is rejected."""
        with pytest.raises(ValidationError):
            Settings(app_env="staging")


class TestNormalization:
    """Tests for value normalization."""

    @pytest.mark.anyio
    async def test_rule_store_url_trailing_slash_removed(self):
        """Test that the rule store URL loses its trailing slash."""
        settings = Settings(rule_store_url=" http://engine:8080/ ")
        assert settings.rule_store_url == "http://engine:8080"

    @pytest.mark.anyio
    async def test_non_positive_timeout_rejected(self):
        """Test that the store timeout must be positive."""
        with pytest.raises(ValidationError):
            Settings(rule_store_timeout_s=0)

    @pytest.mark.anyio
    async def test_cors_origins_list(self):
        """Test that CORS origins are split and trimmed."""
        settings = Settings(cors_origins="https://a.example.com, https://b.example.com,")
        assert settings.cors_origins_list == ["https://a.example.com", "https://b.example.com"]


class TestProductionValidation:
    """Tests for production-only checks."""

    @pytest.mark.anyio
    async def test_memory_backend_rejected_in_prod(self):
        """Test that the in-memory store cannot be used in production."""
        with pytest.raises(ValidationError, match="memory"):
            Settings(app_env="prod", rule_store_backend="memory", cors_origins="https://x.io")

    @pytest.mark.anyio
    async def test_http_store_requires_https_in_prod(self):
        """Test that the rule store must be reached over HTTPS in production."""
        with pytest.raises(ValidationError, match="HTTPS"):
            Settings(
                app_env="prod",
                rule_store_backend="http",
                rule_store_url="http://engine",
                cors_origins="https://x.io",
            )

    @pytest.mark.anyio
    async def test_localhost_cors_rejected_in_prod(self):
        """Test that localhost CORS origins are rejected in production."""
        with pytest.raises(ValidationError, match="localhost"):
            Settings(
                app_env="prod",
                rule_store_backend="http",
                rule_store_url="https://engine",
                cors_origins="http://localhost:3000",
            )

    @pytest.mark.anyio
    async def test_valid_prod_settings(self):
        """Test that a complete production configuration is accepted."""
        settings = Settings(
            app_env="prod",
            rule_store_backend="http",
            rule_store_url="https://engine.example.com",
            cors_origins="https://canvas.example.com",
        )
        assert settings.app_env == AppEnvironment.PROD
