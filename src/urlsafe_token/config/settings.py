# src/urlsafe_token/config/settings.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Token Configuration (Pydantic Settings, v2)

Summary:
    Typed, validated configuration for the token serializer: secrets, salt,
    MAC scheme, expiry and codec limits. Only the dependency wiring should
    read process environment at runtime; everything else receives the
    resolved objects.

Design:
    - Pydantic v2 BaseSettings with `extra='forbid'` to catch unknown env.
    - Explicit field declarations with constrained types and ranges.
    - Secrets held as `SecretStr` and never logged.
    - Singleton accessor `get_settings()` with LRU cache.
"""

from __future__ import annotations

import logging
from enum import Enum
from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, SettingsError

logger = logging.getLogger(__name__)

#: Minimum secret length accepted in production-like environments.
MIN_PRODUCTION_SECRET_LENGTH = 16


class Environment(str, Enum):
    """Logical deployment environment."""

    DEVELOPMENT = "development"
    TEST = "test"
    CI = "ci"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Typed configuration for the token serializer."""

    # ---------------------------
    # Core environment
    # ---------------------------
    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Logical deployment environment.",
        validation_alias="ENVIRONMENT",
    )

    # ---------------------------
    # Signing
    # ---------------------------
    secret_key: SecretStr = Field(
        ...,
        description="Current HMAC signing secret.",
        validation_alias="TOKEN_SECRET_KEY",
    )

    # Raw env for rotation; exposed parsed as the `fallback_secret_keys` property.
    fallback_secret_keys_raw: str | None = Field(
        default=None,
        description="Comma-separated retired secrets still accepted for verification.",
        validation_alias="TOKEN_FALLBACK_SECRET_KEYS",
    )

    salt: str = Field(
        default="itsdangerous",
        min_length=1,
        description="Purpose-specific salt mixed into the signing key.",
        validation_alias="TOKEN_SALT",
    )

    digest: Literal["sha1", "sha256", "sha512"] = Field(
        default="sha1",
        description="Hash function used for key derivation and HMAC.",
        validation_alias="TOKEN_DIGEST",
    )

    key_derivation: Literal["concat", "django-concat", "hmac", "none"] = Field(
        default="django-concat",
        description="How the signing key is derived from secret and salt.",
        validation_alias="TOKEN_KEY_DERIVATION",
    )

    max_age_seconds: int | None = Field(
        default=None,
        ge=1,
        description="If set, tokens are timestamped and rejected once older than this.",
        validation_alias="TOKEN_MAX_AGE_SECONDS",
    )

    # ---------------------------
    # Codec
    # ---------------------------
    max_decompressed_bytes: int = Field(
        default=1024 * 1024,
        ge=1,
        le=64 * 1024 * 1024,
        description="Ceiling on inflated payload size when decoding.",
        validation_alias="TOKEN_MAX_DECOMPRESSED_BYTES",
    )

    compression_level: int = Field(
        default=6,
        ge=-1,
        le=9,
        description="zlib compression level used when encoding.",
        validation_alias="TOKEN_COMPRESSION_LEVEL",
    )

    # ---------------------------
    # Logging / observability
    # ---------------------------
    log_level: str | None = Field(
        default=None,
        description="Override log level (e.g., 'DEBUG', 'INFO'). If not set, defaults are used.",
        validation_alias="LOG_LEVEL",
    )

    metrics_enabled: bool = Field(
        default=True,
        description="Record Prometheus metrics for marshal/unmarshal.",
        validation_alias="TOKEN_METRICS_ENABLED",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
        case_sensitive=False,
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _validate_secret(self) -> Settings:
        """Validate secret strength.

        Returns:
            Settings: The validated settings instance.

        Raises:
            ValueError: If the secret is empty, or too short for a
                production-like environment.
        """
        secret = self.secret_key.get_secret_value()
        if not secret:
            raise ValueError("TOKEN_SECRET_KEY must not be empty.")
        if self.environment in (
            Environment.STAGING,
            Environment.PRODUCTION,
        ) and len(secret) < MIN_PRODUCTION_SECRET_LENGTH:
            raise ValueError(
                "TOKEN_SECRET_KEY must be at least "
                f"{MIN_PRODUCTION_SECRET_LENGTH} characters in staging/production.",
            )
        return self

    @property
    def fallback_secret_keys(self) -> list[SecretStr]:
        """Retired secrets parsed from `TOKEN_FALLBACK_SECRET_KEYS`.

        Derived on access so no other settings source can populate it.
        """
        raw = self.fallback_secret_keys_raw or ""
        return [SecretStr(e.strip()) for e in raw.split(",") if e.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance.

    Returns:
        Settings: Validated settings.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    try:
        settings = Settings()  # type: ignore[call-arg]
    except (ValidationError, SettingsError) as exc:
        logger.exception("Invalid token configuration")
        raise RuntimeError(f"Invalid configuration: {exc}") from exc

    logger.info(
        "Settings initialized",
        extra={
            "extra": {
                "environment": settings.environment.value,
                "salt_set": settings.salt != "itsdangerous",
                "fallback_key_count": len(settings.fallback_secret_keys),
                "digest": settings.digest,
                "key_derivation": settings.key_derivation,
                "max_age_seconds": settings.max_age_seconds,
                "max_decompressed_bytes": settings.max_decompressed_bytes,
                "compression_level": settings.compression_level,
                "metrics_enabled": settings.metrics_enabled,
            }
        },
    )
    return settings
