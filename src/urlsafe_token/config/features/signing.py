# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Signing Feature Settings (Infrastructure-facing view)

Summary:
    A minimal, typed projection of the signing-related settings for the
    signer factory. Keeps infrastructure decoupled from the full Settings
    surface.

Notes:
    • No logging/printing of secrets.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from urlsafe_token.config.settings import Settings

__all__ = ["SigningSettings", "signing_settings_from"]


class SigningSettings(BaseModel):
    """Narrow view of signing configuration.

    Attributes:
        secret_key: Current signing secret.
        fallback_secret_keys: Retired secrets accepted for verification.
        salt: Purpose-specific salt.
        digest: HMAC hash function.
        key_derivation: Key derivation scheme.
        max_age_seconds: Token lifetime; ``None`` disables timestamping.
    """

    model_config = ConfigDict(frozen=True)

    secret_key: SecretStr
    fallback_secret_keys: tuple[SecretStr, ...] = ()
    salt: str = "itsdangerous"
    digest: Literal["sha1", "sha256", "sha512"] = "sha1"
    key_derivation: Literal["concat", "django-concat", "hmac", "none"] = "django-concat"
    max_age_seconds: int | None = Field(default=None, ge=1)

    @property
    def timed(self) -> bool:
        """True when tokens carry and enforce a timestamp."""
        return self.max_age_seconds is not None


def signing_settings_from(settings: Settings) -> SigningSettings:
    """Project application settings onto :class:`SigningSettings`."""
    return SigningSettings(
        secret_key=settings.secret_key,
        fallback_secret_keys=tuple(settings.fallback_secret_keys),
        salt=settings.salt,
        digest=settings.digest,
        key_derivation=settings.key_derivation,
        max_age_seconds=settings.max_age_seconds,
    )
