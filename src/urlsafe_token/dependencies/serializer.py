# src/urlsafe_token/dependencies/serializer.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Serializer wiring.

This module owns construction of the process-wide serializer. It is
intentionally thin: configuration is read from Settings, and the actual work
is delegated to the codec, signer and metrics modules.

Public surface:
    * :func:`build_signer` / :func:`build_codec` / :func:`build_serializer`
      for explicit construction from a :class:`Settings` instance.
    * :func:`get_serializer` for a cached, env-configured singleton.
    * :func:`new_url_safe_serializer` for callers that hold a secret and salt
      directly.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from urlsafe_token.application.services.url_safe_serializer import URLSafeSerializer
from urlsafe_token.config.features.signing import SigningSettings, signing_settings_from
from urlsafe_token.config.settings import Settings, get_settings
from urlsafe_token.domain.services.url_safe_codec import UrlSafeCodec
from urlsafe_token.infrastructure.logging.logger import configure_root_logging, get_json_logger
from urlsafe_token.infrastructure.observability.metrics import PrometheusTokenMetrics
from urlsafe_token.infrastructure.security.hmac_signer import (
    DEFAULT_SALT,
    HmacSigner,
    TimestampSigner,
)

logger = get_json_logger(__name__)

__all__ = [
    "build_codec",
    "build_serializer",
    "build_signer",
    "get_serializer",
    "new_url_safe_serializer",
]


def build_signer(signing: SigningSettings) -> HmacSigner:
    """Create the signer described by ``signing``.

    Returns:
        A :class:`TimestampSigner` when ``max_age_seconds`` is set, otherwise
        a plain :class:`HmacSigner`.
    """
    common: dict[str, Any] = {
        "digest": signing.digest,
        "key_derivation": signing.key_derivation,
        "fallback_secret_keys": [k.get_secret_value() for k in signing.fallback_secret_keys],
    }
    secret = signing.secret_key.get_secret_value()
    if signing.timed:
        return TimestampSigner(secret, signing.salt, max_age=signing.max_age_seconds, **common)
    return HmacSigner(secret, signing.salt, **common)


def build_codec(settings: Settings) -> UrlSafeCodec:
    return UrlSafeCodec(
        max_decompressed_size=settings.max_decompressed_bytes,
        compression_level=settings.compression_level,
    )


def build_serializer(settings: Settings) -> URLSafeSerializer:
    """Assemble a serializer from validated settings.

    Args:
        settings: Resolved settings.

    Returns:
        Serializer wired with signer, codec and (optionally) metrics.
    """
    signing = signing_settings_from(settings)
    serializer = URLSafeSerializer(
        build_signer(signing),
        codec=build_codec(settings),
        metrics=PrometheusTokenMetrics() if settings.metrics_enabled else None,
    )
    logger.info(
        "serializer.built",
        extra={
            "extra": {
                "signer": type(serializer.signer).__name__,
                "digest": signing.digest,
                "timed": signing.timed,
                "metrics_enabled": settings.metrics_enabled,
            }
        },
    )
    return serializer


@lru_cache(maxsize=1)
def get_serializer() -> URLSafeSerializer:
    """Return the cached serializer configured from the environment.

    Raises:
        RuntimeError: If configuration is invalid.
    """
    settings = get_settings()
    configure_root_logging(settings.log_level)
    return build_serializer(settings)


def new_url_safe_serializer(
    secret_key: str | bytes,
    salt: str | bytes = DEFAULT_SALT,
    *,
    codec: UrlSafeCodec | None = None,
    **signer_kwargs: Any,
) -> URLSafeSerializer:
    """Build a serializer over an :class:`HmacSigner` for ``secret_key``/``salt``.

    Args:
        secret_key: Signing secret.
        salt: Purpose-specific salt.
        codec: Optional codec override.
        **signer_kwargs: Forwarded to :class:`HmacSigner`.

    Returns:
        A ready-to-use serializer without metrics.
    """
    return URLSafeSerializer(HmacSigner(secret_key, salt, **signer_kwargs), codec=codec)
