# tests/conftest.py
from __future__ import annotations

from collections.abc import Generator

import pytest

from urlsafe_token.application.services.url_safe_serializer import URLSafeSerializer
from urlsafe_token.config.settings import get_settings
from urlsafe_token.dependencies.serializer import get_serializer
from urlsafe_token.domain.services.url_safe_codec import UrlSafeCodec
from urlsafe_token.infrastructure.security.hmac_signer import HmacSigner

TEST_SECRET = "test-secret-key-0123456789"
TEST_SALT = "test-salt"

_TOKEN_ENV_KEYS = (
    "ENVIRONMENT",
    "TOKEN_SECRET_KEY",
    "TOKEN_FALLBACK_SECRET_KEYS",
    "TOKEN_SALT",
    "TOKEN_DIGEST",
    "TOKEN_KEY_DERIVATION",
    "TOKEN_MAX_AGE_SECONDS",
    "TOKEN_MAX_DECOMPRESSED_BYTES",
    "TOKEN_COMPRESSION_LEVEL",
    "TOKEN_METRICS_ENABLED",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _isolated_token_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test from a clean token environment and empty caches."""
    for key in _TOKEN_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    get_settings.cache_clear()
    get_serializer.cache_clear()
    yield
    get_settings.cache_clear()
    get_serializer.cache_clear()


@pytest.fixture
def signer() -> HmacSigner:
    """Deterministic HMAC signer shared by serializer tests."""
    return HmacSigner(TEST_SECRET, TEST_SALT)


@pytest.fixture
def codec() -> UrlSafeCodec:
    return UrlSafeCodec()


@pytest.fixture
def serializer(signer: HmacSigner, codec: UrlSafeCodec) -> URLSafeSerializer:
    """Serializer over the test signer, without metrics."""
    return URLSafeSerializer(signer, codec=codec)


@pytest.fixture
def token_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Minimal environment for `Settings()` to validate."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("TOKEN_SECRET_KEY", TEST_SECRET)
    return monkeypatch
