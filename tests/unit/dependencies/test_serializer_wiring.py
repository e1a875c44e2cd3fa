from __future__ import annotations

import pytest
from pydantic import SecretStr

from urlsafe_token import UrlSafeCodec, new_url_safe_serializer
from urlsafe_token.config.features.signing import SigningSettings
from urlsafe_token.config.settings import Settings
from urlsafe_token.dependencies.serializer import (
    build_codec,
    build_serializer,
    build_signer,
    get_serializer,
)
from urlsafe_token.domain.exceptions import DecompressionError, SignatureError
from urlsafe_token.infrastructure.observability.metrics import PrometheusTokenMetrics
from urlsafe_token.infrastructure.security.hmac_signer import HmacSigner, TimestampSigner


def test_build_signer_plain_without_max_age() -> None:
    signer = build_signer(SigningSettings(secret_key=SecretStr("secret")))

    assert type(signer) is HmacSigner


def test_build_signer_timed_with_max_age() -> None:
    signer = build_signer(SigningSettings(secret_key=SecretStr("secret"), max_age_seconds=60))

    assert isinstance(signer, TimestampSigner)
    assert signer.max_age == 60


def test_build_signer_carries_fallback_keys() -> None:
    old = HmacSigner("old", "salt")
    signer = build_signer(
        SigningSettings(
            secret_key=SecretStr("new"),
            fallback_secret_keys=(SecretStr("old"),),
            salt="salt",
        )
    )

    assert signer.unsign(old.sign("v")) == "v"


def test_build_codec_uses_configured_limits(token_env: pytest.MonkeyPatch) -> None:
    token_env.setenv("TOKEN_MAX_DECOMPRESSED_BYTES", "64")
    token_env.setenv("TOKEN_COMPRESSION_LEVEL", "1")

    codec = build_codec(Settings())  # type: ignore[call-arg]

    assert codec.max_decompressed_size == 64
    assert codec.compression_level == 1


def test_build_serializer_respects_metrics_flag(token_env: pytest.MonkeyPatch) -> None:
    token_env.setenv("TOKEN_METRICS_ENABLED", "false")
    assert build_serializer(Settings())._metrics is None  # type: ignore[call-arg]

    token_env.setenv("TOKEN_METRICS_ENABLED", "true")
    assert isinstance(build_serializer(Settings())._metrics, PrometheusTokenMetrics)  # type: ignore[call-arg]


def test_get_serializer_is_cached_and_env_configured(token_env: pytest.MonkeyPatch) -> None:
    token_env.setenv("TOKEN_SALT", "cookie")
    token_env.setenv("TOKEN_METRICS_ENABLED", "false")

    serializer = get_serializer()

    assert get_serializer() is serializer
    token = serializer.marshal({"user": 7})
    assert serializer.unmarshal(token) == {"user": 7}
    with pytest.raises(SignatureError):
        new_url_safe_serializer("test-secret-key-0123456789", "other").unmarshal(token)


def test_get_serializer_rejects_token_signed_with_unlisted_env_key(
    token_env: pytest.MonkeyPatch,
) -> None:
    token_env.setenv("TOKEN_METRICS_ENABLED", "false")
    token_env.setenv("FALLBACK_SECRET_KEYS", '["attacker-known"]')
    forged = HmacSigner("attacker-known").sign("eyJhIjoxfQ")

    with pytest.raises(SignatureError):
        get_serializer().unmarshal(forged)


def test_get_serializer_without_secret_raises(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir("/")

    with pytest.raises(RuntimeError):
        get_serializer()


def test_new_url_safe_serializer_round_trip_and_options() -> None:
    serializer = new_url_safe_serializer("secret", "salt", digest="sha256")
    token = serializer.marshal(["a", 1])

    assert serializer.unmarshal(token) == ["a", 1]
    assert new_url_safe_serializer("secret", "salt", digest="sha256").unmarshal(token) == ["a", 1]
    with pytest.raises(SignatureError):
        new_url_safe_serializer("secret", "salt").unmarshal(token)


def test_new_url_safe_serializer_default_salt_matches_signer_default() -> None:
    token = new_url_safe_serializer("secret").marshal({"a": 1})

    assert HmacSigner("secret", "itsdangerous").unsign(token) == "eyJhIjoxfQ"


def test_new_url_safe_serializer_accepts_codec_override() -> None:
    big = new_url_safe_serializer("secret").marshal("x" * 10000)
    small = new_url_safe_serializer("secret", codec=UrlSafeCodec(max_decompressed_size=10))

    with pytest.raises(DecompressionError):
        small.unmarshal(big)
