from __future__ import annotations

import base64
import hashlib
import hmac

import pytest

from urlsafe_token.domain.exceptions import SignatureError
from urlsafe_token.domain.interfaces.signer import Signer
from urlsafe_token.infrastructure.security.hmac_signer import HmacSigner


def _expected_signature(secret: bytes, salt: bytes, value: bytes) -> str:
    key = hashlib.sha1(salt + b"signer" + secret).digest()
    mac = hmac.new(key, value, hashlib.sha1).digest()
    return base64.urlsafe_b64encode(mac).rstrip(b"=").decode()


def test_signer_satisfies_protocol() -> None:
    assert isinstance(HmacSigner("secret"), Signer)


def test_sign_matches_django_concat_sha1_format() -> None:
    signer = HmacSigner("secret-key", "itsdangerous")

    token = signer.sign("hello")

    assert token == "hello." + _expected_signature(b"secret-key", b"itsdangerous", b"hello")


def test_sign_is_deterministic_and_unsign_round_trips() -> None:
    signer = HmacSigner("secret", "salt")

    assert signer.sign("payload") == signer.sign("payload")
    assert signer.unsign(signer.sign("payload")) == "payload"


def test_unsign_handles_values_containing_separator() -> None:
    signer = HmacSigner("secret")

    assert signer.unsign(signer.sign(".eJw.rest")) == ".eJw.rest"
    assert signer.unsign(signer.sign("")) == ""


def test_missing_separator_raises_signature_error() -> None:
    with pytest.raises(SignatureError, match="no '.' found"):
        HmacSigner("secret").unsign("no-separator-here")


@pytest.mark.parametrize("position", [0, 3, -1, -5])
def test_any_single_character_flip_is_detected(position: int) -> None:
    signer = HmacSigner("secret", "salt")
    token = signer.sign("eyJhIjoxfQ")
    chars = list(token)
    chars[position] = "A" if chars[position] != "A" else "B"

    with pytest.raises(SignatureError):
        signer.unsign("".join(chars))


def test_non_canonical_trailing_bits_are_rejected() -> None:
    signer = HmacSigner("secret", "salt")
    token = signer.sign("value")
    value, sig = token.rsplit(".", 1)
    alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"
    # A 20-byte SHA-1 MAC leaves two unused low bits in the last character.
    last = alphabet.index(sig[-1])
    twin = alphabet[last ^ 0b01]
    forged = f"{value}.{sig[:-1]}{twin}"

    assert base64.urlsafe_b64decode(forged.rsplit(".", 1)[1] + "=") == base64.urlsafe_b64decode(
        sig + "="
    )
    with pytest.raises(SignatureError):
        signer.unsign(forged)


def test_different_salt_or_secret_does_not_verify() -> None:
    token = HmacSigner("secret", "salt-a").sign("value")

    with pytest.raises(SignatureError):
        HmacSigner("secret", "salt-b").unsign(token)
    with pytest.raises(SignatureError):
        HmacSigner("other", "salt-a").unsign(token)


def test_non_ascii_signature_is_rejected_not_crashing() -> None:
    with pytest.raises(SignatureError):
        HmacSigner("secret").unsign("value.sïgnature")


@pytest.mark.parametrize("derivation", ["concat", "django-concat", "hmac", "none"])
@pytest.mark.parametrize("digest", ["sha1", "sha256", "sha512"])
def test_all_schemes_round_trip(derivation: str, digest: str) -> None:
    signer = HmacSigner("secret", "salt", key_derivation=derivation, digest=digest)  # type: ignore[arg-type]

    assert signer.unsign(signer.sign("value")) == "value"


def test_key_derivations_produce_distinct_signatures() -> None:
    signatures = {
        HmacSigner("secret", "salt", key_derivation=d).get_signature("value")  # type: ignore[arg-type]
        for d in ("concat", "django-concat", "hmac", "none")
    }

    assert len(signatures) == 4


def test_fallback_keys_verify_but_never_sign() -> None:
    old = HmacSigner("old-secret", "salt")
    rotated = HmacSigner("new-secret", "salt", fallback_secret_keys=["old-secret"])

    assert rotated.unsign(old.sign("value")) == "value"
    assert rotated.sign("value") == HmacSigner("new-secret", "salt").sign("value")
    with pytest.raises(SignatureError):
        old.unsign(rotated.sign("value"))


def test_validate_reports_boolean() -> None:
    signer = HmacSigner("secret")

    assert signer.validate(signer.sign("x")) is True
    assert signer.validate("x.bogus") is False


def test_bytes_secret_and_salt_match_str_equivalents() -> None:
    assert HmacSigner(b"secret", b"salt").sign("v") == HmacSigner("secret", "salt").sign("v")


@pytest.mark.parametrize(
    "kwargs",
    [
        {"secret_key": ""},
        {"secret_key": "s", "sep": "-"},
        {"secret_key": "s", "sep": "A"},
        {"secret_key": "s", "sep": ".."},
        {"secret_key": "s", "digest": "md5"},
        {"secret_key": "s", "key_derivation": "bogus"},
    ],
)
def test_invalid_configuration_raises_value_error(kwargs: dict[str, str]) -> None:
    with pytest.raises(ValueError):
        HmacSigner(**kwargs)  # type: ignore[arg-type]


def test_custom_separator_is_used() -> None:
    signer = HmacSigner("secret", sep="~")

    token = signer.sign("a.b")

    assert token.startswith("a.b~")
    assert signer.unsign(token) == "a.b"
