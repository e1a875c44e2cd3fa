# src/urlsafe_token/infrastructure/security/hmac_signer.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""HMAC signers (itsdangerous-compatible token format).

Synopsis:
    Concrete :class:`~urlsafe_token.domain.interfaces.signer.Signer`
    implementations. A signed value is::

        value + sep + base64url_nopad(HMAC(derived_key, value))

    and a timed value inserts a base64url big-endian UNIX timestamp before the
    signature::

        value + sep + base64url_nopad(timestamp) + sep + signature

Design:
    * The signing key is derived once at construction from secret + salt.
    * Verification recomputes the canonical encoded signature and compares it
      with :func:`hmac.compare_digest`.
    * Key rotation: sign with ``secret_key``; verify against ``secret_key``
      followed by every entry of ``fallback_secret_keys``.
    * Instances are immutable after ``__init__`` and thread-safe.

Layer:
    infrastructure/security
"""

from __future__ import annotations

import hashlib
import hmac
import time
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Final, Literal

from urlsafe_token.domain.exceptions.codec import EncodingError
from urlsafe_token.domain.exceptions.signature import (
    BadTimeSignature,
    SignatureError,
    SignatureExpired,
)
from urlsafe_token.domain.services.base64url import (
    b64decode,
    b64encode,
    bytes_to_int,
    int_to_bytes,
)

__all__ = [
    "DEFAULT_SALT",
    "Digest",
    "HmacSigner",
    "KeyDerivation",
    "TimestampSigner",
]

Digest = Literal["sha1", "sha256", "sha512"]
KeyDerivation = Literal["concat", "django-concat", "hmac", "none"]

DEFAULT_SALT: Final[str] = "itsdangerous"

_BASE64_ALPHABET: Final[frozenset[str]] = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_="
)


def _want_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else value


class HmacSigner:
    """Sign and verify strings with an HMAC over a derived key.

    Attributes:
        salt: Namespace mixed into the key so tokens minted for one purpose
            do not verify for another.
        sep: Separator between value and signature.
        key_derivation: How the signing key is derived from secret and salt.
        digest: Hash function used for key derivation and the HMAC.
    """

    def __init__(
        self,
        secret_key: str | bytes,
        salt: str | bytes = DEFAULT_SALT,
        *,
        sep: str = ".",
        key_derivation: KeyDerivation = "django-concat",
        digest: Digest = "sha1",
        fallback_secret_keys: Iterable[str | bytes] = (),
    ) -> None:
        """Initialize the signer.

        Args:
            secret_key: Current signing secret.
            salt: Purpose-specific salt.
            sep: Single separator character outside the base64url alphabet.
            key_derivation: ``concat``, ``django-concat``, ``hmac`` or ``none``.
            digest: ``sha1``, ``sha256`` or ``sha512``.
            fallback_secret_keys: Retired secrets still accepted when
                verifying, tried in order after ``secret_key``.

        Raises:
            ValueError: On an empty secret, a separator that collides with
                the signature alphabet, or an unknown digest/derivation.
        """
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        if len(sep) != 1 or sep in _BASE64_ALPHABET:
            raise ValueError(
                "sep must be a single character outside the base64url alphabet",
            )
        if digest not in ("sha1", "sha256", "sha512"):
            raise ValueError(f"unsupported digest {digest!r}")

        self.salt = _want_bytes(salt)
        self.sep = sep
        self.key_derivation = key_derivation
        self.digest = digest

        secrets = [_want_bytes(secret_key), *(_want_bytes(k) for k in fallback_secret_keys)]
        self._keys: tuple[bytes, ...] = tuple(self.derive_key(s) for s in secrets)

    # ------------------------------------------------------------------ #
    # Key material
    # ------------------------------------------------------------------ #
    def derive_key(self, secret: bytes) -> bytes:
        """Derive the HMAC key for ``secret`` using the configured scheme."""
        if self.key_derivation == "concat":
            return hashlib.new(self.digest, self.salt + secret).digest()
        if self.key_derivation == "django-concat":
            return hashlib.new(self.digest, self.salt + b"signer" + secret).digest()
        if self.key_derivation == "hmac":
            return hmac.new(secret, self.salt, self.digest).digest()
        if self.key_derivation == "none":
            return secret
        raise ValueError(f"unknown key derivation {self.key_derivation!r}")

    def _mac(self, key: bytes, value: bytes) -> bytes:
        return hmac.new(key, value, self.digest).digest()

    def get_signature(self, value: str) -> str:
        """Return the base64url signature of ``value`` under the current key."""
        return b64encode(self._mac(self._keys[0], _want_bytes(value)))

    # ------------------------------------------------------------------ #
    # Signer protocol
    # ------------------------------------------------------------------ #
    def sign(self, value: str) -> str:
        """Attach a signature to ``value``."""
        return f"{value}{self.sep}{self.get_signature(value)}"

    def verify_signature(self, value: str, signature: str) -> bool:
        """Return True if ``signature`` authenticates ``value`` under any key.

        The encoded forms are compared, so a signature whose unused trailing
        base64 bits differ from the canonical encoding is rejected.
        """
        supplied = _want_bytes(signature)
        message = _want_bytes(value)
        # Evaluate every key so timing does not reveal which one matched.
        matched = False
        for key in self._keys:
            expected = b64encode(self._mac(key, message)).encode("ascii")
            if hmac.compare_digest(supplied, expected):
                matched = True
        return matched

    def unsign(self, signed_value: str) -> str:
        """Verify and strip the signature from ``signed_value``.

        Raises:
            SignatureError: If the separator is missing or the signature
                does not match.
        """
        if self.sep not in signed_value:
            raise SignatureError(f"no {self.sep!r} found in value")

        value, signature = signed_value.rsplit(self.sep, 1)
        if self.verify_signature(value, signature):
            return value
        raise SignatureError(f"signature {signature!r} does not match")

    def validate(self, signed_value: str) -> bool:
        """Return True if ``signed_value`` carries a valid signature."""
        try:
            self.unsign(signed_value)
        except SignatureError:
            return False
        return True


class TimestampSigner(HmacSigner):
    """HMAC signer that also records, and optionally enforces, token age.

    Attributes:
        max_age: Maximum accepted age in seconds, or ``None`` to only record
            the timestamp.
    """

    def __init__(
        self,
        secret_key: str | bytes,
        salt: str | bytes = DEFAULT_SALT,
        *,
        max_age: int | None = None,
        clock: Callable[[], float] = time.time,
        sep: str = ".",
        key_derivation: KeyDerivation = "django-concat",
        digest: Digest = "sha1",
        fallback_secret_keys: Iterable[str | bytes] = (),
    ) -> None:
        super().__init__(
            secret_key,
            salt,
            sep=sep,
            key_derivation=key_derivation,
            digest=digest,
            fallback_secret_keys=fallback_secret_keys,
        )
        if max_age is not None and max_age < 0:
            raise ValueError("max_age must not be negative")
        self.max_age = max_age
        self._clock = clock

    def get_timestamp(self) -> int:
        """Return the current UNIX time from the configured clock."""
        return int(self._clock())

    def sign(self, value: str) -> str:
        timestamp = b64encode(int_to_bytes(self.get_timestamp()))
        return super().sign(f"{value}{self.sep}{timestamp}")

    def _split_timestamp(self, result: str) -> tuple[str, int]:
        if self.sep not in result:
            raise BadTimeSignature("timestamp missing")
        value, ts_text = result.rsplit(self.sep, 1)
        if not ts_text:
            raise BadTimeSignature("malformed timestamp")
        try:
            return value, bytes_to_int(b64decode(ts_text))
        except EncodingError as exc:
            raise BadTimeSignature("malformed timestamp") from exc

    @staticmethod
    def _to_datetime(ts_int: int) -> datetime | None:
        try:
            return datetime.fromtimestamp(ts_int, tz=UTC)
        except (OverflowError, OSError, ValueError):
            return None

    def unsign(self, signed_value: str) -> str:
        """Verify signature and age, returning the original value.

        Raises:
            SignatureError: If the signature does not match.
            BadTimeSignature: If the timestamp section is missing or invalid.
            SignatureExpired: If the token is older than ``max_age`` or dated
                in the future.
        """
        value, ts_int = self._split_timestamp(super().unsign(signed_value))

        if self.max_age is not None:
            age = self.get_timestamp() - ts_int
            if age > self.max_age:
                raise SignatureExpired(
                    f"signature age {age} > {self.max_age} seconds",
                    date_signed=self._to_datetime(ts_int),
                    details={"age": age, "max_age": self.max_age},
                )
            if age < 0:
                raise SignatureExpired(
                    f"signature age {age} < 0 seconds",
                    date_signed=self._to_datetime(ts_int),
                    details={"age": age},
                )
        return value

    def signed_at(self, signed_value: str) -> datetime:
        """Return when ``signed_value`` was signed, ignoring ``max_age``.

        Raises:
            SignatureError: If the signature does not match.
            BadTimeSignature: If the timestamp section is missing, invalid,
                or out of the representable range.
        """
        _, ts_int = self._split_timestamp(super().unsign(signed_value))
        signed = self._to_datetime(ts_int)
        if signed is None:
            raise BadTimeSignature("timestamp out of range")
        return signed
