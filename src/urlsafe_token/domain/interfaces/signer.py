# src/urlsafe_token/domain/interfaces/signer.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Domain Interface: Signer.

Synopsis:
    Message-authentication capability consumed by the URL-safe serializer.
    Keeping it a Protocol lets callers swap MAC schemes (HMAC-SHA1,
    HMAC-SHA256, timed tokens, external KMS) without touching the codec.

Contract:
    * ``sign`` is deterministic for a fixed secret/salt and total for any
      ``str`` input.
    * ``unsign`` raises :class:`~urlsafe_token.domain.exceptions.SignatureError`
      (or a subclass) on any mismatch, truncation, or malformed separator.
    * Signature comparison runs in constant time with respect to
      secret-dependent data.
    * Instances are immutable after construction and safe to share across
      threads.

Layer:
    domain/interfaces
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Signer(Protocol):
    """Sign strings and verify/strip signatures."""

    def sign(self, value: str) -> str:
        """Return ``value`` with signature material attached.

        Args:
            value: Framed payload string.

        Returns:
            Signed token.
        """
        ...

    def unsign(self, signed_value: str) -> str:
        """Verify ``signed_value`` and return the original payload string.

        Args:
            signed_value: Token previously produced by :meth:`sign`.

        Returns:
            The payload string that was signed.

        Raises:
            SignatureError: If the token fails verification.
        """
        ...
