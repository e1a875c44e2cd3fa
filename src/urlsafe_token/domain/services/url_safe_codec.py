# src/urlsafe_token/domain/services/url_safe_codec.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""URL-safe framing codec.

Synopsis:
    Pure transform between a JSON-representable value and a compact,
    URL-safe framed string. The codec knows nothing about signatures; the
    serializer layers a :class:`~urlsafe_token.domain.interfaces.signer.Signer`
    on top.

Framing:
    ``["."] base64url_nopad(payload)`` where ``payload`` is either the
    compact JSON bytes of the value, or their zlib-compressed form. The
    leading ``.`` is present iff the compressed form was used, and the
    compressed form is used iff it is strictly smaller than the raw JSON
    (ties keep the raw bytes).

Decoding safety:
    * Empty input is rejected before any indexing.
    * Inflate output is bounded by ``max_decompressed_size``; a stream that
      would exceed it fails instead of allocating.
    * Every failure is a :class:`~urlsafe_token.domain.exceptions.CodecError`
      subclass naming the stage that failed, with the cause chained.

Layer:
    domain/services
"""

from __future__ import annotations

import json
import zlib
from dataclasses import dataclass
from typing import Any, Final

from urlsafe_token.domain.exceptions.codec import (
    CompressionError,
    DecompressionError,
    DeserializationError,
    EmptyInputError,
    SerializationError,
)
from urlsafe_token.domain.services.base64url import b64decode, b64encode
from urlsafe_token.domain.value_objects.json_value import JsonValue

__all__ = [
    "COMPRESSION_MARKER",
    "DEFAULT_COMPRESSION_LEVEL",
    "DEFAULT_MAX_DECOMPRESSED_SIZE",
    "UrlSafeCodec",
    "decode",
    "encode",
]

#: Leading character recording that the payload was compressed.
COMPRESSION_MARKER: Final[str] = "."

#: Ceiling on inflated payload size (bytes).
DEFAULT_MAX_DECOMPRESSED_SIZE: Final[int] = 1024 * 1024

DEFAULT_COMPRESSION_LEVEL: Final[int] = 6


def _reject_constant(name: str) -> Any:
    # json accepts NaN/Infinity literals by default; JSON proper does not.
    raise ValueError(f"non-standard JSON constant {name!r}")


@dataclass(frozen=True, slots=True)
class UrlSafeCodec:
    """Stateless encoder/decoder for framed strings.

    Attributes:
        max_decompressed_size: Largest inflated payload accepted by
            :meth:`decode`, in bytes.
        compression_level: zlib level used by :meth:`encode` (``-1``..``9``).
    """

    max_decompressed_size: int = DEFAULT_MAX_DECOMPRESSED_SIZE
    compression_level: int = DEFAULT_COMPRESSION_LEVEL

    def __post_init__(self) -> None:
        if self.max_decompressed_size < 1:
            raise ValueError("max_decompressed_size must be positive")
        if not -1 <= self.compression_level <= 9:
            raise ValueError("compression_level must be between -1 and 9")

    # ------------------------------------------------------------------ #
    # Encode
    # ------------------------------------------------------------------ #
    def encode(self, value: JsonValue) -> str:
        """Serialize ``value`` into a framed string.

        Args:
            value: JSON-representable value.

        Returns:
            Unpadded base64url text, prefixed with ``.`` when compressed.

        Raises:
            SerializationError: If ``value`` is not JSON-representable.
            CompressionError: If the compressor fails.
        """
        raw = self._serialize(value)
        payload, compressed = self._maybe_compress(raw)
        framed = b64encode(payload)
        return COMPRESSION_MARKER + framed if compressed else framed

    def is_compressed(self, framed: str) -> bool:
        """Return True if ``framed`` carries the compression marker."""
        return framed.startswith(COMPRESSION_MARKER)

    @staticmethod
    def _serialize(value: Any) -> bytes:
        try:
            text = json.dumps(
                value,
                separators=(",", ":"),
                sort_keys=True,
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError, RecursionError) as exc:
            raise SerializationError(
                "value is not JSON-representable",
                details={"reason": type(exc).__name__},
            ) from exc
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as exc:
            # Lone surrogates survive json.dumps with ensure_ascii=False.
            raise SerializationError(
                "value contains text that is not valid UTF-8",
                details={"reason": type(exc).__name__},
            ) from exc

    def _maybe_compress(self, raw: bytes) -> tuple[bytes, bool]:
        try:
            candidate = zlib.compress(raw, self.compression_level)
        except zlib.error as exc:
            raise CompressionError("compressor failed", details={"size": len(raw)}) from exc

        if len(candidate) < len(raw):
            return candidate, True
        return raw, False

    # ------------------------------------------------------------------ #
    # Decode
    # ------------------------------------------------------------------ #
    def decode(self, framed: str) -> JsonValue:
        """Parse a framed string back into a value.

        Args:
            framed: Output of :meth:`encode` (already stripped of any
                signature).

        Returns:
            The decoded JSON value.

        Raises:
            EmptyInputError: If ``framed`` is empty.
            EncodingError: If the base64url body is invalid.
            DecompressionError: If inflate fails or exceeds the ceiling.
            DeserializationError: If the bytes are not a JSON document.
        """
        if not framed:
            raise EmptyInputError("framed payload is empty")

        decompress = framed.startswith(COMPRESSION_MARKER)
        body = framed[len(COMPRESSION_MARKER) :] if decompress else framed

        payload = b64decode(body)
        if decompress:
            payload = self._inflate(payload)
        return self._deserialize(payload)

    def _inflate(self, data: bytes) -> bytes:
        limit = self.max_decompressed_size
        inflater = zlib.decompressobj()
        try:
            out = inflater.decompress(data, limit + 1)
        except zlib.error as exc:
            raise DecompressionError(
                "payload is not a valid zlib stream",
                details={"size": len(data)},
            ) from exc

        if len(out) > limit:
            raise DecompressionError(
                "inflated payload exceeds size limit",
                details={"limit": limit},
            )
        if not inflater.eof:
            raise DecompressionError(
                "payload zlib stream is truncated",
                details={"size": len(data)},
            )
        return out

    @staticmethod
    def _deserialize(payload: bytes) -> JsonValue:
        try:
            text = payload.decode("utf-8")
            value: JsonValue = json.loads(text, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueErrors.
            raise DeserializationError(
                "payload is not valid JSON",
                details={"reason": type(exc).__name__, "size": len(payload)},
            ) from exc
        return value


_DEFAULT_CODEC: Final[UrlSafeCodec] = UrlSafeCodec()


def encode(value: JsonValue) -> str:
    """Encode ``value`` with the default codec settings."""
    return _DEFAULT_CODEC.encode(value)


def decode(framed: str) -> JsonValue:
    """Decode ``framed`` with the default codec settings."""
    return _DEFAULT_CODEC.decode(framed)
