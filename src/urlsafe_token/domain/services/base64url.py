# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Strict unpadded base64url transcoding.

Padding policy: never emitted, never accepted. ``b64decode`` rejects any
character outside ``[A-Za-z0-9_-]`` (including ``=``, ``+``, ``/`` and
whitespace) and lengths that no unpadded encoding can produce.
"""

from __future__ import annotations

import base64
import binascii
import re

from urlsafe_token.domain.exceptions.codec import EncodingError

__all__ = ["b64encode", "b64decode", "int_to_bytes", "bytes_to_int"]

_ALPHABET_RE = re.compile(r"[A-Za-z0-9_-]*")


def b64encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64decode(text: str) -> bytes:
    """Decode unpadded base64url text.

    Args:
        text: Encoded string.

    Returns:
        Decoded bytes.

    Raises:
        EncodingError: On an invalid character or an impossible length.
    """
    if _ALPHABET_RE.fullmatch(text) is None:
        raise EncodingError(
            "invalid base64url character",
            details={"length": len(text)},
        )
    # A single trailing sextet cannot encode a whole byte.
    if len(text) % 4 == 1:
        raise EncodingError(
            "invalid base64url length",
            details={"length": len(text)},
        )

    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise EncodingError("invalid base64url data", details={"length": len(text)}) from exc


def int_to_bytes(num: int) -> bytes:
    """Big-endian, minimal-length encoding of a non-negative integer."""
    return num.to_bytes((num.bit_length() + 7) // 8 or 1, "big")


def bytes_to_int(data: bytes) -> int:
    return int.from_bytes(data, "big")
