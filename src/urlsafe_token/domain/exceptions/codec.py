# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Codec Domain Exceptions

Purpose:
    One exception per step of the encode/decode pipeline. Each is raised with
    the underlying cause chained (``raise ... from exc``) so diagnostics can
    inspect it while callers only need the class.

Layer: domain/exceptions
"""

from __future__ import annotations

from .base import TokenError


class CodecError(TokenError):
    """Any failure of the framing codec (as opposed to signature checks)."""

    code = "TOKEN_CODEC_ERROR"


class SerializationError(CodecError):
    """Value is not JSON-representable (cycle, unsupported type, NaN)."""

    code = "TOKEN_SERIALIZATION_FAILED"
    stage = "serialize"


class CompressionError(CodecError):
    """The compressor failed on in-memory input."""

    code = "TOKEN_COMPRESSION_FAILED"
    stage = "compress"


class EmptyInputError(CodecError):
    """Framed string is empty."""

    code = "TOKEN_EMPTY_INPUT"
    stage = "frame"


class EncodingError(CodecError):
    """Framed string is not valid unpadded base64url."""

    code = "TOKEN_ENCODING_INVALID"
    stage = "base64"


class DecompressionError(CodecError):
    """Inflate failed: corrupt, truncated, or larger than the size ceiling."""

    code = "TOKEN_DECOMPRESSION_FAILED"
    stage = "inflate"


class DeserializationError(CodecError):
    """Decoded bytes are not a valid JSON document."""

    code = "TOKEN_DESERIALIZATION_FAILED"
    stage = "deserialize"
