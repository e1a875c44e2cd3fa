"""Token exception taxonomy.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from .base import TokenError
from .codec import (
    CodecError,
    CompressionError,
    DecompressionError,
    DeserializationError,
    EmptyInputError,
    EncodingError,
    SerializationError,
)
from .signature import BadTimeSignature, SignatureError, SignatureExpired

__all__ = [
    "BadTimeSignature",
    "CodecError",
    "CompressionError",
    "DecompressionError",
    "DeserializationError",
    "EmptyInputError",
    "EncodingError",
    "SerializationError",
    "SignatureError",
    "SignatureExpired",
    "TokenError",
]
