"""
urlsafe-token

Tamper-evident, compressed, URL-safe tokens for JSON-representable state.

Typical usage:
    from urlsafe_token import new_url_safe_serializer

    serializer = new_url_safe_serializer("secret", "session")
    token = serializer.marshal({"user_id": 42})
    value = serializer.unmarshal(token)
"""

from __future__ import annotations

__version__ = "0.1.0"

from urlsafe_token.application.services.url_safe_serializer import URLSafeSerializer
from urlsafe_token.dependencies.serializer import get_serializer, new_url_safe_serializer
from urlsafe_token.domain.exceptions import (
    BadTimeSignature,
    CodecError,
    CompressionError,
    DecompressionError,
    DeserializationError,
    EmptyInputError,
    EncodingError,
    SerializationError,
    SignatureError,
    SignatureExpired,
    TokenError,
)
from urlsafe_token.domain.interfaces.signer import Signer
from urlsafe_token.domain.services.url_safe_codec import (
    COMPRESSION_MARKER,
    UrlSafeCodec,
    decode,
    encode,
)
from urlsafe_token.domain.value_objects.json_value import JsonValue
from urlsafe_token.infrastructure.security.hmac_signer import HmacSigner, TimestampSigner

__all__ = [
    "BadTimeSignature",
    "COMPRESSION_MARKER",
    "CodecError",
    "CompressionError",
    "DecompressionError",
    "DeserializationError",
    "EmptyInputError",
    "EncodingError",
    "HmacSigner",
    "JsonValue",
    "SerializationError",
    "SignatureError",
    "SignatureExpired",
    "Signer",
    "TimestampSigner",
    "TokenError",
    "URLSafeSerializer",
    "UrlSafeCodec",
    "decode",
    "encode",
    "get_serializer",
    "new_url_safe_serializer",
]
