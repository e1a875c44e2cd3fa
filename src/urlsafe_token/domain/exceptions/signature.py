# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""
Signature Domain Exceptions

Purpose:
    Errors raised by Signer implementations when a token cannot be
    authenticated. The serializer surfaces them unchanged and never decodes
    the payload of a token that raised one of these.

Layer: domain/exceptions
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from .base import TokenError


class SignatureError(TokenError):
    """Signature does not match, or the signed structure is malformed."""

    code = "TOKEN_SIGNATURE_INVALID"
    stage = "verify"


class BadTimeSignature(SignatureError):
    """Timestamp section of a timed token is missing or malformed."""

    code = "TOKEN_TIMESTAMP_INVALID"


class SignatureExpired(BadTimeSignature):
    """Signature is valid but older than ``max_age`` (or dated in the future).

    Attributes:
        date_signed: When the token was signed, if it could be decoded.
    """

    code = "TOKEN_SIGNATURE_EXPIRED"

    def __init__(
        self,
        message: str = "",
        *,
        date_signed: datetime | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.date_signed = date_signed
