# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Service: URL-safe Serializer.

Purpose:
    Compose the framing codec with a Signer to turn JSON-representable values
    into signed, URL-safe tokens and back.

Behavior:
    * ``marshal``: encode with the codec, then sign. Codec errors propagate
      unchanged.
    * ``unmarshal``: verify with the signer first. A failed verification
      raises the signer's ``SignatureError`` and the payload is never
      decoded. A verified payload is decoded and any codec error propagates
      unchanged.

Layer:
    application/services
"""

from __future__ import annotations

import logging
import time

from urlsafe_token.application.interfaces.token_metrics_port import TokenMetricsPort
from urlsafe_token.domain.exceptions.base import TokenError
from urlsafe_token.domain.interfaces.signer import Signer
from urlsafe_token.domain.services.url_safe_codec import UrlSafeCodec
from urlsafe_token.domain.value_objects.json_value import JsonValue

logger = logging.getLogger(__name__)

__all__ = ["URLSafeSerializer"]


class URLSafeSerializer:
    """Signed, compressed, URL-safe serializer for JSON values.

    Attributes:
        signer: Signer capability used to authenticate tokens.
        codec: Framing codec (defaults to :class:`UrlSafeCodec` defaults).
    """

    def __init__(
        self,
        signer: Signer,
        *,
        codec: UrlSafeCodec | None = None,
        metrics: TokenMetricsPort | None = None,
    ) -> None:
        self.signer = signer
        self.codec = codec or UrlSafeCodec()
        self._metrics = metrics

    def marshal(self, value: JsonValue) -> str:
        """Encode and sign ``value``.

        Args:
            value: JSON-representable value.

        Returns:
            Signed URL-safe token.

        Raises:
            SerializationError: If ``value`` is not JSON-representable.
            CompressionError: If compression fails.
        """
        start = time.perf_counter()
        try:
            framed = self.codec.encode(value)
        except TokenError as exc:
            self._record("marshal", exc.code, start)
            logger.warning(
                "token.marshal_failed",
                extra={"extra": {"code": exc.code, "stage": exc.stage}},
            )
            raise

        token = self.signer.sign(framed)
        self._record("marshal", "success", start)
        logger.debug(
            "token.marshalled",
            extra={
                "extra": {
                    "compressed": self.codec.is_compressed(framed),
                    "token_length": len(token),
                }
            },
        )
        return token

    def unmarshal(self, token: str) -> JsonValue:
        """Verify and decode ``token``.

        Args:
            token: Output of :meth:`marshal`.

        Returns:
            The original value (numbers follow JSON semantics).

        Raises:
            SignatureError: If verification fails; nothing is decoded.
            EmptyInputError: If the verified payload is empty.
            EncodingError: If the verified payload is not base64url.
            DecompressionError: If inflate fails or exceeds the ceiling.
            DeserializationError: If the payload is not valid JSON.
        """
        start = time.perf_counter()
        try:
            framed = self.signer.unsign(token)
            value = self.codec.decode(framed)
        except TokenError as exc:
            self._record("unmarshal", exc.code, start)
            logger.warning(
                "token.unmarshal_rejected",
                extra={"extra": {"code": exc.code, "stage": exc.stage}},
            )
            raise

        self._record("unmarshal", "success", start)
        return value

    def _record(self, operation: str, outcome: str, start: float) -> None:
        if self._metrics is None:
            return
        try:
            self._metrics.observe(operation, outcome, time.perf_counter() - start)
        except Exception:
            logger.warning(
                "token.metrics_record_failed",
                extra={"extra": {"operation": operation, "outcome": outcome}},
                exc_info=True,
            )
