# src/urlsafe_token/domain/exceptions/base.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Base Token Exceptions.

Summary:
    Canonical base class for every failure raised while producing or
    consuming a token, so callers can reject untrusted input with a single
    ``except TokenError`` and map the stable ``code`` to HTTP or metrics.

Layer:
    domain/exceptions
"""

from __future__ import annotations

from typing import Any


class TokenError(Exception):
    """Base class for all token pipeline exceptions.

    Attributes:
        code:
            Stable error code suitable for mapping to HTTP status and metrics
            labels.
        stage:
            Name of the pipeline step that failed (``serialize``,
            ``compress``, ``frame``, ``base64``, ``inflate``,
            ``deserialize`` or ``verify``).
        details:
            Optional machine-readable diagnostic payload. Never carries the
            payload or secret material itself.
    """

    code: str = "TOKEN_ERROR"
    stage: str = "token"

    def __init__(self, message: str = "", *, details: dict[str, Any] | None = None) -> None:
        """Initialize a TokenError instance.

        Args:
            message:
                Human-readable error message, safe to surface to API clients.
            details:
                Optional structured diagnostic payload for logs or adapters.
        """
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}

    def __str__(self) -> str:
        return f"{self.stage}: {self.message}" if self.message else self.stage

    def to_dict(self) -> dict[str, Any]:
        """Return a log/metrics friendly representation of the error."""
        return {
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "details": dict(self.details),
        }
