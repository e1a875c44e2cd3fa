# src/urlsafe_token/application/interfaces/token_metrics_port.py
# Copyright (c) Arche.
# SPDX-License-Identifier: MIT
"""Application Interface: Token Metrics Port.

Synopsis:
    Minimal observation hook used by the serializer. Enables plugging a
    Prometheus implementation (or nothing) without the application layer
    importing infrastructure.

Layer:
    application/interfaces
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenMetricsPort(Protocol):
    """Record the outcome and latency of token operations."""

    def observe(self, operation: str, outcome: str, duration_s: float) -> None:
        """Record one completed operation.

        Args:
            operation: ``marshal`` or ``unmarshal``.
            outcome: ``success`` or the stable error code of the failure.
            duration_s: Wall-clock duration in seconds.
        """
