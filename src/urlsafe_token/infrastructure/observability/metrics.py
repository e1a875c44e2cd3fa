# src/urlsafe_token/infrastructure/observability/metrics.py
# Copyright (c)
# SPDX-License-Identifier: MIT
"""Prometheus metrics for token operations (registry-aware, reload safe).

Accessor functions return a *singleton* collector bound to the **current**
``prometheus_client.REGISTRY``:

    - Safe under hot reload and tests that swap the default registry.
    - No duplicate-registration errors.
    - Cache automatically resets when the active registry changes.

:class:`PrometheusTokenMetrics` adapts these collectors to the application
``TokenMetricsPort``.

Example:
    metrics = PrometheusTokenMetrics()
    serializer = URLSafeSerializer(signer, metrics=metrics)
"""

from __future__ import annotations

import logging
import threading
from contextlib import suppress
from typing import Final

import prometheus_client as prom
from prometheus_client import Counter, Histogram

_log = logging.getLogger(__name__)

__all__ = [
    "PrometheusTokenMetrics",
    "get_token_operation_duration_seconds",
    "get_token_operations_total",
]

# Token work is CPU-bound and small; buckets start well below a millisecond.
_BUCKETS: Final[tuple[float, ...]] = (
    0.0001,
    0.00025,
    0.0005,
    0.001,
    0.0025,
    0.005,
    0.010,
    0.025,
    0.050,
    0.100,
)

_registry_id: int | None = None
_hist_cache: dict[str, Histogram] = {}
_counter_cache: dict[str, Counter] = {}
_lock = threading.RLock()


def _ensure_registry() -> None:
    """Reset caches if the active registry changed."""
    global _registry_id
    with _lock:
        rid = id(prom.REGISTRY)
        if _registry_id != rid:
            _hist_cache.clear()
            _counter_cache.clear()
            _registry_id = rid


def _lookup_existing(name: str) -> object | None:
    """Return a collector already registered under ``name``, if any."""
    with _lock, suppress(Exception):
        mapping = getattr(prom.REGISTRY, "_names_to_collectors", None)
        if isinstance(mapping, dict):
            return mapping.get(name)
    return None


def _get_or_create_hist(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Histogram:
    """Get or create a registry-bound ``Histogram`` with stable identity.

    Args:
        name: Metric name (snake_case).
        help_text: Human-readable description.
        labelnames: Optional label names tuple.

    Returns:
        Histogram: Bound to ``prom.REGISTRY``.
    """
    _ensure_registry()
    with _lock:
        cached = _hist_cache.get(name)
        if cached is not None:
            return cached

        existing = _lookup_existing(name)
        if isinstance(existing, Histogram):
            _hist_cache[name] = existing
            return existing

        try:
            h = Histogram(name, help_text, labelnames, buckets=_BUCKETS, registry=prom.REGISTRY)
        except ValueError:
            again = _lookup_existing(name)
            if isinstance(again, Histogram):
                _hist_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus histogram %s", name)
            raise
        _hist_cache[name] = h
        return h


def _get_or_create_counter(
    name: str,
    help_text: str,
    *,
    labelnames: tuple[str, ...] = (),
) -> Counter:
    """Get or create a registry-bound ``Counter`` with stable identity."""
    _ensure_registry()
    with _lock:
        cached = _counter_cache.get(name)
        if cached is not None:
            return cached

        # Counters register under both ``name`` and ``name_total``.
        existing = _lookup_existing(name) or _lookup_existing(f"{name}_total")
        if isinstance(existing, Counter):
            _counter_cache[name] = existing
            return existing

        try:
            c = Counter(name, help_text, labelnames, registry=prom.REGISTRY)
        except ValueError:
            again = _lookup_existing(name)
            if isinstance(again, Counter):
                _counter_cache[name] = again
                return again
            _log.exception("Failed to register Prometheus counter %s", name)
            raise
        _counter_cache[name] = c
        return c


def get_token_operations_total() -> Counter:
    """Return counter for completed token operations.

    Labels:
        operation: ``marshal`` or ``unmarshal``.
        outcome: ``success`` or a stable error code (e.g.
            ``TOKEN_SIGNATURE_INVALID``).
    """
    return _get_or_create_counter(
        name="urlsafe_token_operations",
        help_text="Token marshal/unmarshal operations by outcome.",
        labelnames=("operation", "outcome"),
    )


def get_token_operation_duration_seconds() -> Histogram:
    """Return histogram for token operation latency.

    Labels:
        operation: ``marshal`` or ``unmarshal``.
    """
    return _get_or_create_hist(
        name="urlsafe_token_operation_duration_seconds",
        help_text="Latency (seconds) of token marshal/unmarshal operations.",
        labelnames=("operation",),
    )


class PrometheusTokenMetrics:
    """``TokenMetricsPort`` implementation backed by Prometheus collectors."""

    def observe(self, operation: str, outcome: str, duration_s: float) -> None:
        get_token_operations_total().labels(operation=operation, outcome=outcome).inc()
        get_token_operation_duration_seconds().labels(operation=operation).observe(duration_s)
