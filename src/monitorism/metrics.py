"""Prometheus metrics owned per monitor instance.

Each monitor gets its own `CollectorRegistry` so several monitors can live
in one process without clashing on metric names; nothing is registered in
the global default registry.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)

RPC_ERROR_LABELS = ("stage", "operation")


class MetricsFactory:
    """Create namespaced gauges and counters inside one registry."""

    def __init__(self, namespace: str, registry: CollectorRegistry | None = None) -> None:
        self.namespace = namespace
        self.registry = registry if registry is not None else CollectorRegistry()

    def gauge_vec(self, name: str, documentation: str, labels: Sequence[str]) -> Gauge:
        return Gauge(name, documentation, labelnames=list(labels), namespace=self.namespace, registry=self.registry)

    def counter_vec(self, name: str, documentation: str, labels: Sequence[str]) -> Counter:
        return Counter(name, documentation, labelnames=list(labels), namespace=self.namespace, registry=self.registry)

    def rpc_error_counter(self) -> Counter:
        """The `unexpectedRpcErrors{stage, operation}` counter every monitor exposes."""
        return self.counter_vec("unexpectedRpcErrors", "number of unexpected rpc errors", RPC_ERROR_LABELS)


def serve_metrics(registry: CollectorRegistry, port: int, addr: str = "0.0.0.0") -> None:
    """Expose `registry` on http://addr:port/metrics in a background thread."""
    start_http_server(port, addr=addr, registry=registry)
    logger.info("Serving metrics on %s:%d", addr, port)
