"""Shared plumbing for monitors: owned RPC handle, error counter, teardown."""

from __future__ import annotations

import logging

from prometheus_client import CollectorRegistry

from monitorism.core.interfaces import IChainClient
from monitorism.metrics import MetricsFactory

logger = logging.getLogger(__name__)


class BaseMonitor:
    """One monitor instance: owns its client and its metrics registry.

    Subclasses implement `run()` (one tick) and create their metrics from
    `self.metrics` in `__init__`.
    """

    namespace: str = ""

    def __init__(self, *, rpc: IChainClient, metrics: MetricsFactory | None = None) -> None:
        self.rpc = rpc
        self.metrics = metrics if metrics is not None else MetricsFactory(self.namespace)
        self.unexpected_rpc_errors = self.metrics.rpc_error_counter()
        self._closed = False

    @property
    def registry(self) -> CollectorRegistry:
        return self.metrics.registry

    def record_rpc_error(
        self,
        stage: str,
        operation: str,
        error: BaseException,
        *,
        block_number: int | None = None,
        level: int = logging.WARNING,
    ) -> None:
        """Count and log one transient failure; the tick is aborted by the caller."""
        self.unexpected_rpc_errors.labels(stage=stage, operation=operation).inc()
        logger.log(
            level,
            "%s failed: %s",
            operation,
            error,
            extra={
                "monitor": self.namespace,
                "stage": stage,
                "operation": operation,
                "block_number": block_number,
                "error": type(error).__name__,
            },
        )

    async def run(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        """Release the RPC connection; later calls are no-ops."""
        if self._closed:
            return
        self._closed = True
        await self.rpc.aclose()

