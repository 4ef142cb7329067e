"""Tip monitor: how far the latest block timestamp lags behind wall clock."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

import httpx

from monitorism.clients.rpc import RPC
from monitorism.core.config import TipMonConfig
from monitorism.core.errors import RpcError
from monitorism.core.interfaces import IChainClient
from monitorism.metrics import MetricsFactory
from monitorism.monitors.base import BaseMonitor

logger = logging.getLogger(__name__)

METRICS_NAMESPACE = "tip_mon"


class TipMonitor(BaseMonitor):
    namespace = METRICS_NAMESPACE

    def __init__(
        self,
        *,
        rpc: IChainClient,
        metrics: MetricsFactory | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(rpc=rpc, metrics=metrics)
        self.clock = clock
        self.lagging_distance = self.metrics.gauge_vec(
            "lagging", "lagging distance between tip and real time", ["type"]
        )

    @classmethod
    async def create(
        cls,
        config: TipMonConfig,
        *,
        rpc: IChainClient | None = None,
        metrics: MetricsFactory | None = None,
    ) -> TipMonitor:
        logger.info("creating tip time monitor for %s", config.node_url)
        if rpc is None:
            rpc = RPC(config.node_url, timeout_s=config.rpc_timeout_s)
        return cls(rpc=rpc, metrics=metrics)

    async def run(self) -> None:
        logger.debug("querying tip...")
        try:
            header = await self.rpc.latest_header()
        except (RpcError, httpx.HTTPError) as e:
            self.record_rpc_error("laggingDistance", "eth_getBlockByNumber", e, level=logging.ERROR)
            return
        except asyncio.CancelledError as e:
            self.record_rpc_error("laggingDistance", "eth_getBlockByNumber", e, level=logging.ERROR)
            raise

        lag = int(self.clock()) - header.timestamp
        self.lagging_distance.labels(type="latest").set(lag)
        logger.info("set lagging distance: %ds", lag, extra={"monitor": self.namespace, "block_number": header.number})
