"""Liveness expiration monitor for a Safe guarded by a LivenessGuard/LivenessModule.

Each tick exports what is needed to alert on

    block.timestamp + BUFFER > lastLive(owner) + livenessInterval

1. `safe.getOwners()`
2. `livenessGuard.lastLive(owner)` for every owner
3. `livenessModule.livenessInterval()`
4. latest block number and timestamp

The alert expression itself lives in the alerting layer.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from monitorism.clients.abi import decode_address_array, decode_uint, encode_address, encode_call
from monitorism.clients.rpc import RPC
from monitorism.core.config import LivenessExpirationConfig
from monitorism.core.errors import ConfigurationError, ConnectivityError, RpcError
from monitorism.core.interfaces import IChainClient
from monitorism.metrics import MetricsFactory
from monitorism.monitors.base import BaseMonitor
from monitorism.rules.specs import normalize_address

logger = logging.getLogger(__name__)

METRICS_NAMESPACE = "liveness_expiration_mon"
STAGE = "l1"

ZERO_ADDRESS = "0x" + "0" * 40

GET_OWNERS = "getOwners()"
LAST_LIVE = "lastLive(address owner)"
LIVENESS_INTERVAL = "livenessInterval()"


def _checked_address(label: str, value: str) -> str:
    try:
        address = normalize_address(value)
    except ValueError as e:
        raise ConfigurationError(f"The `{label}` is not a valid address: {value!r}") from e
    if address == ZERO_ADDRESS:
        raise ConfigurationError(f"The `{label}` specified is set to -> {value}")
    return address


class LivenessExpirationMonitor(BaseMonitor):
    namespace = METRICS_NAMESPACE

    def __init__(
        self,
        *,
        rpc: IChainClient,
        safe_address: str,
        liveness_guard_address: str,
        liveness_module_address: str,
        metrics: MetricsFactory | None = None,
    ) -> None:
        super().__init__(rpc=rpc, metrics=metrics)
        self.safe_address = safe_address
        self.liveness_guard_address = liveness_guard_address
        self.liveness_module_address = liveness_module_address

        self.highest_block_number = self.metrics.gauge_vec(
            "highestBlockNumber", "observed l1 heights (checked and known)", ["blockNumber"]
        )
        self.interval_liveness = self.metrics.gauge_vec(
            "intervalLiveness", "Interval in (second) of the liveness from the liveness module", ["interval"]
        )
        self.last_live_of_a_owner = self.metrics.gauge_vec(
            "lastLiveOfAOwner",
            "Last Live of an owner from the liveness guard, means the last time an owner make an action.",
            ["address"],
        )
        self.block_timestamp = self.metrics.gauge_vec(
            "BlockTimestamp", "Block Timestamp of the last block.", ["blocktimestamp"]
        )

    @classmethod
    async def create(
        cls,
        config: LivenessExpirationConfig,
        *,
        rpc: IChainClient | None = None,
        metrics: MetricsFactory | None = None,
    ) -> LivenessExpirationMonitor:
        safe = _checked_address("SafeAddress", config.safe_address)
        guard = _checked_address("LivenessGuardAddress", config.liveness_guard_address)
        module = _checked_address("LivenessModuleAddress", config.liveness_module_address)

        if rpc is None:
            rpc = RPC(config.l1_node_url, timeout_s=config.rpc_timeout_s)
        try:
            block_number = await rpc.block_number()
        except (RpcError, httpx.HTTPError) as e:
            await rpc.aclose()
            raise ConnectivityError(f"failed to dial l1 {config.l1_node_url}: {e}") from e

        logger.info("Starting the liveness expiration monitoring...")
        logger.info("Safe Address: %s", safe)
        logger.info("LivenessModuleAddress: %s", module)
        logger.info("LivenessGuardAddress: %s", guard)
        logger.info("L1RpcUrl: %s (block %d)", config.l1_node_url, block_number)

        return cls(
            rpc=rpc,
            safe_address=safe,
            liveness_guard_address=guard,
            liveness_module_address=module,
            metrics=metrics,
        )

    async def run(self) -> None:
        operation = "HeaderByNumber"
        block_number: int | None = None
        try:
            header = await self.rpc.latest_header()
            block_number = header.number

            operation = "GetOwners"
            owners = decode_address_array(await self.rpc.call(self.safe_address, encode_call(GET_OWNERS)))

            operation = "LastLive"
            last_live: dict[str, int] = {}
            for owner in owners:
                data = await self.rpc.call(self.liveness_guard_address, encode_call(LAST_LIVE, encode_address(owner)))
                last_live[owner] = decode_uint(data)

            operation = "LivenessInterval"
            interval = decode_uint(await self.rpc.call(self.liveness_module_address, encode_call(LIVENESS_INTERVAL)))
        except (RpcError, httpx.HTTPError, ValueError) as e:
            self.record_rpc_error(STAGE, operation, e, block_number=block_number, level=logging.ERROR)
            return
        except asyncio.CancelledError as e:
            self.record_rpc_error(STAGE, operation, e, block_number=block_number, level=logging.ERROR)
            raise

        for owner, ts in last_live.items():
            self.last_live_of_a_owner.labels(address=owner).set(ts)
            logger.info("lastLive %d owner %s", ts, owner, extra={"block_number": block_number})
        self.interval_liveness.labels(interval="interval").set(interval)
        self.block_timestamp.labels(blocktimestamp="blocktimestamp").set(header.timestamp)
        self.highest_block_number.labels(blockNumber="blockNumber").set(header.number)
        logger.info(
            "interval %d, %d owner(s), safe %s",
            interval,
            len(owners),
            self.safe_address,
            extra={"monitor": self.namespace, "block_number": block_number},
        )
