"""Global events monitor: rule-driven matching of the latest block's logs.

One tick:
    header fetch → log fetch (latest block only) → match → emit

Every matching (rule, log) pair sets
`global_events_mon_eventEmitted{nickname, rulename, priority, functionName, address}`
to 1. Matching and labelling run over the whole batch before any gauge is
touched, so a tick that fails half-way leaves no partial samples behind.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import httpx
from eth_utils import to_checksum_address

from monitorism.clients.rpc import RPC
from monitorism.core.config import GlobalEventsConfig
from monitorism.core.errors import ConfigurationError, ConnectivityError, RpcError
from monitorism.core.interfaces import IChainClient
from monitorism.core.models import MatchResult, ObservedLog
from monitorism.metrics import MetricsFactory
from monitorism.monitors.base import BaseMonitor
from monitorism.rules.index import RuleIndex
from monitorism.rules.loader import load_rule_set
from monitorism.rules.matcher import EventMatcher
from monitorism.rules.specs import RuleSet

logger = logging.getLogger(__name__)

METRICS_NAMESPACE = "global_events_mon"
STAGE = "L1"
OP_HEADER = "HeaderByNumber"
OP_LOGS = "FilterLogs"

EVENT_LABELS = ("nickname", "rulename", "priority", "functionName", "address")

_CHAIN_NAMES = {
    1: "Ethereum [Mainnet]",
    11155111: "Sepolia [Testnet]",
}


def chain_id_to_name(chain_id: int) -> str:
    """Human readable chain name; only Mainnet and Sepolia are known."""
    return _CHAIN_NAMES.get(
        chain_id,
        f"Unknown chain {chain_id} (custom chain, or a misconfigured node URL)",
    )


class GlobalEventsMonitor(BaseMonitor):
    namespace = METRICS_NAMESPACE

    def __init__(
        self,
        *,
        rpc: IChainClient,
        rule_set: RuleSet,
        nickname: str,
        metrics: MetricsFactory | None = None,
    ) -> None:
        super().__init__(rpc=rpc, metrics=metrics)
        self.nickname = nickname
        self.rule_set = rule_set
        self.index = RuleIndex(rule_set)
        self.matcher = EventMatcher(self.index)
        # Only narrow the log query when no rule listens to every emitter.
        self.log_addresses: list[str] | None = (
            None if rule_set.watches_every_address() else rule_set.monitored_addresses()
        )
        self.event_emitted = self.metrics.gauge_vec(
            "eventEmitted", "Event monitored emitted an log", EVENT_LABELS
        )

    @classmethod
    async def create(
        cls,
        config: GlobalEventsConfig,
        *,
        rpc: IChainClient | None = None,
        metrics: MetricsFactory | None = None,
    ) -> GlobalEventsMonitor:
        """Load + validate rules, then check the node is reachable.

        Raises ConfigurationError or ConnectivityError; nothing is left open
        when construction fails.
        """
        if not config.nickname:
            raise ConfigurationError("A nickname is required for the global events monitor")
        rule_set = load_rule_set(config.path_yaml_rules)

        if rpc is None:
            rpc = RPC(config.l1_node_url, timeout_s=config.rpc_timeout_s)
        try:
            chain_id = await rpc.chain_id()
            header = await rpc.latest_header()
        except (RpcError, httpx.HTTPError) as e:
            await rpc.aclose()
            raise ConnectivityError(f"failed to reach l1 rpc {config.l1_node_url}: {e}") from e

        logger.info("Global events monitor starting")
        logger.info("latestBlockNumber: %d", header.number)
        logger.info("chainId: %s", chain_id_to_name(chain_id))
        logger.info("PathYaml: %s", config.path_yaml_rules)
        logger.info("Nickname: %s", config.nickname)
        logger.info("L1NodeURL: %s", config.l1_node_url)
        for rule in rule_set:
            logger.info(
                "Rule %r (priority %s): %d event(s), %s",
                rule.name,
                rule.priority,
                len(rule.events),
                f"{len(rule.addresses)} address(es)" if rule.addresses else "any address",
            )
        addresses = rule_set.monitored_addresses()
        logger.info("Monitored addresses (%d): %s", len(addresses), ", ".join(addresses) or "-")

        return cls(rpc=rpc, rule_set=rule_set, nickname=config.nickname, metrics=metrics)

    async def run(self) -> None:
        """Execute one tick; transient RPC failures end the tick, never the process."""
        logs = await self._fetch_latest_logs()
        if logs is None:
            return
        block_number, batch = logs
        matches = self.matcher.match_all(batch)
        try:
            samples = [(match, self._labels(match)) for match in matches]
        except ValueError as e:
            # Malformed log address: drop the whole batch.
            self.record_rpc_error(STAGE, OP_LOGS, e, block_number=block_number)
            return
        self._emit(samples)
        logger.info(
            "Checking events.. %d log(s), %d match(es)",
            len(batch),
            len(matches),
            extra={"monitor": self.namespace, "block_number": block_number},
        )

    async def _fetch_latest_logs(self) -> tuple[int, Sequence[ObservedLog]] | None:
        operation = OP_HEADER
        block_number: int | None = None
        try:
            header = await self.rpc.latest_header()
            block_number = header.number
            operation = OP_LOGS
            batch = await self.rpc.get_logs(
                from_block=block_number,
                to_block=block_number,
                addresses=self.log_addresses,
            )
        except (RpcError, httpx.HTTPError) as e:
            self.record_rpc_error(STAGE, operation, e, block_number=block_number)
            return None
        except asyncio.CancelledError as e:
            self.record_rpc_error(STAGE, operation, e, block_number=block_number)
            raise
        return block_number, batch

    def _labels(self, match: MatchResult) -> dict[str, str]:
        return {
            "nickname": self.nickname,
            "rulename": match.rule.name,
            "priority": match.rule.priority,
            "functionName": match.rule.first_event.signature,
            "address": to_checksum_address(match.log.address),
        }

    def _emit(self, samples: Sequence[tuple[MatchResult, dict[str, str]]]) -> None:
        for match, labels in samples:
            log = match.log
            logger.info(
                "Event detected: rule %r matched %s",
                match.rule.name,
                match.event.canonical,
                extra={
                    "monitor": self.namespace,
                    "block_number": log.block_number,
                    "tx_hash": log.tx_hash,
                    "address": labels["address"],
                    "topics": list(log.topics),
                    "rule": match.rule.name,
                    "priority": match.rule.priority,
                },
            )
            self.event_emitted.labels(**labels).set(1)
