from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_NODE_URL = "127.0.0.1:8545"


def normalize_node_url(url: str) -> str:
    """Prepend `http://` to scheme-less endpoints such as `127.0.0.1:8545`."""
    url = url.strip()
    if "://" not in url:
        return f"http://{url}"
    return url


@dataclass(frozen=True)
class RunnerConfig:
    """Configuration for the periodic tick scheduler and the metrics exporter."""

    loop_interval_msec: int = 60_000
    metrics_port: int = 7300
    metrics_addr: str = "0.0.0.0"
    metrics_enabled: bool = True

    @property
    def interval_s(self) -> float:
        return self.loop_interval_msec / 1000


@dataclass(frozen=True)
class GlobalEventsConfig:
    """Configuration for the rule-driven global events monitor."""

    l1_node_url: str
    nickname: str
    path_yaml_rules: Path
    rpc_timeout_s: int = 20


@dataclass(frozen=True)
class LivenessExpirationConfig:
    """Configuration for the Safe liveness expiration monitor."""

    l1_node_url: str
    safe_address: str
    liveness_module_address: str
    liveness_guard_address: str
    rpc_timeout_s: int = 20


@dataclass(frozen=True)
class TipMonConfig:
    """Configuration for the chain tip lag monitor."""

    node_url: str = DEFAULT_NODE_URL
    rpc_timeout_s: int = 20
