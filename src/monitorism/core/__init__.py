"""Core data models, configurations, interfaces and errors.

This package provides:
- Data models (BlockHeader, ObservedLog, MatchResult)
- Configuration classes (GlobalEventsConfig, LivenessExpirationConfig, TipMonConfig, RunnerConfig)
- The chain client Protocol
- The exception hierarchy
"""

from monitorism.core.config import (
    GlobalEventsConfig,
    LivenessExpirationConfig,
    RunnerConfig,
    TipMonConfig,
)
from monitorism.core.errors import (
    ConfigurationError,
    ConnectivityError,
    InvalidSignature,
    MonitorError,
    RpcError,
)
from monitorism.core.models import BlockHeader, MatchResult, ObservedLog

__all__ = [
    "GlobalEventsConfig",
    "LivenessExpirationConfig",
    "RunnerConfig",
    "TipMonConfig",
    "ConfigurationError",
    "ConnectivityError",
    "InvalidSignature",
    "MonitorError",
    "RpcError",
    "BlockHeader",
    "MatchResult",
    "ObservedLog",
]
