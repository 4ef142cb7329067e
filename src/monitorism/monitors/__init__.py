"""Monitors and the scheduler that drives them.

This package provides:
- GlobalEventsMonitor: rule-driven event matching on the latest block
- LivenessExpirationMonitor: Safe liveness guard/module readings
- TipMonitor: lag between chain tip and wall clock
- run_monitor / serve: the periodic tick loop
"""

from monitorism.monitors.global_events import GlobalEventsMonitor, chain_id_to_name
from monitorism.monitors.liveness_expiration import LivenessExpirationMonitor
from monitorism.monitors.runner import run_monitor, serve
from monitorism.monitors.tipmon import TipMonitor

__all__ = [
    "GlobalEventsMonitor",
    "chain_id_to_name",
    "LivenessExpirationMonitor",
    "run_monitor",
    "serve",
    "TipMonitor",
]
