"""Periodic scheduler driving one monitor.

Ticks never overlap: the next tick starts only after the previous one has
returned, at the earliest `interval_s` after the previous one started. A
stop event (set by SIGINT/SIGTERM) ends the loop, and the monitor is always
closed on the way out.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from collections.abc import Awaitable, Callable
from typing import TypeVar

from monitorism.core.config import RunnerConfig
from monitorism.core.errors import ConfigurationError
from monitorism.monitors.base import BaseMonitor
from monitorism.metrics import serve_metrics

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseMonitor)


def install_signal_handlers(stop: asyncio.Event) -> None:
    """Set `stop` on SIGINT / SIGTERM (no-op where the loop cannot add handlers)."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handlers unsupported on this event loop")
            return


async def run_monitor(
    monitor: BaseMonitor,
    interval_s: float,
    *,
    stop: asyncio.Event | None = None,
    max_ticks: int | None = None,
) -> int:
    """Run ticks until `stop` is set (or `max_ticks` reached); returns ticks run."""
    stop = stop if stop is not None else asyncio.Event()
    loop = asyncio.get_running_loop()
    ticks = 0
    try:
        while not stop.is_set():
            started = loop.time()
            await monitor.run()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            delay = max(0.0, interval_s - (loop.time() - started))
            try:
                await asyncio.wait_for(stop.wait(), timeout=delay)
            except asyncio.TimeoutError:
                pass
    finally:
        await monitor.close()
        logger.info("Monitor %s stopped after %d tick(s)", monitor.namespace, ticks)
    return ticks


async def serve(create: Callable[[], Awaitable[M]], config: RunnerConfig) -> int:
    """Build a monitor, expose its metrics, and tick until signalled."""
    monitor = await create()
    if config.metrics_enabled:
        try:
            serve_metrics(monitor.registry, config.metrics_port, config.metrics_addr)
        except OSError as e:
            await monitor.close()
            raise ConfigurationError(
                f"cannot serve metrics on {config.metrics_addr}:{config.metrics_port}: {e}"
            ) from e
    stop = asyncio.Event()
    install_signal_handlers(stop)
    return await run_monitor(monitor, config.interval_s, stop=stop)
