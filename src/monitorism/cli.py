import asyncio
import functools
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.markup import escape

from monitorism.core.config import (
    DEFAULT_NODE_URL,
    GlobalEventsConfig,
    LivenessExpirationConfig,
    RunnerConfig,
    TipMonConfig,
)
from monitorism.core.errors import MonitorError
from monitorism.log import LOG_FORMATS, setup_logging

console = Console()

ENV_PREFIX = "MONITORISM"


def _env(*parts: str) -> str:
    return "_".join((ENV_PREFIX, *parts))


def runner_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Flags shared by every monitor: loop interval, metrics server, logging, RPC timeout."""
    options = [
        click.option(
            "--loop-interval-msec",
            type=click.IntRange(min=1),
            default=60_000,
            show_default=True,
            envvar=_env("LOOP_INTERVAL_MSEC"),
            help="Milliseconds between two ticks",
        ),
        click.option(
            "--metrics-port", type=int, default=7300, show_default=True, envvar=_env("METRICS_PORT")
        ),
        click.option(
            "--metrics-addr", default="0.0.0.0", show_default=True, envvar=_env("METRICS_ADDR")
        ),
        click.option(
            "--metrics/--no-metrics",
            "metrics_enabled",
            default=True,
            show_default=True,
            envvar=_env("METRICS_ENABLED"),
            help="Serve Prometheus metrics over HTTP",
        ),
        click.option(
            "--log-level",
            type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
            default="INFO",
            show_default=True,
            envvar=_env("LOG_LEVEL"),
        ),
        click.option(
            "--log-format",
            type=click.Choice(LOG_FORMATS),
            default="text",
            show_default=True,
            envvar=_env("LOG_FORMAT"),
        ),
        click.option(
            "--rpc-timeout",
            type=click.IntRange(min=1),
            default=20,
            show_default=True,
            envvar=_env("RPC_TIMEOUT"),
            help="Per-request RPC timeout in seconds",
        ),
    ]
    for option in reversed(options):
        fn = option(fn)
    return fn


def _runner_config(kwargs: dict[str, Any]) -> RunnerConfig:
    return RunnerConfig(
        loop_interval_msec=kwargs["loop_interval_msec"],
        metrics_port=kwargs["metrics_port"],
        metrics_addr=kwargs["metrics_addr"],
        metrics_enabled=kwargs["metrics_enabled"],
    )


def _run(create: Callable[[], Awaitable[Any]], kwargs: dict[str, Any]) -> None:
    """Configure logging, then run the monitor until signalled."""
    from monitorism.monitors.runner import serve

    setup_logging(kwargs["log_level"], kwargs["log_format"])
    try:
        ticks = asyncio.run(serve(create, _runner_config(kwargs)))
    except MonitorError as e:
        raise click.ClickException(str(e)) from e
    console.print(f"[bold]stopped[/] after {ticks} tick(s)")


@click.group()
def cli() -> None:
    """monitorism: Prometheus monitors for EVM chains."""


@cli.command("global-events")
@click.option(
    "--l1.node.url",
    "l1_node_url",
    default=DEFAULT_NODE_URL,
    show_default=True,
    envvar=_env("GLOBAL_EVENT_MON", "L1_NODE_URL"),
    help="Node URL of L1 peer",
)
@click.option(
    "--nickname",
    required=True,
    envvar=_env("GLOBAL_EVENT_MON", "NICKNAME"),
    help="Nickname of the chain being monitored, exported as a metric label",
)
@click.option(
    "--path-yaml-rules",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    envvar=_env("GLOBAL_EVENT_MON", "PATH_YAML"),
    help="Rule file, or directory of rule files",
)
@runner_options
def global_events_cmd(l1_node_url: str, nickname: str, path_yaml_rules: Path, **kwargs: Any) -> None:
    """Match every log of the latest block against the configured rules."""
    from monitorism.monitors.global_events import GlobalEventsMonitor

    config = GlobalEventsConfig(
        l1_node_url=l1_node_url,
        nickname=nickname,
        path_yaml_rules=path_yaml_rules,
        rpc_timeout_s=kwargs["rpc_timeout"],
    )
    _run(functools.partial(GlobalEventsMonitor.create, config), kwargs)


@cli.command("liveness-expiration")
@click.option(
    "--l1.node.url",
    "l1_node_url",
    default=DEFAULT_NODE_URL,
    show_default=True,
    envvar=_env("LIVENESS_EXPIRATION_MON", "L1_NODE_URL"),
    help="Node URL of L1 peer",
)
@click.option(
    "--safe.address",
    "safe_address",
    required=True,
    envvar=_env("LIVENESS_EXPIRATION_MON", "SAFE_ADDRESS"),
    help="Address of the Safe contract",
)
@click.option(
    "--livenessmodule.address",
    "liveness_module_address",
    required=True,
    envvar=_env("LIVENESS_EXPIRATION_MON", "LIVENESS_MODULE_ADDRESS"),
    help="Address of the LivenessModule contract",
)
@click.option(
    "--livenessguard.address",
    "liveness_guard_address",
    required=True,
    envvar=_env("LIVENESS_EXPIRATION_MON", "LIVENESS_GUARD_ADDRESS"),
    help="Address of the LivenessGuard contract",
)
@runner_options
def liveness_expiration_cmd(
    l1_node_url: str,
    safe_address: str,
    liveness_module_address: str,
    liveness_guard_address: str,
    **kwargs: Any,
) -> None:
    """Export Safe owners' last-live timestamps and the liveness interval."""
    from monitorism.monitors.liveness_expiration import LivenessExpirationMonitor

    config = LivenessExpirationConfig(
        l1_node_url=l1_node_url,
        safe_address=safe_address,
        liveness_module_address=liveness_module_address,
        liveness_guard_address=liveness_guard_address,
        rpc_timeout_s=kwargs["rpc_timeout"],
    )
    _run(functools.partial(LivenessExpirationMonitor.create, config), kwargs)


@cli.command("tipmon")
@click.option(
    "--node.url",
    "node_url",
    default=DEFAULT_NODE_URL,
    show_default=True,
    envvar=_env("TIPMON", "NODE_URL"),
    help="Node URL of a peer",
)
@runner_options
def tipmon_cmd(node_url: str, **kwargs: Any) -> None:
    """Export the lag between the latest block timestamp and wall clock."""
    from monitorism.monitors.tipmon import TipMonitor

    config = TipMonConfig(node_url=node_url, rpc_timeout_s=kwargs["rpc_timeout"])
    _run(functools.partial(TipMonitor.create, config), kwargs)


@cli.command("check-rules")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
def check_rules_cmd(path: Path) -> None:
    """Validate a rule file (or directory) and print each rule's topics."""
    from monitorism.rules.loader import load_rule_set

    try:
        rule_set = load_rule_set(path)
    except MonitorError as e:
        raise click.ClickException(str(e)) from e

    for rule in rule_set:
        scope = ", ".join(sorted(rule.addresses)) or "any address"
        console.print(f"[bold]{escape(rule.name)}[/] [yellow]{escape(rule.priority)}[/] ({scope})", soft_wrap=True)
        for event in rule.events:
            console.print(f"  {escape(event.canonical)} → {event.topic}", soft_wrap=True)
    console.print(f"[green]ok[/]: {len(rule_set)} rule(s)")
