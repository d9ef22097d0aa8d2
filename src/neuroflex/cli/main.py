"""Typer CLI entrypoint for the NeuroFlex engine."""

from __future__ import annotations

import asyncio
import logging
import random
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import EngineConfig, dump_config, load_config
from ..core.exceptions import ConfigError
from ..core.logging import configure_logging
from ..monitoring.event_log import LogEntry, LogType
from ..orchestration.engine import ControlLoop, run_for
from ..orchestration.state import EngineSnapshot
from ..utils.metrics import MetricsRegistry

LOGGER = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True, help="NeuroFlex adaptive cluster simulator")
console = Console()

LOG_STYLES = {
    LogType.INFO: "cyan",
    LogType.WARNING: "yellow",
    LogType.ERROR: "bold red",
    LogType.SYSTEM: "magenta",
    LogType.AI: "green",
}


def _load(config_path: Optional[Path], overrides: Optional[List[str]]) -> EngineConfig:
    try:
        config = load_config(config_path, overrides or [])
    except (ConfigError, FileNotFoundError) as exc:
        raise typer.BadParameter(str(exc)) from exc
    configure_logging(
        config.logging.level,
        Path(config.logging.log_dir) if config.logging.log_dir else None,
        json_logs=config.logging.json_logs,
    )
    return config


def _format_entry(entry: LogEntry) -> str:
    style = LOG_STYLES.get(entry.type, "white")
    return f"[dim]{entry.timestamp}[/dim] [{style}]{entry.type.value:<7}[/{style}] {entry.message}"


def _summary_table(snapshot: EngineSnapshot) -> Table:
    table = Table(title="Final telemetry")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    metrics, cluster = snapshot.metrics, snapshot.cluster
    table.add_row("Nodes", str(cluster.node_count))
    table.add_row("Complexity", cluster.complexity.value)
    table.add_row("Status", cluster.status.value)
    table.add_row("CPU", f"{metrics.cpu_load:.1f}%")
    table.add_row("Memory", f"{metrics.memory_usage:.1f}%")
    table.add_row("Latency", f"{metrics.network_latency:.0f}ms")
    table.add_row("Temp", f"{metrics.temperature:.1f}C")
    table.add_row("Samples", str(len(snapshot.history)))
    return table


async def _drive(engine: ControlLoop, duration: float, stress_at: Optional[float]) -> None:
    seen: set[str] = set()

    async def on_tick(snapshot: EngineSnapshot) -> None:
        nonlocal seen
        for entry in snapshot.logs:
            if entry.id not in seen:
                console.print(_format_entry(entry))
        seen = {entry.id for entry in snapshot.logs}

    handle = None
    if stress_at is not None:
        handle = asyncio.get_running_loop().call_later(stress_at, engine.inject_stress)
    try:
        await run_for(engine, duration, on_tick)
    finally:
        if handle is not None:
            handle.cancel()
    # Flush entries appended after the last tick callback.
    await on_tick(engine.snapshot())


@app.command()
def run(
    duration: float = typer.Option(30.0, "--duration", "-d", help="Seconds to run the control loop."),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML engine config."),
    overrides: Optional[List[str]] = typer.Option(None, "--set", help="Dotted key=value override."),
    seed: Optional[int] = typer.Option(None, help="Seed for the telemetry noise."),
    load: float = typer.Option(0.0, "--load", help="Manual artificial load (0-80)."),
    stress_at: Optional[float] = typer.Option(None, "--stress-at", help="Inject a stress pulse after N seconds."),
    autoscale: bool = typer.Option(True, "--autoscale/--no-autoscale", help="Enable the autoscale policy."),
    metrics_port: Optional[int] = typer.Option(None, "--metrics-port", help="Expose Prometheus metrics."),
) -> None:
    """Run the simulated cluster and stream its event log."""
    config = _load(config_path, overrides)
    if metrics_port:
        MetricsRegistry.start_server(metrics_port)
        LOGGER.info("metrics_server_started", extra={"port": metrics_port})

    engine = ControlLoop(config, rng=random.Random(seed))
    engine.set_autoscale(autoscale)
    engine.set_artificial_load(load)

    try:
        asyncio.run(_drive(engine, duration, stress_at))
    except KeyboardInterrupt:
        console.print("[dim]Interrupted.[/dim]")
    console.print(_summary_table(engine.snapshot()))


@app.command()
def plan(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML engine config."),
    overrides: Optional[List[str]] = typer.Option(None, "--set", help="Dotted key=value override."),
    warmup: int = typer.Option(5, help="Ticks to simulate before asking for a plan."),
    seed: Optional[int] = typer.Option(None, help="Seed for the telemetry noise."),
) -> None:
    """Ask the narrator for an optimisation plan for the simulated cluster."""
    config = _load(config_path, overrides)
    engine = ControlLoop(config, rng=random.Random(seed))
    for _ in range(max(0, warmup)):
        engine.tick()
    console.print(asyncio.run(engine.request_plan()))


@app.command("show-config")
def show_config(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML engine config."),
    overrides: Optional[List[str]] = typer.Option(None, "--set", help="Dotted key=value override."),
) -> None:
    """Print the resolved engine configuration."""
    console.print(dump_config(_load(config_path, overrides)), markup=False)


if __name__ == "__main__":  # pragma: no cover
    app()
