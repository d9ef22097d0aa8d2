"""Prometheus metrics export utilities.

The simulated telemetry, cluster size and control-loop activity are mirrored
into process-wide collectors so an external Prometheus can scrape a running
engine.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, start_http_server

# --- Telemetry ---

CPU_LOAD = Gauge("neuroflex_cpu_load", "Simulated CPU load percentage")

MEMORY_USAGE = Gauge("neuroflex_memory_usage", "Simulated memory usage percentage")

ARTIFICIAL_LOAD = Gauge("neuroflex_artificial_load", "Effective injected load percentage")

# --- Control loop ---

NODE_COUNT = Gauge("neuroflex_node_count", "Active nodes in the simulated cluster")

SCALING_EVENTS = Counter(
    "neuroflex_scaling_events_total",
    "Autoscaling decisions applied",
    ["direction"],
)

NARRATIONS = Counter(
    "neuroflex_narrations_total",
    "Narration requests by outcome",
    ["outcome"],  # ok, fallback
)


class MetricsRegistry:
    """Central registry for engine metrics."""

    @staticmethod
    def record_tick(cpu: float, memory: float, artificial_load: float) -> None:
        CPU_LOAD.set(cpu)
        MEMORY_USAGE.set(memory)
        ARTIFICIAL_LOAD.set(artificial_load)

    @staticmethod
    def record_nodes(node_count: int) -> None:
        NODE_COUNT.set(node_count)

    @staticmethod
    def record_scaling(direction: str) -> None:
        SCALING_EVENTS.labels(direction=direction).inc()

    @staticmethod
    def record_narration(outcome: str) -> None:
        NARRATIONS.labels(outcome=outcome).inc()

    @staticmethod
    def start_server(port: int = 9090) -> None:
        """Start a standalone Prometheus metrics server."""
        start_http_server(port)
