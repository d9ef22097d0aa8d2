"""Stochastic telemetry generator for the simulated cluster.

CPU load follows the cluster size plus any injected load, memory trails CPU
through a first-order low-pass filter, and latency and temperature are derived
from the new CPU value.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional

from ..core.numeric import clamp
from .history import HistoryBuffer
from .models import SystemMetrics

LOGGER = logging.getLogger(__name__)

CPU_NOISE = 5.0
MEMORY_NOISE = 2.5
MEMORY_ALPHA = 0.1
LATENCY_JITTER = 20.0


@dataclass(frozen=True)
class SimulatorLimits:
    cpu_floor: float = 5.0
    cpu_ceiling: float = 100.0
    memory_floor: float = 10.0
    memory_ceiling: float = 100.0
    max_artificial_load: float = 80.0


class MetricsSimulator:
    """Produces the next :class:`SystemMetrics` sample from the previous one."""

    def __init__(self, rng: Optional[random.Random] = None, limits: Optional[SimulatorLimits] = None) -> None:
        self.rng = rng or random.Random()
        self.limits = limits or SimulatorLimits()

    def step(self, prev: SystemMetrics, node_count: int, artificial_load: float = 0.0) -> SystemMetrics:
        limits = self.limits
        load = clamp(artificial_load, 0.0, limits.max_artificial_load)

        # Bigger clusters carry more intrinsic coordination load.
        base_load = 10 + node_count / 2
        cpu = clamp(
            base_load + load + self.rng.uniform(-CPU_NOISE, CPU_NOISE),
            limits.cpu_floor,
            limits.cpu_ceiling,
        )

        memory = clamp(
            prev.memory_usage
            + (cpu - prev.memory_usage) * MEMORY_ALPHA
            + self.rng.uniform(-MEMORY_NOISE, MEMORY_NOISE),
            limits.memory_floor,
            limits.memory_ceiling,
        )

        return SystemMetrics(
            cpu_load=cpu,
            memory_usage=memory,
            network_latency=40 + cpu * 0.5 + self.rng.uniform(0.0, LATENCY_JITTER),
            temperature=40 + cpu * 0.4,
        )

    def advance(
        self,
        prev: SystemMetrics,
        node_count: int,
        artificial_load: float,
        history: HistoryBuffer,
    ) -> SystemMetrics:
        """Step the simulation and record the sample in ``history``."""
        metrics = self.step(prev, node_count, artificial_load)
        history.add(metrics)
        LOGGER.debug(
            "telemetry_tick",
            extra={"cpu": round(metrics.cpu_load, 2), "mem": round(metrics.memory_usage, 2), "nodes": node_count},
        )
        return metrics
