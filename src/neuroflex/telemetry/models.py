"""Telemetry value types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict


@dataclass(frozen=True)
class SystemMetrics:
    cpu_load: float  # percent, 0-100
    memory_usage: float  # percent, 0-100
    network_latency: float  # ms
    temperature: float  # celsius

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class HistorySample:
    time: int  # epoch milliseconds
    cpu: float
    mem: float


INITIAL_METRICS = SystemMetrics(cpu_load=20.0, memory_usage=30.0, network_latency=45.0, temperature=40.0)
