"""Shared engine state and its read-only snapshot."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Tuple

from ..config.schema import EngineConfig
from ..infra.autoscaling import ClusterConfig, ClusterStatus, Complexity
from ..monitoring.event_log import EventLog, LogEntry
from ..telemetry.history import HistoryBuffer
from ..telemetry.models import INITIAL_METRICS, HistorySample, SystemMetrics
from .stress import IDLE, StressState


@dataclass
class EngineState:
    """Everything the control loop mutates. Only the loop thread writes to it."""

    metrics: SystemMetrics
    cluster: ClusterConfig
    history: HistoryBuffer
    log: EventLog
    autoscale_enabled: bool = True
    manual_load: float = 0.0
    stress: StressState = field(default=IDLE)

    @classmethod
    def initial(
        cls,
        config: EngineConfig,
        *,
        time_clock: Optional[Callable[[], float]] = None,
        wall_clock: Optional[Callable[[], datetime]] = None,
    ) -> "EngineState":
        return cls(
            metrics=INITIAL_METRICS,
            cluster=ClusterConfig(
                node_count=config.cluster.initial_nodes,
                complexity=Complexity.MEDIUM,
                status=ClusterStatus.OPTIMAL,
            ),
            history=HistoryBuffer(config.buffers.history_length, clock=time_clock),
            log=EventLog(config.buffers.log_capacity, clock=wall_clock),
        )


@dataclass(frozen=True)
class EngineSnapshot:
    metrics: SystemMetrics
    cluster: ClusterConfig
    history: Tuple[HistorySample, ...]
    logs: Tuple[LogEntry, ...]
    autoscale_enabled: bool
    manual_load: float
    effective_load: float
    stress: StressState

    def to_dict(self) -> dict:
        return {
            "metrics": self.metrics.to_dict(),
            "cluster": self.cluster.to_dict(),
            "history": [{"time": s.time, "cpu": s.cpu, "mem": s.mem} for s in self.history],
            "logs": [entry.to_dict() for entry in self.logs],
            "autoscale_enabled": self.autoscale_enabled,
            "manual_load": self.manual_load,
            "effective_load": self.effective_load,
            "stress": {"phase": self.stress.phase.value, "amount": self.stress.amount},
        }
