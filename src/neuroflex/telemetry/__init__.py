"""Simulated cluster telemetry.

Responsibility: Generates metric samples and keeps the bounded history used
for charting.
"""

from .history import HistoryBuffer
from .models import INITIAL_METRICS, HistorySample, SystemMetrics
from .simulator import MetricsSimulator, SimulatorLimits

__all__ = [
    "HistoryBuffer",
    "HistorySample",
    "INITIAL_METRICS",
    "MetricsSimulator",
    "SimulatorLimits",
    "SystemMetrics",
]
