"""Control-loop orchestration.

Responsibility: Owns the shared engine state, schedules the periodic tasks,
applies user controls and exposes read-only snapshots to front ends.
"""

from .engine import DIAGNOSTICS_MESSAGE, ControlLoop, run_for
from .runner import EngineRunner
from .state import EngineSnapshot, EngineState
from .stress import (
    IDLE,
    STRESS_END_MESSAGE,
    STRESS_START_MESSAGE,
    StressInjector,
    StressPhase,
    StressState,
)

__all__ = [
    "ControlLoop",
    "DIAGNOSTICS_MESSAGE",
    "EngineRunner",
    "EngineSnapshot",
    "EngineState",
    "IDLE",
    "STRESS_END_MESSAGE",
    "STRESS_START_MESSAGE",
    "StressInjector",
    "StressPhase",
    "StressState",
    "run_for",
]
