"""Transient stress pulses layered on top of the manual load setting."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Optional

from ..config.schema import StressConfig
from ..core.numeric import clamp
from ..monitoring.event_log import LogType

if TYPE_CHECKING:  # pragma: no cover
    from .state import EngineState

LOGGER = logging.getLogger(__name__)

STRESS_START_MESSAGE = "Injecting artificial stress test load..."
STRESS_END_MESSAGE = "Stress test complete. Releasing load."


class StressPhase(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"


@dataclass(frozen=True)
class StressState:
    phase: StressPhase = StressPhase.IDLE
    amount: float = 0.0
    until: Optional[float] = None  # monotonic deadline while active

    @property
    def active(self) -> bool:
        return self.phase is StressPhase.ACTIVE

    def remaining(self, now: float) -> float:
        if not self.active or self.until is None:
            return 0.0
        return max(0.0, self.until - now)


IDLE = StressState()


class StressInjector:
    """Moves the shared stress state between ``idle`` and ``active(until)``.

    A trigger while a pulse is active extends the deadline and keeps the larger
    of the two amounts; pulses never stack additively.
    """

    def __init__(self, config: Optional[StressConfig] = None, clock: Callable[[], float] = time.monotonic) -> None:
        self.config = config or StressConfig()
        self.clock = clock

    def inject(self, state: "EngineState", amount: Optional[float] = None, duration: Optional[float] = None) -> StressState:
        amount = clamp(self.config.amount if amount is None else amount, 0.0, self.config.max_artificial_load)
        duration = self.config.duration if duration is None else duration
        if duration <= 0:
            raise ValueError("duration must be > 0")

        now = self.clock()
        current = state.stress
        if current.active:
            amount = max(amount, current.amount)
        state.stress = StressState(phase=StressPhase.ACTIVE, amount=amount, until=now + duration)
        state.log.append(LogType.WARNING, STRESS_START_MESSAGE)
        LOGGER.info(
            "stress_injected",
            extra={"amount": amount, "duration": duration, "extended": current.active},
        )
        return state.stress

    def release_if_due(self, state: "EngineState") -> bool:
        """Return the state to idle once the deadline has passed; logs completion once."""
        stress = state.stress
        if not stress.active or stress.until is None or self.clock() < stress.until:
            return False
        state.stress = IDLE
        state.log.append(LogType.INFO, STRESS_END_MESSAGE)
        LOGGER.info("stress_released", extra={"amount": stress.amount})
        return True

    def effective_load(self, state: "EngineState") -> float:
        extra = state.stress.amount if state.stress.active else 0.0
        return clamp(state.manual_load + extra, 0.0, self.config.max_artificial_load)
