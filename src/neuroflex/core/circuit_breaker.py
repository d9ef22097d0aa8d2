"""Circuit breaker guarding the remote narration service."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable


class CircuitBreakerOpenError(RuntimeError):
    """Raised when the circuit breaker is open and rejecting calls."""


@dataclass
class CircuitBreaker:
    failure_threshold: int = 3
    recovery_timeout: float = 30.0
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def __post_init__(self) -> None:
        if self.failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        if self.recovery_timeout < 0:
            raise ValueError("recovery_timeout must be >= 0")
        self._state = "closed"
        self._failure_count = 0
        self._opened_at = 0.0

    def before_call(self) -> None:
        """Raise if the breaker is open; move to half-open once the window elapses."""
        if self._state == "open":
            if self.clock() - self._opened_at >= self.recovery_timeout:
                self._state = "half_open"
            else:
                raise CircuitBreakerOpenError("Narration link is cooling down")

    def on_success(self) -> None:
        self._failure_count = 0
        self._state = "closed"

    def on_failure(self, _: BaseException) -> None:
        if self._state == "half_open":
            self._trip()
            return

        self._failure_count += 1
        if self._failure_count >= self.failure_threshold:
            self._trip()

    def _trip(self) -> None:
        self._state = "open"
        self._opened_at = self.clock()
        self._failure_count = 0

    @property
    def state(self) -> str:
        return self._state
