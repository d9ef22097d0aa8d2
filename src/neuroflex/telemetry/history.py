from __future__ import annotations

import time
from collections import deque
from typing import Callable, Iterator, List, Optional

from .models import HistorySample, SystemMetrics


class HistoryBuffer:
    """Fixed-capacity ring of recent cpu/memory samples, oldest first."""

    def __init__(self, capacity: int = 30, clock: Optional[Callable[[], float]] = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._clock = clock or time.time
        self.data: deque[HistorySample] = deque(maxlen=capacity)

    def add(self, metrics: SystemMetrics) -> HistorySample:
        sample = HistorySample(
            time=int(self._clock() * 1000),
            cpu=metrics.cpu_load,
            mem=metrics.memory_usage,
        )
        self.data.append(sample)
        return sample

    def samples(self) -> List[HistorySample]:
        return list(self.data)

    def latest(self) -> Optional[HistorySample]:
        return self.data[-1] if self.data else None

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator[HistorySample]:
        return iter(list(self.data))
