"""Capacity-bounded audit trail of engine events."""

from __future__ import annotations

import logging
import uuid
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple

LOGGER = logging.getLogger(__name__)


class LogType(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    SYSTEM = "SYSTEM"
    AI = "AI"


@dataclass(frozen=True)
class LogEntry:
    id: str
    timestamp: str
    type: LogType
    message: str

    def to_dict(self) -> dict:
        payload = asdict(self)
        payload["type"] = self.type.value
        return payload


class EventLog:
    """Append-only ordered log; the oldest entry is dropped once capacity is exceeded."""

    def __init__(self, capacity: int = 50, clock: Optional[Callable[[], datetime]] = None) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.capacity = capacity
        self._clock = clock or datetime.now
        self._entries: deque[LogEntry] = deque(maxlen=capacity)

    def _new_id(self) -> str:
        live = {entry.id for entry in self._entries}
        while True:
            token = uuid.uuid4().hex[:9]
            if token not in live:
                return token

    def append(self, type: LogType | str, message: str) -> LogEntry:
        entry = LogEntry(
            id=self._new_id(),
            timestamp=self._clock().strftime("%H:%M:%S"),
            type=LogType(type),
            message=message,
        )
        self._entries.append(entry)
        LOGGER.debug("event_logged", extra={"event_type": entry.type.value, "event_message": message})
        return entry

    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def recent_messages(self, count: int = 3) -> List[str]:
        """Messages of the newest ``count`` entries, oldest first."""
        if count <= 0:
            return []
        return [entry.message for entry in list(self._entries)[-count:]]

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self.entries())
