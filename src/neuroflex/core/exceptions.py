"""Common exception hierarchy used across NeuroFlex."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


@dataclass
class NeuroflexError(RuntimeError):
    message: str
    code: str = "neuroflex_error"
    metadata: Dict[str, Any] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        super().__init__(self.message)
        if self.metadata is None:
            self.metadata = {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "metadata": self.metadata}


@dataclass
class ConfigError(NeuroflexError):
    code: str = "config_error"


@dataclass
class NarrationError(NeuroflexError):
    """Raised inside the narrator when the remote service gives nothing usable."""

    code: str = "narration_error"
