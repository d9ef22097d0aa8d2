"""AI commentary for the event log.

Responsibility: Builds narration prompts and calls the remote text model with
a non-throwing fallback contract.
"""

from .client import (
    NARRATION_FALLBACK,
    PLAN_FALLBACK,
    NarratorClient,
    OpenAIChatBackend,
    PromptResult,
    TextBackend,
)
from .prompts import PromptRequest, build_narration_prompt, build_plan_prompt

__all__ = [
    "NARRATION_FALLBACK",
    "PLAN_FALLBACK",
    "NarratorClient",
    "OpenAIChatBackend",
    "PromptRequest",
    "PromptResult",
    "TextBackend",
    "build_narration_prompt",
    "build_plan_prompt",
]
