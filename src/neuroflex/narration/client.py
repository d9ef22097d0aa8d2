"""Narration client wrapping an OpenAI-compatible chat completion endpoint.

Both public coroutines degrade to fixed fallback strings instead of raising, so
the control loop can fire them off without guarding the call site.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol, Sequence

from openai import AsyncOpenAI

from ..config.schema import NarratorConfig
from ..core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from ..core.exceptions import NarrationError
from ..infra.autoscaling import ClusterConfig
from ..telemetry.models import SystemMetrics
from ..utils.metrics import MetricsRegistry
from .prompts import PromptRequest, build_narration_prompt, build_plan_prompt

LOGGER = logging.getLogger(__name__)

NARRATION_FALLBACK = "Telemetry link unstable. Running local heuristics."
PLAN_FALLBACK = "Unable to generate plan via neural link."
PLAN_MAX_OUTPUT_TOKENS = 400


@dataclass
class PromptResult:
    output_text: str
    latency_ms: int
    model_id: str
    usage: Dict[str, int] = field(default_factory=dict)


class TextBackend(Protocol):
    """Minimal surface the narrator needs from a text-generation service."""

    async def complete(self, request: PromptRequest, *, max_output_tokens: int) -> PromptResult: ...


class OpenAIChatBackend:
    """Async OpenAI chat completions backend."""

    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
    ) -> None:
        self._api_key = api_key or os.getenv("OPENAI_API_KEY")
        if not self._api_key:
            raise NarrationError(
                "OpenAI API key is required. Set the `OPENAI_API_KEY` environment "
                "variable or pass `api_key` explicitly.",
                code="missing_api_key",
            )
        self._client = AsyncOpenAI(api_key=self._api_key, base_url=base_url or os.getenv("OPENAI_BASE_URL"))
        self._model = model
        self._temperature = temperature

    async def complete(self, request: PromptRequest, *, max_output_tokens: int) -> PromptResult:
        messages: List[dict] = []
        if request.system_prompt:
            messages.append({"role": "system", "content": request.system_prompt})
        messages.append({"role": "user", "content": request.user_prompt})

        start_time = time.perf_counter()
        response = await self._client.chat.completions.create(
            model=self._model,
            messages=messages,
            temperature=self._temperature,
            max_tokens=max_output_tokens,
        )
        latency_ms = int((time.perf_counter() - start_time) * 1000)

        text = ""
        if response.choices:
            text = response.choices[0].message.content or ""
        usage = {}
        if response.usage is not None:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }
        return PromptResult(output_text=text, latency_ms=latency_ms, model_id=self._model, usage=usage)


class NarratorClient:
    """Asks the remote model for commentary on the current cluster state."""

    def __init__(
        self,
        config: Optional[NarratorConfig] = None,
        *,
        backend: Optional[TextBackend] = None,
        breaker: Optional[CircuitBreaker] = None,
    ) -> None:
        self.config = config or NarratorConfig()
        self._backend = backend
        self.breaker = breaker or CircuitBreaker(
            failure_threshold=self.config.failure_threshold,
            recovery_timeout=self.config.recovery_timeout,
        )

    def _get_backend(self) -> TextBackend:
        if self._backend is None:
            self._backend = OpenAIChatBackend(
                base_url=self.config.base_url,
                model=self.config.model,
                temperature=self.config.temperature,
            )
        return self._backend

    async def _complete(self, request: PromptRequest, *, max_output_tokens: int) -> str:
        if not self.config.enabled:
            raise NarrationError("Narration is disabled", code="narration_disabled")
        self.breaker.before_call()
        try:
            backend = self._get_backend()
            result = await asyncio.wait_for(
                backend.complete(request, max_output_tokens=max_output_tokens),
                timeout=self.config.timeout,
            )
            text = (result.output_text or "").strip()
            if not text:
                raise NarrationError("Empty response from narration service", code="empty_response")
        except Exception as exc:
            self.breaker.on_failure(exc)
            raise
        self.breaker.on_success()
        LOGGER.debug("narration_received", extra={"latency_ms": result.latency_ms, "model": result.model_id})
        return text

    async def narrate(
        self,
        metrics: SystemMetrics,
        config: ClusterConfig,
        recent_messages: Sequence[str] = (),
    ) -> str:
        """Return one short log line about the cluster, or the fallback text."""
        request = build_narration_prompt(metrics, config, recent_messages)
        try:
            text = await self._complete(request, max_output_tokens=self.config.max_output_tokens)
        except CircuitBreakerOpenError:
            LOGGER.info("narration_skipped", extra={"reason": "circuit_open"})
            MetricsRegistry.record_narration("fallback")
            return NARRATION_FALLBACK
        except Exception as exc:
            LOGGER.warning("narration_failed", extra={"error": repr(exc)})
            MetricsRegistry.record_narration("fallback")
            return NARRATION_FALLBACK
        MetricsRegistry.record_narration("ok")
        return text

    async def plan(self, metrics: SystemMetrics) -> str:
        """Return a short optimisation plan for ``metrics``, or the fallback text."""
        try:
            return await self._complete(build_plan_prompt(metrics), max_output_tokens=PLAN_MAX_OUTPUT_TOKENS)
        except Exception as exc:
            LOGGER.warning("plan_failed", extra={"error": repr(exc)})
            return PLAN_FALLBACK
