"""Asyncio control loop driving telemetry, autoscaling and narration.

Three periodic tasks share one event loop: the metrics tick, the autoscale
evaluation and the narration gate. Every mutation of :class:`EngineState`
happens on the loop thread. Narration is the only slow call; it runs as a
background task and hands its text to a queue whose consumer appends it to the
event log.
"""

from __future__ import annotations

import asyncio
import logging
import random
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional

from ..config.schema import EngineConfig
from ..core.numeric import clamp
from ..infra.autoscaling import AutoscalePolicy, ScalingDecision
from ..monitoring.event_log import LogEntry, LogType
from ..narration.client import NarratorClient
from ..telemetry.models import SystemMetrics
from ..telemetry.simulator import MetricsSimulator, SimulatorLimits
from ..utils.metrics import MetricsRegistry
from .state import EngineSnapshot, EngineState
from .stress import StressInjector, StressState

LOGGER = logging.getLogger(__name__)

DIAGNOSTICS_MESSAGE = "System diagnostics completed. All metrics within tolerance."


class ControlLoop:
    """Owns the engine state and the timers that advance it."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        *,
        rng: Optional[random.Random] = None,
        narrator: Optional[NarratorClient] = None,
        clock: Callable[[], float] = time.monotonic,
        time_clock: Optional[Callable[[], float]] = None,
        wall_clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.rng = rng or random.Random()
        self.state = EngineState.initial(self.config, time_clock=time_clock, wall_clock=wall_clock)
        self.simulator = MetricsSimulator(
            self.rng,
            SimulatorLimits(max_artificial_load=self.config.stress.max_artificial_load),
        )
        self.policy = AutoscalePolicy(self.config.policy, self.config.cluster)
        self.stress = StressInjector(self.config.stress, clock=clock)
        self.narrator = narrator or NarratorClient(self.config.narrator)

        self._tasks: List[asyncio.Task] = []
        self._stress_task: Optional[asyncio.Task] = None
        self._narration_task: Optional[asyncio.Task] = None
        self._narrations: Optional[asyncio.Queue[str]] = None
        self._running = False

        MetricsRegistry.record_nodes(self.state.cluster.node_count)

    # --- single steps -------------------------------------------------

    def tick(self) -> SystemMetrics:
        """Advance the simulation by one sample."""
        self.stress.release_if_due(self.state)
        load = self.stress.effective_load(self.state)
        metrics = self.simulator.advance(self.state.metrics, self.state.cluster.node_count, load, self.state.history)
        self.state.metrics = metrics
        MetricsRegistry.record_tick(metrics.cpu_load, metrics.memory_usage, load)
        return metrics

    def evaluate_autoscale(self) -> Optional[ScalingDecision]:
        """Apply the autoscale policy to the latest sample when autoscaling is on."""
        if not self.state.autoscale_enabled:
            return None
        decision = self.policy.evaluate(self.state.metrics.cpu_load, self.state.cluster)
        if decision is None:
            return None
        self.state.cluster = decision.config
        self.state.log.append(LogType.SYSTEM, decision.reason)
        MetricsRegistry.record_nodes(decision.config.node_count)
        MetricsRegistry.record_scaling(decision.direction.value)
        return decision

    def should_narrate(self) -> bool:
        return self.config.narrator.enabled and self.rng.random() > self.config.narrator.gate

    async def narrate_once(self) -> str:
        """Ask the narrator about the current snapshot without touching the log."""
        state = self.state
        return await self.narrator.narrate(state.metrics, state.cluster, state.log.recent_messages(3))

    def apply_narration(self, text: str) -> LogEntry:
        return self.state.log.append(LogType.AI, text)

    def request_narration(self) -> bool:
        """Start a background narration if the gate opens and none is in flight."""
        if self._narration_task is not None and not self._narration_task.done():
            return False
        if not self.should_narrate():
            return False
        self._narration_task = asyncio.get_running_loop().create_task(self._narrate_in_background())
        return True

    async def _narrate_in_background(self) -> None:
        text = await self.narrate_once()
        if self._narrations is not None:
            await self._narrations.put(text)
        else:
            self.apply_narration(text)

    async def _consume_narrations(self) -> None:
        queue = self._narrations
        if queue is None:
            raise RuntimeError("Narration queue is only available after start()")
        while True:
            text = await queue.get()
            self.apply_narration(text)
            queue.task_done()

    # --- user controls ------------------------------------------------

    def set_autoscale(self, enabled: bool) -> None:
        self.state.autoscale_enabled = bool(enabled)
        LOGGER.info("autoscale_toggled", extra={"enabled": self.state.autoscale_enabled})

    def toggle_autoscale(self) -> bool:
        self.set_autoscale(not self.state.autoscale_enabled)
        return self.state.autoscale_enabled

    def set_artificial_load(self, value: float) -> float:
        self.state.manual_load = clamp(float(value), 0.0, self.config.stress.max_artificial_load)
        return self.state.manual_load

    def inject_stress(self, amount: Optional[float] = None, duration: Optional[float] = None) -> StressState:
        stress = self.stress.inject(self.state, amount, duration)
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop: the next tick releases the pulse once it is due.
            return stress
        if self._stress_task is not None:
            self._stress_task.cancel()
        self._stress_task = loop.create_task(self._release_stress_later(stress.remaining(self.stress.clock())))
        return stress

    async def _release_stress_later(self, delay: float) -> None:
        await asyncio.sleep(delay)
        self.stress.release_if_due(self.state)

    def run_diagnostics(self) -> LogEntry:
        return self.state.log.append(LogType.INFO, DIAGNOSTICS_MESSAGE)

    async def request_plan(self) -> str:
        return await self.narrator.plan(self.state.metrics)

    def snapshot(self) -> EngineSnapshot:
        state = self.state
        return EngineSnapshot(
            metrics=state.metrics,
            cluster=state.cluster,
            history=tuple(state.history.samples()),
            logs=state.log.entries(),
            autoscale_enabled=state.autoscale_enabled,
            manual_load=state.manual_load,
            effective_load=self.stress.effective_load(state),
            stress=state.stress,
        )

    # --- scheduling ---------------------------------------------------

    async def _periodic(self, name: str, interval: float, callback: Callable[[], object]) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                callback()
            except Exception:
                LOGGER.exception("periodic_task_failed", extra={"task": name})

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return
        timing = self.config.timing
        loop = asyncio.get_running_loop()
        self._narrations = asyncio.Queue()
        self._tasks = [
            loop.create_task(self._periodic("tick", timing.tick_interval, self.tick)),
            loop.create_task(self._periodic("autoscale", timing.autoscale_interval, self.evaluate_autoscale)),
            loop.create_task(self._periodic("narration", timing.narration_interval, self.request_narration)),
            loop.create_task(self._consume_narrations()),
        ]
        self._running = True
        LOGGER.info(
            "control_loop_started",
            extra={"nodes": self.state.cluster.node_count, "tick_interval": timing.tick_interval},
        )

    async def stop(self) -> None:
        """Cancel every timer, the pending stress release and any in-flight narration."""
        pending = list(self._tasks)
        for task in (self._stress_task, self._narration_task):
            if task is not None:
                pending.append(task)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._tasks = []
        self._stress_task = None
        self._narration_task = None
        self._narrations = None
        if self._running:
            LOGGER.info("control_loop_stopped")
        self._running = False

    async def run(self, duration: Optional[float] = None) -> None:
        """Run until ``duration`` seconds pass, or until cancelled."""
        await self.start()
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            await self.stop()

    def pending_tasks(self) -> List[asyncio.Task]:
        tasks = list(self._tasks)
        tasks.extend(t for t in (self._stress_task, self._narration_task) if t is not None)
        return [t for t in tasks if not t.done()]


async def run_for(engine: ControlLoop, duration: float, on_tick: Optional[Callable[[EngineSnapshot], Awaitable[None]]] = None) -> None:
    """Run ``engine`` for ``duration`` seconds, calling ``on_tick`` once per tick interval."""
    await engine.start()
    try:
        deadline = time.monotonic() + duration
        while time.monotonic() < deadline:
            await asyncio.sleep(engine.config.timing.tick_interval)
            if on_tick is not None:
                await on_tick(engine.snapshot())
    finally:
        await engine.stop()
