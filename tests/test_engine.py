"""Tests for the control loop, its user controls and the thread bridge."""

import asyncio
import random

import pytest

from neuroflex.config import EngineConfig
from neuroflex.infra import INITIAL_CLUSTER, ClusterStatus
from neuroflex.monitoring import LogType
from neuroflex.narration import NARRATION_FALLBACK, NarratorClient, PromptResult
from neuroflex.orchestration import (
    DIAGNOSTICS_MESSAGE,
    STRESS_END_MESSAGE,
    ControlLoop,
    EngineRunner,
)
from neuroflex.telemetry import SystemMetrics

pytestmark = pytest.mark.engine


class FailingBackend:
    def __init__(self):
        self.calls = 0

    async def complete(self, request, *, max_output_tokens):
        self.calls += 1
        raise ConnectionError("quota exceeded")


class SlowBackend:
    """Sleeps through several ticks and records the history size around the call."""

    def __init__(self, delay):
        self.delay = delay
        self.engine = None
        self.history_sizes = []

    async def complete(self, request, *, max_output_tokens):
        self.history_sizes.append(len(self.engine.state.history))
        await asyncio.sleep(self.delay)
        self.history_sizes.append(len(self.engine.state.history))
        return PromptResult(output_text="Redistributing attention heads.", latency_ms=300, model_id="fake")


class EchoBackend:
    async def complete(self, request, *, max_output_tokens):
        return PromptResult(output_text="Rebalancing synaptic load.", latency_ms=1, model_id="fake")


def _engine(config=None, **kwargs):
    kwargs.setdefault("rng", random.Random(42))
    return ControlLoop(config or EngineConfig(), **kwargs)


def test_tick_updates_metrics_and_history():
    engine = _engine()
    for _ in range(35):
        metrics = engine.tick()
    assert engine.state.metrics == metrics
    assert len(engine.state.history) == 30


def test_autoscale_expands_idle_cluster_and_logs_reason():
    engine = _engine()
    decision = engine.evaluate_autoscale()  # initial cpu is 20%

    assert decision is not None
    assert engine.state.cluster.node_count == 35
    entry = engine.state.log.entries()[-1]
    assert entry.type is LogType.SYSTEM
    assert entry.message == "Available headroom. Expanding neural architecture to 35 nodes."


def test_autoscale_disabled_leaves_cluster_alone():
    engine = _engine()
    engine.set_autoscale(False)
    assert engine.evaluate_autoscale() is None
    assert engine.state.cluster.node_count == 30
    assert len(engine.state.log) == 0
    assert engine.toggle_autoscale() is True


def test_dead_zone_produces_no_log_entries():
    engine = _engine()
    engine.state.metrics = SystemMetrics(cpu_load=60, memory_usage=50, network_latency=80, temperature=64)
    for _ in range(5):
        assert engine.evaluate_autoscale() is None
    assert len(engine.state.log) == 0


def test_overload_scales_down():
    engine = _engine()
    engine.state.metrics = SystemMetrics(cpu_load=95, memory_usage=80, network_latency=100, temperature=78)
    engine.evaluate_autoscale()
    assert engine.state.cluster.node_count == 24
    assert engine.state.cluster.status == ClusterStatus.STRAINED


def test_manual_load_is_clamped():
    engine = _engine()
    assert engine.set_artificial_load(120) == 80
    assert engine.set_artificial_load(-3) == 0
    assert engine.set_artificial_load(25) == 25


def test_diagnostics_entry():
    engine = _engine()
    entry = engine.run_diagnostics()
    assert entry.type is LogType.INFO
    assert entry.message == DIAGNOSTICS_MESSAGE


def test_tick_releases_stress_without_event_loop(clock):
    engine = _engine(clock=clock)
    engine.inject_stress()
    assert engine.snapshot().effective_load == 40

    clock.advance(6)
    engine.tick()
    assert not engine.state.stress.active
    assert engine.state.log.entries()[-1].message == STRESS_END_MESSAGE


def test_failed_narration_appends_single_fallback_entry():
    config = EngineConfig.model_validate({"narrator": {"gate": 0.0}})
    backend = FailingBackend()
    engine = _engine(config, narrator=NarratorClient(config.narrator, backend=backend))

    async def scenario():
        await engine.start()
        try:
            assert engine.request_narration() is True
            await engine._narration_task
            await engine._narrations.join()
        finally:
            await engine.stop()

    asyncio.run(scenario())

    ai_entries = [e for e in engine.state.log if e.type is LogType.AI]
    assert [e.message for e in ai_entries] == [NARRATION_FALLBACK]
    assert not any(e.type is LogType.ERROR for e in engine.state.log)
    assert backend.calls == 1


def test_narration_gate_blocks_calls():
    config = EngineConfig.model_validate({"narrator": {"gate": 1.0}})
    engine = _engine(config, narrator=NarratorClient(config.narrator, backend=EchoBackend()))

    async def scenario():
        return [engine.request_narration() for _ in range(20)]

    assert asyncio.run(scenario()) == [False] * 20


def test_only_one_narration_in_flight():
    config = EngineConfig.model_validate({"narrator": {"gate": 0.0}})
    engine = _engine(config, narrator=NarratorClient(config.narrator, backend=EchoBackend()))

    async def scenario():
        first = engine.request_narration()
        second = engine.request_narration()
        await engine._narration_task
        return first, second

    assert asyncio.run(scenario()) == (True, False)
    assert [e.message for e in engine.state.log] == ["Rebalancing synaptic load."]


def test_run_ticks_and_cleans_up(fast_config):
    engine = _engine(fast_config)
    asyncio.run(engine.run(duration=0.15))

    assert len(engine.state.history) >= 3
    assert engine.pending_tasks() == []
    assert not engine.running


def test_stop_cancels_pending_stress_release(fast_config):
    engine = _engine(fast_config)

    async def scenario():
        await engine.start()
        engine.inject_stress(duration=60)
        assert len(engine.pending_tasks()) == 5
        await engine.stop()

    asyncio.run(scenario())
    assert engine.pending_tasks() == []
    assert engine.state.stress.active


def test_stress_release_scheduled_on_loop(fast_config):
    engine = _engine(fast_config)

    async def scenario():
        await engine.start()
        try:
            engine.inject_stress(duration=0.05)
            await asyncio.sleep(0.15)
        finally:
            await engine.stop()

    asyncio.run(scenario())
    assert not engine.state.stress.active
    messages = [e.message for e in engine.state.log]
    assert messages.count(STRESS_END_MESSAGE) == 1


def test_snapshot_is_detached_from_state():
    engine = _engine()
    engine.tick()
    snapshot = engine.snapshot()
    engine.tick()
    engine.run_diagnostics()

    assert len(snapshot.history) == 1
    assert snapshot.logs == ()
    payload = snapshot.to_dict()
    assert payload["cluster"]["node_count"] == 30
    assert payload["stress"]["phase"] == "idle"


def test_runner_bridges_calls_from_another_thread(fast_config):
    runner = EngineRunner(_engine(fast_config))
    runner.start()
    try:
        assert runner.alive
        assert runner.call(runner.engine.set_artificial_load, 30) == 30
        runner.call(runner.engine.run_diagnostics)
        snapshot = runner.snapshot()
        assert snapshot.manual_load == 30
        assert snapshot.logs[-1].message == DIAGNOSTICS_MESSAGE
    finally:
        runner.stop()
    assert not runner.alive
    with pytest.raises(RuntimeError):
        runner.snapshot()


def test_slow_narration_does_not_block_ticks():
    config = EngineConfig.model_validate(
        {
            "timing": {"tick_interval": 0.01, "autoscale_interval": 0.02, "narration_interval": 0.02},
            "narrator": {"gate": 0.0},
        }
    )
    backend = SlowBackend(delay=0.3)
    engine = _engine(config, narrator=NarratorClient(config.narrator, backend=backend))
    backend.engine = engine

    asyncio.run(engine.run(duration=0.5))

    before, after = backend.history_sizes[:2]
    assert after - before >= 10
    ai_entries = [e for e in engine.state.log if e.type is LogType.AI]
    assert [e.message for e in ai_entries] == ["Redistributing attention heads."]
    assert engine.pending_tasks() == []


def test_narration_consumer_requires_started_engine():
    engine = _engine()
    with pytest.raises(RuntimeError):
        asyncio.run(engine._consume_narrations())


def test_runner_stop_is_idempotent(fast_config):
    runner = EngineRunner(_engine(fast_config))
    runner.stop()
    runner.start()
    runner.stop()
    runner.stop()
    assert not runner.alive
    assert not runner.engine.running


def test_initial_cluster_matches_engine_defaults():
    engine = _engine()
    assert engine.state.cluster == INITIAL_CLUSTER
    assert INITIAL_CLUSTER.node_count == EngineConfig().cluster.initial_nodes
