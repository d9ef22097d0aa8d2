"""Streamlit dashboard for the NeuroFlex control loop.

Run with ``streamlit run src/neuroflex/ui/dashboard.py``. The page only reads
engine snapshots and forwards the user controls; all state lives in the engine
thread.
"""

from __future__ import annotations

import os
import time
from typing import List

import pandas as pd
import streamlit as st

from neuroflex.config import load_config
from neuroflex.core.logging import configure_logging
from neuroflex.monitoring.event_log import LogEntry, LogType
from neuroflex.orchestration import ControlLoop, EngineRunner, EngineSnapshot

LOG_COLORS = {
    LogType.INFO: "blue",
    LogType.WARNING: "orange",
    LogType.ERROR: "red",
    LogType.SYSTEM: "violet",
    LogType.AI: "green",
}

COMPLEXITY_LEVELS = ["LOW", "MEDIUM", "HIGH", "CRITICAL"]


@st.cache_resource(show_spinner=False)
def get_runner() -> EngineRunner:
    """One engine per server process, shared across reruns."""
    config = load_config(os.getenv("NEUROFLEX_CONFIG") or None)
    configure_logging(config.logging.level, json_logs=config.logging.json_logs)
    runner = EngineRunner(ControlLoop(config))
    runner.start()
    return runner


def history_frame(snapshot: EngineSnapshot) -> pd.DataFrame:
    if not snapshot.history:
        return pd.DataFrame(columns=["cpu", "mem"])
    df = pd.DataFrame([{"time": s.time, "cpu": s.cpu, "mem": s.mem} for s in snapshot.history])
    df["time"] = pd.to_datetime(df["time"], unit="ms")
    return df.set_index("time")


def render_controls(runner: EngineRunner, snapshot: EngineSnapshot) -> None:
    engine = runner.engine
    st.subheader("System control")

    autoscale = st.toggle("Auto-scaling", value=snapshot.autoscale_enabled)
    if autoscale != snapshot.autoscale_enabled:
        runner.call(engine.set_autoscale, autoscale)

    max_load = int(engine.config.stress.max_artificial_load)
    load = st.slider("Artificial pressure (%)", 0, max_load, int(snapshot.manual_load))
    if load != int(snapshot.manual_load):
        runner.call(engine.set_artificial_load, load)

    if st.button("Inject stress spike", use_container_width=True):
        runner.call(engine.inject_stress)
    if st.button("Run diagnostics", use_container_width=True):
        runner.call(engine.run_diagnostics)
    if st.button("Request optimisation plan", use_container_width=True):
        with st.spinner("Consulting narrator..."):
            st.session_state["plan"] = runner.plan()
    if st.session_state.get("plan"):
        with st.expander("Optimisation plan", expanded=True):
            st.markdown(st.session_state["plan"])

    if snapshot.stress.active:
        st.warning(f"Stress pulse active (+{snapshot.stress.amount:.0f}%)")


def render_telemetry(snapshot: EngineSnapshot) -> None:
    metrics, cluster = snapshot.metrics, snapshot.cluster
    st.subheader("Live telemetry")
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Nodes", cluster.node_count)
        st.metric("Temp", f"{metrics.temperature:.1f}°C")
    with col2:
        st.metric("Latency", f"{metrics.network_latency:.0f}ms")
        st.metric("Status", cluster.status.value)

    level = COMPLEXITY_LEVELS.index(cluster.complexity.value) + 1
    st.caption("Computational complexity")
    st.progress(level / len(COMPLEXITY_LEVELS), text=cluster.complexity.value)


def render_log(entries: List[LogEntry]) -> None:
    st.subheader("Neural log")
    if not entries:
        st.caption("Waiting for events...")
        return
    for entry in reversed(entries):
        color = LOG_COLORS.get(entry.type, "gray")
        st.markdown(f"`{entry.timestamp}` :{color}[**{entry.type.value}**] {entry.message}")


def main() -> None:
    st.set_page_config(page_title="NeuroFlex", layout="wide")
    st.title("NEUROFLEX")
    st.caption("Adaptive neural architecture")

    runner = get_runner()
    snapshot = runner.snapshot()

    left, center, right = st.columns([3, 6, 3])
    with left:
        render_controls(runner, snapshot)
        render_telemetry(snapshot)
    with center:
        st.subheader("CPU / memory")
        st.area_chart(history_frame(snapshot), height=320)
        st.metric("CPU load", f"{snapshot.metrics.cpu_load:.1f}%")
        st.metric("Memory", f"{snapshot.metrics.memory_usage:.1f}%")
    with right:
        render_log(list(snapshot.logs))

    time.sleep(runner.engine.config.timing.tick_interval)
    st.rerun()


if __name__ == "__main__":
    main()
