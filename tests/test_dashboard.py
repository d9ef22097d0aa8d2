"""Tests for the dashboard's data shaping."""

import random

import pandas as pd

from neuroflex.config import EngineConfig
from neuroflex.orchestration import ControlLoop
from neuroflex.ui.dashboard import history_frame


def test_history_frame_empty():
    snapshot = ControlLoop(EngineConfig(), rng=random.Random(0)).snapshot()
    df = history_frame(snapshot)
    assert df.empty
    assert list(df.columns) == ["cpu", "mem"]


def test_history_frame_indexed_by_sample_time():
    ticks = iter(range(100, 200))
    engine = ControlLoop(EngineConfig(), rng=random.Random(0), time_clock=lambda: next(ticks))
    for _ in range(3):
        engine.tick()
    snapshot = engine.snapshot()

    df = history_frame(snapshot)

    assert list(df.columns) == ["cpu", "mem"]
    assert isinstance(df.index, pd.DatetimeIndex)
    assert list(df.index) == list(pd.to_datetime([100_000, 101_000, 102_000], unit="ms"))
    assert df["cpu"].tolist() == [s.cpu for s in snapshot.history]
    assert df["mem"].tolist() == [s.mem for s in snapshot.history]
