import random
import sys
from datetime import datetime, timedelta
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from neuroflex.config import EngineConfig  # noqa: E402


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "engine: control loop and scheduling tests")
    config.addinivalue_line("markers", "narration: narrator client tests")


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWallClock:
    def __init__(self, start: datetime = datetime(2024, 5, 17, 9, 5, 3)) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Keep tests away from the real narration service."""
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_BASE_URL", raising=False)
    monkeypatch.delenv("NEUROFLEX_CONFIG", raising=False)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def wall_clock():
    return FakeWallClock()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def fast_config():
    """Engine config with millisecond timers and narration switched off."""
    return EngineConfig.model_validate(
        {
            "timing": {"tick_interval": 0.01, "autoscale_interval": 0.02, "narration_interval": 0.02},
            "narrator": {"enabled": False},
        }
    )
