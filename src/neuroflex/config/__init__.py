"""Configuration loading utilities.

Responsibility: Loads and validates engine configuration (timing, buffer sizes,
cluster bounds, policy thresholds, narrator settings) with override support.
"""

from .loader import dump_config, load_config
from .schema import (
    BufferConfig,
    ClusterBounds,
    EngineConfig,
    LoggingConfig,
    NarratorConfig,
    PolicyConfig,
    StressConfig,
    TimingConfig,
)

__all__ = [
    "load_config",
    "dump_config",
    "EngineConfig",
    "BufferConfig",
    "ClusterBounds",
    "LoggingConfig",
    "NarratorConfig",
    "PolicyConfig",
    "StressConfig",
    "TimingConfig",
]
