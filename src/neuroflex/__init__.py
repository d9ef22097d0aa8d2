"""NeuroFlex adaptive telemetry and control-loop engine."""

__version__ = "1.0.4"

__all__ = [
    "config",
    "core",
    "infra",
    "monitoring",
    "narration",
    "orchestration",
    "telemetry",
    "utils",
]
