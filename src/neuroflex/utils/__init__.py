"""Miscellaneous utilities used across modules."""

from .metrics import MetricsRegistry

__all__ = ["MetricsRegistry"]
