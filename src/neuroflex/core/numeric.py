"""Numeric helpers."""

from __future__ import annotations


def clamp(value: float, lower: float, upper: float) -> float:
    return min(upper, max(lower, value))
