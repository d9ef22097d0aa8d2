"""Hysteresis-based autoscaling policy for the simulated cluster."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from ..config.schema import ClusterBounds, PolicyConfig

LOGGER = logging.getLogger(__name__)


class Complexity(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ClusterStatus(str, Enum):
    OPTIMAL = "OPTIMAL"
    STRAINED = "STRAINED"
    OVERLOAD = "OVERLOAD"
    IDLE = "IDLE"


class ScaleDirection(str, Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class ClusterConfig:
    node_count: int
    complexity: Complexity = Complexity.MEDIUM
    status: ClusterStatus = ClusterStatus.OPTIMAL

    def __post_init__(self) -> None:
        if self.node_count < 0:
            raise ValueError(f"node_count must be >= 0, got {self.node_count}")
        object.__setattr__(self, "complexity", Complexity(self.complexity))
        object.__setattr__(self, "status", ClusterStatus(self.status))

    def to_dict(self) -> dict:
        return {"node_count": self.node_count, "complexity": self.complexity.value, "status": self.status.value}


@dataclass(frozen=True)
class ScalingDecision:
    config: ClusterConfig
    reason: str
    direction: ScaleDirection
    previous_nodes: int


def derive_profile(
    node_count: int,
    direction: ScaleDirection,
    policy: Optional[PolicyConfig] = None,
) -> Tuple[Complexity, ClusterStatus]:
    """Single source of truth for the display fields derived from a scaling move."""
    policy = policy or PolicyConfig()
    if direction is ScaleDirection.DOWN:
        complexity = Complexity.LOW if node_count < policy.low_complexity_below else Complexity.MEDIUM
        return complexity, ClusterStatus.STRAINED
    complexity = Complexity.HIGH if node_count > policy.high_complexity_above else Complexity.MEDIUM
    return complexity, ClusterStatus.OPTIMAL


class AutoscalePolicy:
    """Decides node-count changes from the current CPU load.

    Load above ``scale_down_threshold`` sheds a fraction of the nodes, load
    below ``scale_up_threshold`` adds a fixed step, and anything in between is
    left alone. The gap between the two bands is the dead zone.
    """

    def __init__(self, policy: Optional[PolicyConfig] = None, bounds: Optional[ClusterBounds] = None) -> None:
        self.policy = policy or PolicyConfig()
        self.bounds = bounds or ClusterBounds()

    def target_nodes(self, cpu: float, node_count: int) -> Tuple[Optional[int], Optional[ScaleDirection]]:
        policy, bounds = self.policy, self.bounds
        if cpu > policy.scale_down_threshold:
            reduction = math.floor(node_count * policy.scale_down_fraction)
            return max(bounds.min_nodes, node_count - reduction), ScaleDirection.DOWN
        if cpu < policy.scale_up_threshold:
            return min(bounds.max_nodes, node_count + policy.scale_up_step), ScaleDirection.UP
        return None, None

    def evaluate(self, cpu: float, config: ClusterConfig) -> Optional[ScalingDecision]:
        """Return the new cluster config and reason, or ``None`` when nothing should change."""
        target, direction = self.target_nodes(cpu, config.node_count)
        if target is None or direction is None or target == config.node_count:
            return None

        complexity, status = derive_profile(target, direction, self.policy)
        proposed = replace(config, node_count=target, complexity=complexity, status=status)
        if proposed == config:
            return None

        if direction is ScaleDirection.DOWN:
            reason = f"Critical load detected. Reducing active nodes to {target}."
        else:
            reason = f"Available headroom. Expanding neural architecture to {target} nodes."

        LOGGER.info(
            "scaling_decision",
            extra={
                "current": config.node_count,
                "desired": target,
                "cpu": round(cpu, 2),
                "direction": direction.value,
            },
        )
        return ScalingDecision(config=proposed, reason=reason, direction=direction, previous_nodes=config.node_count)


def evaluate(cpu: float, config: ClusterConfig) -> Optional[ScalingDecision]:
    """Evaluate with the default thresholds and bounds."""
    return AutoscalePolicy().evaluate(cpu, config)
