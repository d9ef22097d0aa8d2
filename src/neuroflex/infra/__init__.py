"""Cluster sizing.

Responsibility: Holds the cluster configuration value type and the autoscaling
decision function.
"""

from ..config.schema import ClusterBounds
from .autoscaling import (
    AutoscalePolicy,
    ClusterConfig,
    ClusterStatus,
    Complexity,
    ScaleDirection,
    ScalingDecision,
    derive_profile,
    evaluate,
)

INITIAL_CLUSTER = ClusterConfig(
    node_count=ClusterBounds().initial_nodes,
    complexity=Complexity.MEDIUM,
    status=ClusterStatus.OPTIMAL,
)

__all__ = [
    "AutoscalePolicy",
    "ClusterConfig",
    "ClusterStatus",
    "Complexity",
    "INITIAL_CLUSTER",
    "ScaleDirection",
    "ScalingDecision",
    "derive_profile",
    "evaluate",
]
