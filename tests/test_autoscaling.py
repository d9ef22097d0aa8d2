"""Tests for the hysteresis autoscale policy."""

import random

import pytest
from pydantic import ValidationError

from neuroflex.config import ClusterBounds, PolicyConfig
from neuroflex.infra import (
    AutoscalePolicy,
    ClusterConfig,
    ClusterStatus,
    Complexity,
    ScaleDirection,
    derive_profile,
    evaluate,
)


def _config(nodes, complexity=Complexity.MEDIUM, status=ClusterStatus.OPTIMAL):
    return ClusterConfig(node_count=nodes, complexity=complexity, status=status)


def test_critical_load_sheds_a_fifth_of_the_nodes():
    decision = evaluate(90, _config(50))
    assert decision is not None
    assert decision.config.node_count == 40
    assert decision.config.status == ClusterStatus.STRAINED
    assert decision.config.complexity == Complexity.MEDIUM
    assert decision.direction is ScaleDirection.DOWN
    assert decision.reason == "Critical load detected. Reducing active nodes to 40."


def test_scale_down_clamps_to_min_nodes():
    decision = evaluate(90, _config(12))
    assert decision is not None
    assert decision.config.node_count == 10
    assert decision.config.complexity == Complexity.LOW
    assert decision.previous_nodes == 12


def test_scale_down_at_min_nodes_is_a_no_op():
    assert evaluate(99, _config(10)) is None


def test_headroom_adds_fixed_step():
    decision = evaluate(30, _config(30))
    assert decision is not None
    assert decision.config.node_count == 35
    assert decision.config.complexity == Complexity.MEDIUM
    assert decision.config.status == ClusterStatus.OPTIMAL
    assert decision.reason == "Available headroom. Expanding neural architecture to 35 nodes."


def test_large_cluster_reports_high_complexity():
    decision = evaluate(10, _config(60))
    assert decision.config.node_count == 65
    assert decision.config.complexity == Complexity.HIGH


def test_scale_up_clamps_to_max_nodes():
    assert evaluate(10, _config(98)).config.node_count == 100
    assert evaluate(10, _config(100)) is None


@pytest.mark.parametrize("cpu", [40, 40.0001, 55, 70, 84.9999, 85])
@pytest.mark.parametrize("nodes", [10, 30, 61, 100])
def test_dead_zone_never_scales(cpu, nodes):
    for complexity in Complexity:
        for status in ClusterStatus:
            assert evaluate(cpu, _config(nodes, complexity, status)) is None


def test_band_edges():
    assert evaluate(85.0001, _config(50)).direction is ScaleDirection.DOWN
    assert evaluate(39.9999, _config(50)).direction is ScaleDirection.UP


def test_node_count_never_leaves_bounds():
    policy = AutoscalePolicy()
    driver = random.Random(11)
    config = _config(30)
    for _ in range(1000):
        decision = policy.evaluate(driver.uniform(0, 100), config)
        if decision is not None:
            assert decision.config != config
            config = decision.config
        assert 10 <= config.node_count <= 100


def test_derive_profile_is_single_source_of_display_fields():
    assert derive_profile(29, ScaleDirection.DOWN) == (Complexity.LOW, ClusterStatus.STRAINED)
    assert derive_profile(30, ScaleDirection.DOWN) == (Complexity.MEDIUM, ClusterStatus.STRAINED)
    assert derive_profile(60, ScaleDirection.UP) == (Complexity.MEDIUM, ClusterStatus.OPTIMAL)
    assert derive_profile(61, ScaleDirection.UP) == (Complexity.HIGH, ClusterStatus.OPTIMAL)


def test_custom_bounds_and_thresholds():
    policy = AutoscalePolicy(
        PolicyConfig(scale_down_threshold=70, scale_up_threshold=20, scale_up_step=2),
        ClusterBounds(min_nodes=4, max_nodes=12, initial_nodes=8),
    )
    assert policy.evaluate(75, _config(8)).config.node_count == 7
    assert policy.evaluate(60, _config(8)) is None
    assert policy.evaluate(10, _config(11)).config.node_count == 12


def test_policy_rejects_overlapping_bands():
    with pytest.raises(ValidationError):
        PolicyConfig(scale_down_threshold=40, scale_up_threshold=85)


def test_cluster_config_coerces_enum_values():
    config = ClusterConfig(node_count=20, complexity="HIGH", status="IDLE")
    assert config.complexity is Complexity.HIGH
    assert config.status is ClusterStatus.IDLE
    with pytest.raises(ValueError):
        ClusterConfig(node_count=-1)
