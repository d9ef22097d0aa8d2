"""Prompt templates for the narration service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..infra.autoscaling import ClusterConfig
from ..telemetry.models import SystemMetrics

NARRATION_SYSTEM_PROMPT = (
    'You are the self-aware kernel of "NeuroFlex", an adaptive neural compute cluster. '
    "You speak in terse, technical, strictly logical log lines."
)

NARRATION_TEMPLATE = """Current telemetry:
- CPU Load: {cpu:.1f}%
- Memory: {mem:.1f}%
- Temp: {temp:.1f}C
- Active Nodes: {nodes}
- Complexity Level: {complexity}
- System Status: {status}

Recent context:
{context}

Write one short technical log message (a single sentence) describing your current
resource-allocation or architecture decision.

Examples:
"Thermal gradient rising; pruning redundant synaptic pathways."
"Resources nominal. Widening hidden layers for heuristic accuracy."
"Load critical. Flushing caches and collapsing non-essential clusters."
"""

PLAN_TEMPLATE = """Analyze the following system metrics and give a 3-bullet optimization plan
for a neural network architecture running on this hardware.

Metrics:
CPU: {cpu:.1f}%
RAM: {mem:.1f}%
Latency: {latency:.0f}ms
"""

RECENT_CONTEXT_LIMIT = 3


@dataclass(frozen=True)
class PromptRequest:
    user_prompt: str
    system_prompt: Optional[str] = None


def build_narration_prompt(
    metrics: SystemMetrics,
    config: ClusterConfig,
    recent_messages: Sequence[str],
) -> PromptRequest:
    context = "\n".join(list(recent_messages)[-RECENT_CONTEXT_LIMIT:]) or "(no recent events)"
    prompt = NARRATION_TEMPLATE.format(
        cpu=metrics.cpu_load,
        mem=metrics.memory_usage,
        temp=metrics.temperature,
        nodes=config.node_count,
        complexity=config.complexity.value,
        status=config.status.value,
        context=context,
    )
    return PromptRequest(user_prompt=prompt, system_prompt=NARRATION_SYSTEM_PROMPT)


def build_plan_prompt(metrics: SystemMetrics) -> PromptRequest:
    return PromptRequest(
        user_prompt=PLAN_TEMPLATE.format(
            cpu=metrics.cpu_load,
            mem=metrics.memory_usage,
            latency=metrics.network_latency,
        )
    )
