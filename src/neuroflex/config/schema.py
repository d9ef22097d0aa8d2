"""Pydantic schemas defining engine configuration."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field, model_validator


class TimingConfig(BaseModel):
    tick_interval: float = Field(1.0, gt=0)
    autoscale_interval: float = Field(2.0, gt=0)
    narration_interval: float = Field(8.0, gt=0)


class BufferConfig(BaseModel):
    history_length: int = Field(30, ge=1)
    log_capacity: int = Field(50, ge=1)


class ClusterBounds(BaseModel):
    min_nodes: int = Field(10, ge=1)
    max_nodes: int = Field(100, ge=1)
    initial_nodes: int = 30

    @model_validator(mode="after")
    def check_bounds(self) -> "ClusterBounds":
        if self.min_nodes > self.max_nodes:
            raise ValueError("min_nodes must not exceed max_nodes")
        if not self.min_nodes <= self.initial_nodes <= self.max_nodes:
            raise ValueError("initial_nodes must lie within [min_nodes, max_nodes]")
        return self


class PolicyConfig(BaseModel):
    scale_down_threshold: float = 85.0
    scale_up_threshold: float = 40.0
    scale_down_fraction: float = Field(0.2, gt=0, lt=1)
    scale_up_step: int = Field(5, ge=1)
    low_complexity_below: int = 30
    high_complexity_above: int = 60

    @model_validator(mode="after")
    def check_dead_zone(self) -> "PolicyConfig":
        # Disjoint trigger bands are what keeps the cluster from thrashing.
        if self.scale_up_threshold >= self.scale_down_threshold:
            raise ValueError("scale_up_threshold must be below scale_down_threshold")
        return self


class StressConfig(BaseModel):
    amount: float = Field(40.0, ge=0)
    duration: float = Field(5.0, gt=0)
    max_artificial_load: float = Field(80.0, ge=0, le=100)


class NarratorConfig(BaseModel):
    enabled: bool = True
    model: str = "gpt-4o-mini"
    base_url: Optional[str] = None
    temperature: float = Field(0.7, ge=0, le=2)
    max_output_tokens: int = Field(60, ge=1)
    timeout: float = Field(10.0, gt=0)
    gate: float = Field(0.7, ge=0, le=1)
    failure_threshold: int = Field(3, ge=1)
    recovery_timeout: float = Field(30.0, ge=0)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_logs: bool = False
    log_dir: Optional[str] = None


class EngineConfig(BaseModel):
    timing: TimingConfig = Field(default_factory=TimingConfig)
    buffers: BufferConfig = Field(default_factory=BufferConfig)
    cluster: ClusterBounds = Field(default_factory=ClusterBounds)
    policy: PolicyConfig = Field(default_factory=PolicyConfig)
    stress: StressConfig = Field(default_factory=StressConfig)
    narrator: NarratorConfig = Field(default_factory=NarratorConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
