"""Helpers for reading engine configuration files."""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, MutableMapping, Optional

import yaml
from pydantic import ValidationError

from ..core.exceptions import ConfigError
from .schema import EngineConfig


def _merge_dict(base: MutableMapping[str, Any], updates: Mapping[str, Any]) -> MutableMapping[str, Any]:
    for key, value in updates.items():
        if isinstance(value, Mapping) and isinstance(base.get(key), Mapping):
            base[key] = _merge_dict(deepcopy(base[key]), value)
        else:
            base[key] = deepcopy(value)
    return base


def _parse_override(override: str) -> Dict[str, Any]:
    if "=" not in override:
        raise ConfigError(f"Override '{override}' must be in key=value format")
    key, raw_value = override.split("=", 1)
    # JSON first so numbers and booleans keep their types
    try:
        value = json.loads(raw_value)
    except json.JSONDecodeError:
        value = raw_value
    nested_keys = key.strip().split(".")
    current: Dict[str, Any] = {}
    cursor = current
    for nested_key in nested_keys[:-1]:
        cursor[nested_key] = {}
        cursor = cursor[nested_key]
    cursor[nested_keys[-1]] = value
    return current


def load_config(path: str | Path | None = None, overrides: Optional[Iterable[str]] = None) -> EngineConfig:
    """Load an :class:`EngineConfig` from YAML, applying dotted ``key=value`` overrides.

    Without a path the built-in defaults are used.
    """
    payload: Dict[str, Any] = {}
    if path is not None:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        if not isinstance(payload, Mapping):
            raise ConfigError(f"Config file {path} must contain a mapping at the top level")
        payload = deepcopy(dict(payload))

    if overrides:
        for override in overrides:
            payload = dict(_merge_dict(payload, _parse_override(override)))

    try:
        return EngineConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(
            "Invalid engine configuration",
            metadata={"errors": exc.errors(include_url=False)},
        ) from exc


def dump_config(config: EngineConfig) -> str:
    """Render a config back to YAML."""
    return yaml.safe_dump(json.loads(config.model_dump_json()), sort_keys=False)
