"""Config loading and dynamic instantiation utilities.

A session file is a JSON object with:
- "trainer": TrainerConfig fields (optional)
- "model": a {class, params} spec building the Optimisable model
- "mask": optional list of booleans, one per model parameter

Nested {class, params} specs are instantiated recursively, so a model's
constructor arguments can themselves be built from specs.
"""

from __future__ import annotations

import importlib
import json
from dataclasses import fields
from pathlib import Path
from typing import Any

from core.types import TrainerConfig
from trainers.model_trainer import ModelTrainer

__all__ = [
    "load_json",
    "import_class",
    "resolve_spec",
    "resolve_values",
    "apply_overrides",
    "trainer_config_from_dict",
    "load_trainer_config",
    "build_trainer",
    "load_session",
]


def load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def import_class(path: str) -> type[Any]:
    if ":" in path:
        module_name, class_name = path.split(":", 1)
    else:
        module_name, class_name = path.rsplit(".", 1)
    module = importlib.import_module(module_name)
    return getattr(module, class_name)


def resolve_spec(spec: Any, **extra_kwargs: Any) -> Any:
    """Instantiate an object from a {class, params} spec or return spec as-is."""
    if isinstance(spec, dict) and "class" in spec:
        cls = import_class(spec["class"])
        params = spec.get("params", {})
        resolved = resolve_values(params)
        resolved.update(extra_kwargs)
        return cls(**resolved)
    return resolve_values(spec)


def resolve_values(value: Any, *, skip_keys: set[str] | None = None) -> Any:
    if isinstance(value, dict):
        if "class" in value:
            return resolve_spec(value)
        resolved: dict[str, Any] = {}
        for key, val in value.items():
            if skip_keys and key in skip_keys:
                resolved[key] = val
            else:
                resolved[key] = resolve_values(val, skip_keys=skip_keys)
        return resolved
    if isinstance(value, list):
        return [resolve_values(v, skip_keys=skip_keys) for v in value]
    return value


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def apply_overrides(config: dict[str, Any], overrides: list[str]) -> dict[str, Any]:
    """Apply dotted ``key=value`` overrides; values are parsed as JSON when possible."""
    result = json.loads(json.dumps(config))
    for item in overrides:
        if "=" not in item:
            raise ValueError(f"Override must be key=value, got: {item}")
        path, raw_val = item.split("=", 1)
        keys = path.split(".")
        target = result
        for key in keys[:-1]:
            if key not in target or not isinstance(target[key], dict):
                target[key] = {}
            target = target[key]
        target[keys[-1]] = _parse_value(raw_val)
    return result


def trainer_config_from_dict(data: dict[str, Any]) -> TrainerConfig:
    """Build a TrainerConfig, rejecting unknown keys.

    Raises:
        ValueError: On unknown keys or invalid values.
    """
    known = {f.name for f in fields(TrainerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown trainer config keys: {', '.join(unknown)}")
    return TrainerConfig(**data)


def load_trainer_config(path: Path, overrides: list[str] | None = None) -> TrainerConfig:
    """Load a TrainerConfig from a JSON file of its fields."""
    data = load_json(path)
    if overrides:
        data = apply_overrides(data, overrides)
    return trainer_config_from_dict(data)


def build_trainer(spec: dict[str, Any]) -> ModelTrainer:
    """Build a ModelTrainer from a session spec (see module docstring)."""
    if "model" not in spec:
        raise ValueError("Session spec must provide a 'model' entry")
    model = resolve_spec(spec["model"])
    config = trainer_config_from_dict(spec.get("trainer") or {})
    return ModelTrainer(model, config, mask=spec.get("mask"))


def load_session(path: Path, overrides: list[str] | None = None) -> ModelTrainer:
    """Load a session spec from JSON, apply overrides and build the trainer."""
    spec = load_json(path)
    if overrides:
        spec = apply_overrides(spec, overrides)
    return build_trainer(spec)
