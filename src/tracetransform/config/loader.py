"""
YAML run configurations for the trace transform.

A run file is validated against TraceTransformConfig after two rewriting
passes: ${NAME} placeholders are filled from runtime parameters (falling back
to the environment), then command-line overrides are deep-merged on top.

Example YAML:
    input_image: images/${IMAGE}.pgm
    tfunctionals: [radon, T1, T2]
    pfunctionals: [H1, H2, H3]
    device: cuda
    output:
      directory: results/${IMAGE}
      write_traces: true
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .schema import TraceTransformConfig

_PLACEHOLDER = re.compile(r'\$\{(\w+)\}')


def _lookup_param(name: str, params: Mapping[str, Any]) -> Any:
    if name in params:
        return params[name]

    value = os.getenv(name)
    if value is None:
        raise ValueError(
            f"Missing parameter: {name} (not a runtime parameter "
            f"{sorted(params)} nor an environment variable)"
        )
    return value


def substitute_params(obj: Any, params: Mapping[str, Any]) -> Any:
    """
    Fill ${NAME} placeholders throughout a parsed YAML document.

    A string that is exactly one placeholder takes the parameter's value
    unchanged (so numbers stay numbers); placeholders inside longer strings
    are replaced by their string form.

    Example:
        >>> substitute_params({"angle_step": "${step}", "tag": "run_${step}"}, {"step": 2})
        {'angle_step': 2, 'tag': 'run_2'}
    """
    if isinstance(obj, dict):
        return {key: substitute_params(value, params) for key, value in obj.items()}
    if isinstance(obj, list):
        return [substitute_params(item, params) for item in obj]
    if not isinstance(obj, str):
        return obj

    whole = _PLACEHOLDER.fullmatch(obj)
    if whole:
        return _lookup_param(whole.group(1), params)
    return _PLACEHOLDER.sub(lambda m: str(_lookup_param(m.group(1), params)), obj)


def load_yaml(path: Path) -> Dict[str, Any]:
    """
    Parse a run file into a mapping.

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: If the YAML is malformed or its top level is not a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        document = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(document, dict):
        raise ValueError(f"Configuration must be a YAML dict, got {type(document).__name__}")
    return document


def merge_configs(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Recursively merge `override` into a copy of `base`; nested dicts merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_configs(current, value)
        else:
            merged[key] = value
    return merged


def load_config(
    path: Path,
    runtime_params: Optional[Mapping[str, Any]] = None,
    overrides: Optional[Mapping[str, Any]] = None
) -> TraceTransformConfig:
    """
    Load, rewrite and validate a run configuration.

    Args:
        path: Run file
        runtime_params: Values for ${NAME} placeholders
        overrides: Values merged over the file (e.g. command-line arguments)

    Returns:
        Validated TraceTransformConfig

    Raises:
        FileNotFoundError: If the file is missing
        ValueError: On malformed YAML, a missing placeholder value, or a
            configuration that fails validation (including invalid
            functional selections)
    """
    raw = substitute_params(load_yaml(path), runtime_params or {})
    if overrides:
        raw = merge_configs(raw, overrides)

    try:
        return TraceTransformConfig(**raw)
    except ValueError as e:
        raise ValueError(f"Configuration validation failed for {path}:\n{e}") from e


def save_config(config: TraceTransformConfig, path: Path) -> None:
    """Write a configuration as YAML, keeping field order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.dump(config.model_dump(mode='json'), f, default_flow_style=False, sort_keys=False)
