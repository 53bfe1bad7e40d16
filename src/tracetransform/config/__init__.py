"""Configuration system for the trace transform."""

from .schema import TraceTransformConfig, OutputConfig
from .loader import load_config, save_config, merge_configs, substitute_params

__all__ = [
    "TraceTransformConfig",
    "OutputConfig",
    "load_config",
    "save_config",
    "merge_configs",
    "substitute_params",
]
