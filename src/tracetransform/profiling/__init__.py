"""
Profiling utilities for the trace transform.

GPU-aware timing of the pipeline stages, enabled with the `profile`
configuration flag.
"""

from .timers import CUDATimer, StageTimer, TimingRecord

__all__ = [
    "CUDATimer",
    "StageTimer",
    "TimingRecord",
]
