"""
Trace transform feature extraction.

Computes rotation, scale and translation invariant image signatures: a
T-functional is applied along every projection line of the rotated image
(producing a sinogram), then a P-functional along every sinogram column.

Example:
    >>> from tracetransform import run_trace_transform
    >>> result = run_trace_transform(image, ["radon", "T1"], ["P1", "P2"], device="cpu")
    >>> result.features.labels
    ['Radon-P1', 'Radon-P2', 'T1-P1', 'T1-P2']
"""

from tracetransform.errors import (
    TraceTransformError,
    FunctionalSpecError,
    AlignmentError,
    BackendError,
    OutOfMemory,
    KernelLaunchError,
)
from tracetransform.transform import (
    FeatureMatrix,
    TraceResult,
    TraceTransformer,
    run_trace_transform,
)

__all__ = [
    "TraceTransformError",
    "FunctionalSpecError",
    "AlignmentError",
    "BackendError",
    "OutOfMemory",
    "KernelLaunchError",
    "FeatureMatrix",
    "TraceResult",
    "TraceTransformer",
    "run_trace_transform",
]

__version__ = "1.0.0"
