"""
Trace transform computation stages.

Main Components:
    - SinogramGenerator: T-functional sinograms of a padded, rotated image
    - nearest_orthonormal_sinogram: alignment + nearest orthonormal projection
    - get_circus_function: P-functional reduction of sinogram columns
    - TraceTransformer: end-to-end orchestration
"""

from tracetransform.transform.sinogram import SinogramGenerator, sinogram_angles
from tracetransform.transform.orthonormal import (
    alignment_offsets,
    align_sinogram,
    nearest_orthonormal,
    nearest_orthonormal_sinogram,
)
from tracetransform.transform.circus import (
    FeatureMatrix,
    assemble_features,
    feature_labels,
    get_circus_function,
)
from tracetransform.transform.pipeline import TraceResult, TraceTransformer, run_trace_transform

__all__ = [
    "SinogramGenerator",
    "sinogram_angles",
    "alignment_offsets",
    "align_sinogram",
    "nearest_orthonormal",
    "nearest_orthonormal_sinogram",
    "FeatureMatrix",
    "assemble_features",
    "feature_labels",
    "get_circus_function",
    "TraceResult",
    "TraceTransformer",
    "run_trace_transform",
]
