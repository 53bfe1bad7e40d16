"""
Circus function engine.

Reduces each column of a sinogram to one value per P-functional, and
assembles the per-(T, P) circus functions into the final feature matrix.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
import torch

from tracetransform.backend.base import ComputeBackend
from tracetransform.functionals.registry import FunctionalSpec


@dataclass
class FeatureMatrix:
    """
    Trace transform features of one image.

    Attributes:
        values: Feature values [angles, T * P], host resident
        labels: Column labels "<T>-<P>", T-outer / P-inner order
    """

    values: np.ndarray
    labels: List[str]

    def __post_init__(self):
        if self.values.ndim != 2:
            raise ValueError(f"Feature matrix must be 2D, got shape {self.values.shape}")
        if self.values.shape[1] != len(self.labels):
            raise ValueError(
                f"Feature matrix has {self.values.shape[1]} columns "
                f"but {len(self.labels)} labels"
            )

    @property
    def shape(self):
        return self.values.shape

    def column(self, label: str) -> np.ndarray:
        """Circus function for one "<T>-<P>" label."""
        try:
            index = self.labels.index(label)
        except ValueError:
            raise KeyError(f"No feature column labelled {label!r}") from None
        return self.values[:, index]


def feature_labels(
    tfunctionals: Sequence[FunctionalSpec],
    pfunctionals: Sequence[FunctionalSpec]
) -> List[str]:
    """Column labels "<T>-<P>" in T-outer, P-inner order."""
    return [f"{t.name}-{p.name}" for t in tfunctionals for p in pfunctionals]


def get_circus_function(
    backend: ComputeBackend,
    sinogram: torch.Tensor,
    pfunctional: FunctionalSpec,
    center: Optional[int] = None
) -> torch.Tensor:
    """
    Apply a P-functional to every column of a sinogram.

    Args:
        backend: Compute backend
        sinogram: Sinogram, corrected or not [rows, cols]
        pfunctional: Resolved P-functional
        center: Alignment center from the orthonormal corrector (Hermite only)

    Returns:
        Circus function [cols]
    """
    if pfunctional.orthonormal and center is None:
        raise ValueError(f"{pfunctional.name} requires the alignment center of a corrected sinogram")
    return backend.circus(sinogram, pfunctional, center)


def assemble_features(columns: Sequence[np.ndarray], labels: Sequence[str], num_angles: int) -> FeatureMatrix:
    """
    Stack host circus functions into a feature matrix.

    Args:
        columns: One circus function [angles] per label, in label order
        labels: Column labels
        num_angles: Number of sampled angles (row count when there are no columns)

    Returns:
        FeatureMatrix [angles, len(labels)]
    """
    if len(columns) != len(labels):
        raise ValueError(f"Got {len(columns)} circus functions for {len(labels)} labels")

    if columns:
        values = np.stack(columns, axis=1)
    else:
        values = np.zeros((num_angles, 0), dtype=np.float32)

    if values.shape[0] != num_angles:
        raise ValueError(f"Circus functions have {values.shape[0]} rows, expected {num_angles}")

    return FeatureMatrix(values=values, labels=list(labels))
