"""
Orthonormal sinogram correction for Hermite-class P-functionals.

The correction has two steps:
1. Alignment: every column is shifted so that its weighted median lands on a
   common row. Columns whose median sits above the nominal center move down
   less than those below it; the matrix grows by |max| + |min| rows.
2. Projection: the aligned matrix is replaced by its nearest matrix with
   orthonormal rows/columns (Frobenius norm), U I V^T from a full SVD with the
   singular values discarded.

Conventions:
    nominal center  = floor((rows - 1) / 2)
    offset[col]     = weighted_median(column) - nominal center
    (row, col)      -> (max(offset) + row - offset[col], col)
    new center      = nominal center + max(offset)

The weighted median is the first index, scanning from row 0, at which the
cumulative (non-negative shifted) weight reaches half of the column total.

The input sinogram is never modified; a new tensor is returned.
"""

import logging
from typing import Tuple

import torch

from tracetransform.backend.base import ComputeBackend
from tracetransform.errors import AlignmentError
from tracetransform.kernels.auxiliary import weighted_median

logger = logging.getLogger(__name__)


def sinogram_center(rows: int) -> int:
    """Nominal center row of a sinogram, floor((rows - 1) / 2)."""
    return (rows - 1) // 2


def alignment_offsets(sinogram: torch.Tensor) -> torch.Tensor:
    """
    Signed offset of each column's weighted median from the nominal center.

    Args:
        sinogram: Sinogram [rows, cols]

    Returns:
        Offsets [cols] (int64)
    """
    rows, cols = sinogram.shape
    if rows == 0 or cols == 0:
        raise AlignmentError(f"Cannot align an empty sinogram of shape {(rows, cols)}")

    medians = weighted_median(sinogram.t())
    return medians - sinogram_center(rows)


def align_sinogram(
    backend: ComputeBackend,
    sinogram: torch.Tensor,
    offsets: torch.Tensor
) -> Tuple[torch.Tensor, int]:
    """
    Shift every column so that all weighted medians share one row.

    Args:
        backend: Compute backend
        sinogram: Sinogram [rows, cols]
        offsets: Column offsets from alignment_offsets() [cols]

    Returns:
        (aligned sinogram [rows + padding, cols], max offset)

    Raises:
        AlignmentError: If all offsets lie strictly on one side of the center
    """
    rows, cols = sinogram.shape
    lowest = int(offsets.min().item())
    highest = int(offsets.max().item())
    if lowest > 0 or highest < 0:
        raise AlignmentError(
            f"Degenerate sinogram alignment: column offsets range [{lowest}, {highest}] "
            f"does not straddle the center"
        )

    padding = abs(highest) + abs(lowest)
    aligned = backend.zeros((rows + padding, cols))

    source_rows = torch.arange(rows, device=sinogram.device).unsqueeze(1)
    target_rows = highest + source_rows - offsets.to(sinogram.device).unsqueeze(0)
    aligned.scatter_(0, target_rows, sinogram.to(aligned.dtype))

    logger.debug(f"Aligned sinogram with offsets [{lowest}, {highest}], padding {padding}")
    return aligned, highest


def nearest_orthonormal(backend: ComputeBackend, matrix: torch.Tensor) -> torch.Tensor:
    """
    Nearest matrix with orthonormal rows/columns under the Frobenius norm.

    Uses the full SVD U S V^T and returns U I V^T, with I the (rectangular)
    identity of the matrix shape. The decomposition runs in float64; the
    result has the input dtype.

    Args:
        backend: Compute backend providing the SVD
        matrix: Dense matrix [m, n]

    Returns:
        Orthonormal projection [m, n]
    """
    rows, cols = matrix.shape
    work = matrix.to(torch.float64)
    U, _, Vh = backend.svd(work)
    identity = torch.eye(rows, cols, dtype=work.dtype, device=work.device)
    return (U @ identity @ Vh).to(matrix.dtype)


def nearest_orthonormal_sinogram(
    backend: ComputeBackend,
    sinogram: torch.Tensor
) -> Tuple[torch.Tensor, int]:
    """
    Align a sinogram and project it onto the nearest orthonormal matrix.

    Args:
        backend: Compute backend
        sinogram: Sinogram [rows, cols]

    Returns:
        (corrected sinogram [rows + padding, cols], alignment center row)

    Raises:
        AlignmentError: On empty or degenerate input
    """
    offsets = alignment_offsets(sinogram)
    aligned, highest = align_sinogram(backend, sinogram, offsets)
    corrected = nearest_orthonormal(backend, aligned)
    new_center = sinogram_center(sinogram.shape[0]) + highest

    logger.debug(
        f"Orthonormal sinogram {tuple(corrected.shape)}, center row {new_center}"
    )
    return corrected, new_center
