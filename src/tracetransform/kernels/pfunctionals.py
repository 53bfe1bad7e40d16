"""
P-functional (circus function) kernels.

Each kernel reduces a batch of sinogram columns [B, N] to one value per
column [B]. Callers pass the sinogram transposed so that every row of the
input is one column (one angle) of the sinogram.
"""

import torch
import torch.fft

from tracetransform.kernels.auxiliary import (
    hermite_domain,
    hermite_function,
    weighted_median,
)


def pfunctional_1(data: torch.Tensor) -> torch.Tensor:
    """P1: total variation, sum of |f(t+1) - f(t)|."""
    return (data[..., 1:] - data[..., :-1]).abs().sum(dim=-1)


def pfunctional_2(data: torch.Tensor) -> torch.Tensor:
    """P2: weighted median of the sorted column."""
    ordered = torch.sort(data, dim=-1).values
    median = weighted_median(ordered)
    return ordered.gather(-1, median.unsqueeze(-1)).squeeze(-1)


def pfunctional_3(data: torch.Tensor) -> torch.Tensor:
    """P3: integral of |Fourier(f)|^4 over the one-sided spectrum."""
    spectrum = torch.fft.rfft(data, dim=-1)
    return (spectrum.abs() ** 4).sum(dim=-1)


def pfunctional_hermite(data: torch.Tensor, order: int, center: int) -> torch.Tensor:
    """
    Hermite P-functional: projection of each column onto psi_order.

    Args:
        data: Sinogram columns [B, N]
        order: Hermite order
        center: Row index mapped onto z = 0 (the alignment center)

    Returns:
        Projections [B]
    """
    length = data.shape[-1]
    if not 0 <= center < length:
        raise ValueError(f"Hermite center {center} outside [0, {length})")

    z = hermite_domain(length, center, data.device, data.dtype)
    basis = hermite_function(order, z)
    return (data * basis).sum(dim=-1)
