"""
T-functional kernels.

Each kernel reduces a batch of projection lines [B, N] to one value per line
[B]. The auxiliary parameter `a` is accepted by every kernel for interface
uniformity and is currently unused (always 0).

Radon is the plain line integral. T1 and T2 integrate moments of the line
beyond its weighted median. T3, T4 and T5 integrate oscillating kernels
exp(k i log r) beyond the weighted median of sqrt(f), and return the modulus.
"""

import torch

from tracetransform.kernels.auxiliary import (
    offsets_from,
    sqrt_weighted_median,
    weighted_median,
)


def tfunctional_radon(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """Radon: integral of f(t)."""
    return data.sum(dim=-1)


def _moment(data: torch.Tensor, power: int) -> torch.Tensor:
    """Integral of r^power f(m + r) for r >= 0, m the weighted median."""
    r = offsets_from(weighted_median(data), data.shape[-1], data.dtype)
    weight = torch.where(r >= 0, r ** power, torch.zeros_like(r))
    return (data * weight).sum(dim=-1)


def tfunctional_1(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """T1: integral of r f(r) from the weighted median."""
    return _moment(data, 1)


def tfunctional_2(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """T2: integral of r^2 f(r) from the weighted median."""
    return _moment(data, 2)


def _oscillating(data: torch.Tensor, frequency: float, power: float) -> torch.Tensor:
    """
    Modulus of the integral of exp(frequency i log r) r^power f(m + r) for r >= 1.

    m is the weighted median of sqrt(f). r = 0 is excluded since log(0) diverges.
    """
    r = offsets_from(sqrt_weighted_median(data), data.shape[-1], data.dtype)
    valid = r >= 1
    safe_r = r.clamp(min=1)
    phase = frequency * torch.log(safe_r)
    magnitude = torch.where(valid, safe_r ** power, torch.zeros_like(r)) * data

    real = (magnitude * torch.cos(phase)).sum(dim=-1)
    imag = (magnitude * torch.sin(phase)).sum(dim=-1)
    return torch.hypot(real, imag)


def tfunctional_3(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """T3: |integral of exp(5i log r) r f(r)|."""
    return _oscillating(data, 5.0, 1.0)


def tfunctional_4(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """T4: |integral of exp(3i log r) f(r)|."""
    return _oscillating(data, 3.0, 0.0)


def tfunctional_5(data: torch.Tensor, a: int = 0) -> torch.Tensor:
    """T5: |integral of exp(4i log r) sqrt(r) f(r)|."""
    return _oscillating(data, 4.0, 0.5)
