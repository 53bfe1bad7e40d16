"""
Shared reduction helpers for the functional kernels.

All helpers are batched: the last dimension holds the sequence being reduced,
leading dimensions are independent rows.
"""

import math

import torch


def shift_nonnegative(data: torch.Tensor) -> torch.Tensor:
    """
    Shift each row so that its minimum is zero, if it was negative.

    Rows that are already non-negative are returned unchanged.

    Args:
        data: Input tensor [..., N]

    Returns:
        Non-negative tensor [..., N]
    """
    row_min = data.min(dim=-1, keepdim=True).values
    return data - row_min.clamp(max=0)


def weighted_median(data: torch.Tensor) -> torch.Tensor:
    """
    Index of the weighted median of each row.

    The weighted median is the first position, scanning from index 0
    upwards, where twice the cumulative weight reaches the row total. Values
    are shifted to be non-negative before accumulating. A row with zero total
    weight has median 0.

    Args:
        data: Weights [..., N]

    Returns:
        Median indices [...] (int64)
    """
    weights = shift_nonnegative(data)
    cumulative = torch.cumsum(weights, dim=-1)
    total = cumulative[..., -1:]
    reached = (2 * cumulative >= total).to(torch.int32)
    # argmax returns the first maximal index
    return reached.argmax(dim=-1)


def sqrt_weighted_median(data: torch.Tensor) -> torch.Tensor:
    """Weighted median of the square root of each (non-negative shifted) row."""
    return weighted_median(torch.sqrt(shift_nonnegative(data)))


def offsets_from(median: torch.Tensor, length: int, dtype: torch.dtype) -> torch.Tensor:
    """
    Signed distance of every position to the row's median.

    Args:
        median: Median indices [B]
        length: Sequence length N
        dtype: Floating point dtype of the result

    Returns:
        Distances r = p - median [B, N]
    """
    positions = torch.arange(length, device=median.device, dtype=dtype)
    return positions.unsqueeze(0) - median.to(dtype).unsqueeze(-1)


def hermite_domain(
    length: int,
    center: int,
    device: torch.device,
    dtype: torch.dtype,
) -> torch.Tensor:
    """
    Map sample positions onto the [-10, 10] Hermite domain.

    Positions [0, center] map linearly onto [-10, 0] and positions
    [center, length - 1] onto [0, 10], so the center sample sits at z = 0.

    Args:
        length: Number of samples
        center: Index of the sample mapped to zero
        device: Device for the result
        dtype: Floating point dtype of the result

    Returns:
        Domain values z [length]
    """
    positions = torch.arange(length, device=device, dtype=dtype)
    lower = max(center, 1)
    upper = max(length - 1 - center, 1)
    shifted = positions - center
    return torch.where(shifted <= 0, 10.0 * shifted / lower, 10.0 * shifted / upper)


def hermite_function(order: int, z: torch.Tensor) -> torch.Tensor:
    """
    Orthonormal Hermite function psi_n(z) = H_n(z) exp(-z^2/2) / sqrt(2^n n! sqrt(pi)).

    Evaluated with the normalized three-term recurrence, which stays finite
    for large orders where H_n and n! overflow separately.

    Args:
        order: Non-negative order n
        z: Evaluation points

    Returns:
        psi_n(z), same shape as z
    """
    if order < 0:
        raise ValueError(f"Hermite order must be non-negative, got {order}")

    psi_prev = math.pi ** -0.25 * torch.exp(-0.5 * z * z)
    if order == 0:
        return psi_prev

    psi = math.sqrt(2.0) * z * psi_prev
    for n in range(1, order):
        psi_next = (
            math.sqrt(2.0 / (n + 1)) * z * psi
            - math.sqrt(n / (n + 1)) * psi_prev
        )
        psi_prev, psi = psi, psi_next
    return psi
