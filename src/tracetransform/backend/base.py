"""
Abstract compute backend.

The trace transform algorithm is written once against this interface; the
backend owns device-resident buffers, host/device transfers and the parallel
reduction kernels. Every call is blocking from the caller's point of view.

Buffers are torch tensors living on the backend's device. Host data is numpy.
"""

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple

import numpy as np
import torch

from tracetransform.functionals.registry import FunctionalSpec


class ComputeBackend(ABC):
    """
    Abstract interface consumed by the sinogram generator, the orthonormal
    corrector and the circus function engine.

    Failures are reported as tracetransform.errors.BackendError subclasses:
    OutOfMemory for allocations, KernelLaunchError for kernel execution.
    """

    @property
    @abstractmethod
    def device(self) -> torch.device:
        """Device holding the backend's buffers."""
        pass

    @property
    @abstractmethod
    def dtype(self) -> torch.dtype:
        """Floating point dtype of the backend's buffers."""
        pass

    @abstractmethod
    def allocate(self, shape: Sequence[int]) -> torch.Tensor:
        """
        Allocate an uninitialized device buffer.

        Args:
            shape: 1D or 2D buffer shape

        Returns:
            Device tensor of the requested shape

        Raises:
            OutOfMemory: If the device cannot satisfy the request
        """
        pass

    @abstractmethod
    def zeros(self, shape: Sequence[int]) -> torch.Tensor:
        """Allocate a zero-initialized device buffer."""
        pass

    @abstractmethod
    def upload(self, array: np.ndarray) -> torch.Tensor:
        """Copy host data into a new device buffer."""
        pass

    @abstractmethod
    def download(self, buffer: torch.Tensor) -> np.ndarray:
        """Copy a device buffer into host memory."""
        pass

    @abstractmethod
    def rotate(self, image: torch.Tensor, angles: torch.Tensor) -> torch.Tensor:
        """
        Rotate a square image about its center by each angle.

        Args:
            image: Square device image [D, D]
            angles: Rotation angles in degrees [A]

        Returns:
            Rotated images [A, D, D], zero outside the source image
        """
        pass

    @abstractmethod
    def trace(
        self,
        lines: torch.Tensor,
        tfunctional: FunctionalSpec,
        a: int = 0
    ) -> torch.Tensor:
        """
        Apply a T-functional to a batch of projection lines.

        Args:
            lines: Projection lines [B, N], one line per row
            tfunctional: Resolved T-functional
            a: Auxiliary parameter (reserved, always 0)

        Returns:
            One value per line [B]
        """
        pass

    @abstractmethod
    def circus(
        self,
        sinogram: torch.Tensor,
        pfunctional: FunctionalSpec,
        center: Optional[int] = None
    ) -> torch.Tensor:
        """
        Apply a P-functional to every column of a sinogram.

        Args:
            sinogram: Sinogram [rows, cols]
            pfunctional: Resolved P-functional
            center: Alignment center row (required for Hermite)

        Returns:
            One value per column [cols]
        """
        pass

    @abstractmethod
    def svd(self, matrix: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        """
        Full singular value decomposition.

        Args:
            matrix: Dense matrix [m, n]

        Returns:
            (U [m, m], S [min(m, n)], Vh [n, n]) with matrix = U diag(S) Vh
        """
        pass
