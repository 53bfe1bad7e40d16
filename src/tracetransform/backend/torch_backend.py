"""
PyTorch implementation of the compute backend.

Runs on CUDA or CPU; the device is the only axis of variation. Rotation uses
bilinear grid sampling, the functionals use the batched kernels from
tracetransform.kernels, and the SVD uses torch.linalg.

Torch failures are translated into the backend error hierarchy and chained
to the original exception.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional, Sequence, Tuple, Union

import numpy as np
import torch
import torch.nn.functional as F

from tracetransform.backend.base import ComputeBackend
from tracetransform.errors import BackendError, KernelLaunchError, OutOfMemory
from tracetransform.functionals.registry import FunctionalSpec, PFunctional
from tracetransform.kernels import PFUNCTIONAL_KERNELS, TFUNCTIONAL_KERNELS

logger = logging.getLogger(__name__)

_DTYPES = {
    "float32": torch.float32,
    "float64": torch.float64,
}


class TorchBackend(ComputeBackend):
    """
    Compute backend on a torch device.

    Example:
        >>> backend = TorchBackend(device="cpu")
        >>> buffer = backend.upload(np.eye(4))
        >>> backend.download(backend.circus(buffer, parse_pfunctional("P1")))
        array([1., 2., 2., 1.], dtype=float32)
    """

    def __init__(
        self,
        device: Union[str, torch.device] = "cuda",
        dtype: Union[str, torch.dtype] = "float32"
    ):
        """
        Initialize torch backend.

        Args:
            device: Computation device (cuda or cpu)
            dtype: Buffer dtype ("float32" or "float64")

        Raises:
            BackendError: If CUDA is requested but unavailable
        """
        self._device = torch.device(device)
        if self._device.type == "cuda" and not torch.cuda.is_available():
            raise BackendError("CUDA device requested but no CUDA-capable device found")

        if isinstance(dtype, str):
            if dtype not in _DTYPES:
                raise ValueError(f"Unsupported dtype: {dtype}")
            dtype = _DTYPES[dtype]
        self._dtype = dtype

        logger.debug(f"Using torch backend on {self._device} ({self._dtype})")

    @property
    def device(self) -> torch.device:
        return self._device

    @property
    def dtype(self) -> torch.dtype:
        return self._dtype

    @contextmanager
    def _allocating(self, shape: Sequence[int]) -> Iterator[None]:
        try:
            yield
        except RuntimeError as e:
            raise OutOfMemory(
                f"Cannot allocate buffer of shape {tuple(shape)} on {self._device}: {e}"
            ) from e

    @contextmanager
    def _launching(self, kernel: str) -> Iterator[None]:
        try:
            yield
        except torch.cuda.OutOfMemoryError as e:
            raise OutOfMemory(f"Out of device memory in {kernel}: {e}") from e
        except RuntimeError as e:
            raise KernelLaunchError(f"Kernel {kernel} failed: {e}") from e

    def allocate(self, shape: Sequence[int]) -> torch.Tensor:
        with self._allocating(shape):
            return torch.empty(tuple(shape), device=self._device, dtype=self._dtype)

    def zeros(self, shape: Sequence[int]) -> torch.Tensor:
        with self._allocating(shape):
            return torch.zeros(tuple(shape), device=self._device, dtype=self._dtype)

    def upload(self, array: np.ndarray) -> torch.Tensor:
        buffer = self.allocate(array.shape)
        with self._launching("upload"):
            buffer.copy_(torch.from_numpy(np.ascontiguousarray(array)))
        return buffer

    def download(self, buffer: torch.Tensor) -> np.ndarray:
        with self._launching("download"):
            return buffer.detach().cpu().numpy().copy()

    def rotate(self, image: torch.Tensor, angles: torch.Tensor) -> torch.Tensor:
        size = image.shape[-1]
        if image.ndim != 2 or image.shape[0] != size:
            raise ValueError(f"Rotation requires a square 2D image, got {tuple(image.shape)}")

        with self._launching("rotate"):
            radians = torch.deg2rad(angles.to(device=self._device, dtype=self._dtype))
            cos_t = torch.cos(radians)
            sin_t = torch.sin(radians)
            zero = torch.zeros_like(cos_t)

            # Affine sampling matrices [A, 2, 3], rotation about the center
            theta = torch.stack([
                torch.stack([cos_t, -sin_t, zero], dim=-1),
                torch.stack([sin_t, cos_t, zero], dim=-1),
            ], dim=1)

            num_angles = angles.shape[0]
            grid = F.affine_grid(theta, [num_angles, 1, size, size], align_corners=False)
            source = image.expand(num_angles, 1, size, size)
            rotated = F.grid_sample(
                source, grid, mode="bilinear", padding_mode="zeros", align_corners=False
            )
            return rotated[:, 0]

    def trace(
        self,
        lines: torch.Tensor,
        tfunctional: FunctionalSpec,
        a: int = 0
    ) -> torch.Tensor:
        kernel = TFUNCTIONAL_KERNELS[tfunctional.kind]
        with self._launching(tfunctional.name):
            return kernel(lines, a)

    def circus(
        self,
        sinogram: torch.Tensor,
        pfunctional: FunctionalSpec,
        center: Optional[int] = None
    ) -> torch.Tensor:
        kernel = PFUNCTIONAL_KERNELS[pfunctional.kind]
        # One row per sinogram column
        columns = sinogram.t()

        if pfunctional.kind is PFunctional.HERMITE:
            if center is None or pfunctional.order is None:
                raise ValueError("Hermite P-functional requires an order and an alignment center")
            with self._launching(pfunctional.name):
                return kernel(columns, pfunctional.order, center)

        with self._launching(pfunctional.name):
            return kernel(columns)

    def svd(self, matrix: torch.Tensor) -> Tuple[torch.Tensor, torch.Tensor, torch.Tensor]:
        with self._launching("svd"):
            U, S, Vh = torch.linalg.svd(matrix, full_matrices=True)
        return U, S, Vh

    def __repr__(self) -> str:
        return f"TorchBackend(device='{self._device}', dtype={self._dtype})"
