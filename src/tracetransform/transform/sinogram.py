"""
Sinogram generation.

A sinogram holds one column per sampled angle. Column j is obtained by
rotating the image by angle j and reducing every column of the rotated image
(one projection line) with the T-functional, so row i is the sample position
of the projection line across the image.

The image is first padded to a centered square whose side is the image
diagonal, so that no content is cut off at any rotation angle. Rotation and
reduction run in the compute backend, a batch of angles per launch.
"""

import logging
import math
from typing import Optional

import numpy as np
import torch

from tracetransform.backend.base import ComputeBackend
from tracetransform.functionals.registry import FunctionalSpec

logger = logging.getLogger(__name__)


def sinogram_angles(angle_step: float = 1.0) -> np.ndarray:
    """
    Sampled projection angles in degrees, covering [0, 360).

    Args:
        angle_step: Angular step in degrees

    Returns:
        Angles [A] (360 angles for the default step)
    """
    if angle_step <= 0 or angle_step > 360:
        raise ValueError(f"angle_step must be in (0, 360], got {angle_step}")
    return np.arange(0.0, 360.0, angle_step)


def padded_size(height: int, width: int) -> int:
    """Side of the square that holds the image at every rotation."""
    return int(math.ceil(math.hypot(height, width)))


class SinogramGenerator:
    """
    Produces one sinogram per T-functional for a given image.

    The padded image is prepared once and shared read-only by every
    T-functional of a run; each call to generate() allocates a fresh sinogram.

    Example:
        >>> generator = SinogramGenerator(backend, angle_step=1.0)
        >>> padded = generator.prepare(image)
        >>> sinogram = generator.generate(padded, parse_tfunctional("radon"))
        >>> sinogram.shape  # [diagonal, 360]
    """

    def __init__(
        self,
        backend: ComputeBackend,
        angle_step: float = 1.0,
        angle_batch: int = 32
    ):
        """
        Initialize sinogram generator.

        Args:
            backend: Compute backend
            angle_step: Angular step in degrees
            angle_batch: Number of angles rotated per kernel launch
        """
        if angle_batch < 1:
            raise ValueError(f"angle_batch must be >= 1, got {angle_batch}")

        self.backend = backend
        self.angle_batch = angle_batch
        self.angles = sinogram_angles(angle_step)
        self._angles_buffer: Optional[torch.Tensor] = None

    @property
    def num_angles(self) -> int:
        return len(self.angles)

    def prepare(self, image: np.ndarray) -> torch.Tensor:
        """
        Upload an image and pad it to a centered diagonal-sized square.

        Args:
            image: Host image [H, W]

        Returns:
            Padded device image [D, D]
        """
        if image.ndim != 2 or image.shape[0] == 0 or image.shape[1] == 0:
            raise ValueError(f"Expected a non-empty 2D image, got shape {image.shape}")

        height, width = image.shape
        size = padded_size(height, width)
        top = (size - height) // 2
        left = (size - width) // 2

        source = self.backend.upload(image)
        padded = self.backend.zeros((size, size))
        padded[top:top + height, left:left + width] = source

        logger.debug(f"Padded {height}x{width} image to {size}x{size}")
        return padded

    def generate(self, padded: torch.Tensor, tfunctional: FunctionalSpec) -> torch.Tensor:
        """
        Compute the sinogram of a prepared image for one T-functional.

        Args:
            padded: Padded device image from prepare() [D, D]
            tfunctional: Resolved T-functional

        Returns:
            Sinogram [D, A]
        """
        if self._angles_buffer is None:
            self._angles_buffer = self.backend.upload(self.angles)

        size = padded.shape[0]
        num_angles = self.num_angles
        sinogram = self.backend.allocate((size, num_angles))

        for start in range(0, num_angles, self.angle_batch):
            stop = min(start + self.angle_batch, num_angles)

            rotated = self.backend.rotate(padded, self._angles_buffer[start:stop])
            # Columns of each rotated image become rows: [a * D, D]
            lines = rotated.transpose(1, 2).reshape(-1, size)
            values = self.backend.trace(lines, tfunctional)

            sinogram[:, start:stop] = values.view(stop - start, size).t()

        logger.debug(f"Computed {tfunctional.name} sinogram of shape {tuple(sinogram.shape)}")
        return sinogram
