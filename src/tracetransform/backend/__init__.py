"""
Compute backends for the trace transform.

The algorithm modules only talk to ComputeBackend; TorchBackend provides the
implementation on CUDA or CPU.
"""

from typing import TYPE_CHECKING

from tracetransform.backend.base import ComputeBackend
from tracetransform.backend.torch_backend import TorchBackend

if TYPE_CHECKING:
    from tracetransform.config.schema import TraceTransformConfig


def create_backend(config: "TraceTransformConfig") -> ComputeBackend:
    """
    Build the backend selected by a configuration.

    Args:
        config: Run configuration (device and dtype are used)

    Returns:
        ComputeBackend instance

    Raises:
        BackendError: If the requested device is unavailable
    """
    return TorchBackend(device=config.device, dtype=config.dtype)


__all__ = [
    "ComputeBackend",
    "TorchBackend",
    "create_backend",
]
