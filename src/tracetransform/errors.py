"""
Exception hierarchy for the trace transform.

Three kinds of failure can abort a run:
- Selection errors: bad functional tokens or mixed P-functional regimes,
  detected before any computation starts
- Precondition errors: degenerate sinogram alignment in the orthonormal corrector
- Backend errors: device allocation or kernel failures

None of these are recovered from; they propagate to the caller.
"""


class TraceTransformError(Exception):
    """Base class for all trace transform errors."""


class FunctionalSpecError(TraceTransformError, ValueError):
    """Invalid functional token or incompatible functional selection."""


class AlignmentError(TraceTransformError):
    """Sinogram columns cannot be aligned to a common center."""


class BackendError(TraceTransformError):
    """Compute backend failure."""


class OutOfMemory(BackendError):
    """Device could not satisfy an allocation request."""


class KernelLaunchError(BackendError):
    """Backend reported a failure while executing a kernel."""
