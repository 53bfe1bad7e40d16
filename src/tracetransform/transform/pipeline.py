"""
Trace transform pipeline orchestration.

Coordinates the end-to-end computation for one image:
1. Resolve and validate the functional selection (before touching the backend)
2. Upload and pad the image
3. Per T-functional: generate the sinogram, orthonormalize it in the Hermite
   regime, then reduce it with every P-functional
4. Assemble the feature matrix

Orchestration is sequential; all parallelism lives inside the backend
kernels. Any backend error aborts the run without a partial result.

Example:
    >>> from tracetransform.config import TraceTransformConfig
    >>> from tracetransform.transform.pipeline import TraceTransformer
    >>>
    >>> config = TraceTransformConfig(
    ...     tfunctionals=["radon", "T1"],
    ...     pfunctionals=["P1", "P2"],
    ...     device="cpu",
    ... )
    >>> result = TraceTransformer(config).transform(image)
    >>> result.features.shape
    (360, 4)
    >>> result.features.labels
    ['Radon-P1', 'Radon-P2', 'T1-P1', 'T1-P2']
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from tracetransform.backend import ComputeBackend, create_backend
from tracetransform.config.schema import TraceTransformConfig
from tracetransform.functionals.registry import resolve_functionals
from tracetransform.profiling import StageTimer
from tracetransform.transform.circus import (
    FeatureMatrix,
    assemble_features,
    feature_labels,
    get_circus_function,
)
from tracetransform.transform.orthonormal import nearest_orthonormal_sinogram
from tracetransform.transform.sinogram import SinogramGenerator

logger = logging.getLogger(__name__)


@dataclass
class TraceResult:
    """
    Outcome of a trace transform run.

    Attributes:
        features: Feature matrix [angles, T * P] with labels
        sinograms: Host copies of the uncorrected sinograms keyed by T-functional
            name (only when requested)
        centers: Alignment center row per T-functional (Hermite regime only)
        timings: Total milliseconds per pipeline stage (only when profiling)
    """

    features: FeatureMatrix
    sinograms: Dict[str, np.ndarray] = field(default_factory=dict)
    centers: Dict[str, int] = field(default_factory=dict)
    timings: Dict[str, float] = field(default_factory=dict)


class TraceTransformer:
    """
    Trace transform of images for a fixed functional selection.

    Attributes:
        config: Run configuration
        selection: Resolved functionals
        backend: Compute backend
        generator: Sinogram generator
    """

    def __init__(
        self,
        config: TraceTransformConfig,
        backend: Optional[ComputeBackend] = None
    ):
        """
        Initialize the transformer.

        The configuration has already validated its functional selection (an
        invalid one raises pydantic.ValidationError when TraceTransformConfig
        is built), so no backend is created for a run that cannot succeed.

        Args:
            config: Run configuration
            backend: Compute backend (default: built from config)

        Raises:
            BackendError: If the configured device is unavailable
        """
        self.config = config
        self.selection = config.selection()
        self.backend = backend if backend is not None else create_backend(config)
        self.generator = SinogramGenerator(
            self.backend,
            angle_step=config.angle_step,
            angle_batch=config.angle_batch
        )

    @property
    def labels(self) -> List[str]:
        return feature_labels(self.selection.tfunctionals, self.selection.pfunctionals)

    def transform(self, image: np.ndarray, keep_sinograms: Optional[bool] = None) -> TraceResult:
        """
        Compute the trace transform features of an image.

        Args:
            image: Host image [H, W]
            keep_sinograms: Download the sinograms into the result
                (default: when the output configuration writes them)

        Returns:
            TraceResult

        Raises:
            AlignmentError: On degenerate input in the Hermite regime
            BackendError: On device allocation or kernel failure
        """
        image = np.asarray(image)
        if image.ndim != 2:
            raise ValueError(f"Expected a 2D grayscale image, got shape {image.shape}")
        if keep_sinograms is None:
            output = self.config.output
            keep_sinograms = output.write_sinograms or output.hdf5_path is not None

        selection = self.selection
        backend = self.backend
        timer = StageTimer(backend.device, enabled=self.config.profile)

        logger.info(
            f"Transforming {image.shape[0]}x{image.shape[1]} image: "
            f"{len(selection.tfunctionals)} T-functional(s), "
            f"{len(selection.pfunctionals)} P-functional(s), "
            f"{self.generator.num_angles} angles"
            + (" (orthonormal)" if selection.orthonormal else "")
        )

        with timer.stage("prepare"):
            padded = self.generator.prepare(image)

        columns: List[np.ndarray] = []
        sinograms: Dict[str, np.ndarray] = {}
        centers: Dict[str, int] = {}

        for tfunctional in selection.tfunctionals:
            with timer.stage("sinogram", tfunctional.name):
                sinogram = self.generator.generate(padded, tfunctional)

            if keep_sinograms:
                sinograms[tfunctional.name] = backend.download(sinogram)

            center = None
            if selection.orthonormal:
                with timer.stage("orthonormal", tfunctional.name):
                    sinogram, center = nearest_orthonormal_sinogram(backend, sinogram)
                centers[tfunctional.name] = center

            for pfunctional in selection.pfunctionals:
                label = f"{tfunctional.name}-{pfunctional.name}"
                with timer.stage("circus", label):
                    circus = get_circus_function(backend, sinogram, pfunctional, center)
                    columns.append(backend.download(circus))
                logger.debug(f"Computed circus function {label}")

        features = assemble_features(columns, self.labels, self.generator.num_angles)

        timings = timer.summary()
        for stage, elapsed in timings.items():
            logger.info(f"  {stage:<12} {elapsed:10.1f} ms")

        return TraceResult(
            features=features,
            sinograms=sinograms,
            centers=centers,
            timings=timings,
        )


def run_trace_transform(
    image: np.ndarray,
    tfunctionals: Sequence[str],
    pfunctionals: Sequence[str],
    backend: Optional[ComputeBackend] = None,
    **options: Any
) -> TraceResult:
    """
    One-shot trace transform of an in-memory image.

    Args:
        image: Host image [H, W]
        tfunctionals: T-functional tokens
        pfunctionals: P-functional tokens
        backend: Compute backend (default: built from the options)
        **options: Further TraceTransformConfig fields (device, angle_step, ...)

    Returns:
        TraceResult

    Raises:
        FunctionalSpecError: On an invalid functional selection, before any
            backend call
    """
    resolve_functionals(tfunctionals, pfunctionals)

    config = TraceTransformConfig(
        tfunctionals=list(tfunctionals),
        pfunctionals=list(pfunctionals),
        **options
    )
    return TraceTransformer(config, backend=backend).transform(image)
