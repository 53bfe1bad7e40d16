"""
Configuration schemas for the trace transform using Pydantic.

Functional tokens are resolved against the registry when the configuration is
built, so an invalid selection (unknown token, missing Hermite order, mixed
P-functional regimes) is rejected before any computation starts. Such errors
arrive as a pydantic ValidationError (a ValueError) wrapping the registry's
FunctionalSpecError message, never as a bare FunctionalSpecError.

Example:
    >>> config = TraceTransformConfig(
    ...     input_image=Path("images/lena.pgm"),
    ...     tfunctionals=["radon", "T1"],
    ...     pfunctionals=["P1", "P2"],
    ...     device="cpu",
    ... )
    >>> config.selection().orthonormal
    False
"""

from pathlib import Path
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tracetransform.functionals.registry import (
    FunctionalSelection,
    parse_pfunctional,
    parse_tfunctional,
    resolve_functionals,
)


def _as_tokens(value: Any) -> List[str]:
    """Normalize a YAML scalar or list of tokens to a list of strings."""
    if isinstance(value, (str, int)):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError(f"Expected a list of functional tokens, got {type(value).__name__}")
    return [str(token) for token in value]


class OutputConfig(BaseModel):
    """
    Where and what to write after a run.

    Attributes:
        directory: Output directory for tabular files
        table_name: File name of the feature table
        write_traces: Write one single-column file per (T, P) circus function
        write_sinograms: Write one file per T-functional sinogram
        hdf5_path: Optional HDF5 file receiving the whole run
    """

    directory: Path = Path(".")
    table_name: str = "circus.csv"
    write_traces: bool = False
    write_sinograms: bool = False
    hdf5_path: Optional[Path] = None

    @field_validator('hdf5_path')
    @classmethod
    def validate_hdf5_path(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and v.suffix != '.h5':
            raise ValueError("hdf5_path must be an HDF5 file (.h5)")
        return v

    @field_validator('table_name')
    @classmethod
    def validate_table_name(cls, v: str) -> str:
        if not v or Path(v).name != v:
            raise ValueError("table_name must be a plain file name")
        return v


class TraceTransformConfig(BaseModel):
    """
    Root configuration of a trace transform run.

    Attributes:
        input_image: Image to process (optional when the image is passed in memory)
        tfunctionals: T-functional tokens (at least one)
        pfunctionals: P-functional tokens (all Hermite or none)
        device: Computation device (cuda or cpu)
        dtype: Buffer dtype
        angle_step: Angular sampling step in degrees
        angle_batch: Angles rotated per kernel launch
        verbosity: Logging verbosity for the run
        profile: Record per-stage timings
        output: Output settings
    """

    input_image: Optional[Path] = None

    tfunctionals: List[str] = Field(min_length=1)
    pfunctionals: List[str] = Field(default_factory=list)

    # Execution
    device: Literal["cuda", "cpu"] = "cuda"
    dtype: Literal["float32", "float64"] = "float32"
    angle_step: float = Field(default=1.0, gt=0.0, le=360.0)
    angle_batch: int = Field(default=32, ge=1, le=360)

    # Diagnostics
    verbosity: Literal["quiet", "normal", "verbose", "debug"] = "normal"
    profile: bool = False

    output: OutputConfig = Field(default_factory=OutputConfig)

    @field_validator('tfunctionals', mode='before')
    @classmethod
    def validate_tfunctionals(cls, v):
        tokens = _as_tokens(v)
        for token in tokens:
            parse_tfunctional(token)
        return tokens

    @field_validator('pfunctionals', mode='before')
    @classmethod
    def validate_pfunctionals(cls, v):
        tokens = _as_tokens(v)
        for token in tokens:
            parse_pfunctional(token)
        return tokens

    @model_validator(mode='after')
    def validate_regime(self) -> 'TraceTransformConfig':
        """Reject mixed orthonormal and regular P-functionals."""
        resolve_functionals(self.tfunctionals, self.pfunctionals)
        return self

    def selection(self) -> FunctionalSelection:
        """Resolved functionals of this configuration."""
        return resolve_functionals(self.tfunctionals, self.pfunctionals)

