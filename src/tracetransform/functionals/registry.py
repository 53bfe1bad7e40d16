"""
Functional registry for token-to-functional resolution.

Maps user-facing tokens onto the fixed catalog of T-functionals (applied along
projection lines) and P-functionals (applied along sinogram columns).

The catalog is closed: every resolved FunctionalSpec carries one member of the
TFunctional or PFunctional enums, and the kernel tables dispatch on those
members directly.

Token grammar:
    T-functionals: "radon" | "T<n>" | "<n>"       (n in 0..5, 0 is Radon)
    P-functionals: "P<n>" | "<n>" | "H<order>"    (n in 1..3)

Tokens are case-insensitive.

Example:
    >>> spec = parse_pfunctional("h3")
    >>> spec.kind, spec.order, spec.name
    (<PFunctional.HERMITE: 'hermite'>, 3, 'H3')
    >>> parse_pfunctional("3").name
    'P3'
    >>> selection = resolve_functionals(["0", "T1"], ["P1", "P2"])
    >>> [t.name for t in selection.tfunctionals], selection.orthonormal
    (['Radon', 'T1'], False)
"""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from tracetransform.errors import FunctionalSpecError


class TFunctional(Enum):
    """T-functionals, reduced along each projection line."""

    RADON = "radon"
    T1 = "t1"
    T2 = "t2"
    T3 = "t3"
    T4 = "t4"
    T5 = "t5"


class PFunctional(Enum):
    """P-functionals (circus functions), reduced along each sinogram column."""

    P1 = "p1"
    P2 = "p2"
    P3 = "p3"
    HERMITE = "hermite"

    @property
    def orthonormal(self) -> bool:
        """Whether this functional requires an orthonormalized sinogram."""
        return self is PFunctional.HERMITE


_TFUNCTIONAL_NAMES = {
    TFunctional.RADON: "Radon",
    TFunctional.T1: "T1",
    TFunctional.T2: "T2",
    TFunctional.T3: "T3",
    TFunctional.T4: "T4",
    TFunctional.T5: "T5",
}

_TFUNCTIONAL_TOKENS = {
    "RADON": TFunctional.RADON,
    "T0": TFunctional.RADON,
    "T1": TFunctional.T1,
    "T2": TFunctional.T2,
    "T3": TFunctional.T3,
    "T4": TFunctional.T4,
    "T5": TFunctional.T5,
}

_PFUNCTIONAL_TOKENS = {
    "P1": PFunctional.P1,
    "P2": PFunctional.P2,
    "P3": PFunctional.P3,
}

_TFUNCTIONAL_DESCRIPTIONS = {
    TFunctional.RADON: "Radon transform (line integral)",
    TFunctional.T1: "Integral of r f(r) from the weighted median",
    TFunctional.T2: "Integral of r^2 f(r) from the weighted median",
    TFunctional.T3: "|Integral of exp(5i log r) r f(r)| from the sqrt-weighted median",
    TFunctional.T4: "|Integral of exp(3i log r) f(r)| from the sqrt-weighted median",
    TFunctional.T5: "|Integral of exp(4i log r) sqrt(r) f(r)| from the sqrt-weighted median",
}

_PFUNCTIONAL_DESCRIPTIONS = {
    PFunctional.P1: "Total variation (sum of absolute first differences)",
    PFunctional.P2: "Weighted median of the sorted column",
    PFunctional.P3: "Integral of |Fourier(f)|^4",
    PFunctional.HERMITE: "Projection onto the orthonormal Hermite function of given order",
}


@dataclass(frozen=True)
class FunctionalSpec:
    """
    A resolved functional: which variant to run plus its parameters.

    Attributes:
        kind: Catalog member (TFunctional or PFunctional)
        name: Display name used in feature labels (e.g. "Radon", "P2", "H3")
        order: Hermite order (only for PFunctional.HERMITE)
    """

    kind: Union[TFunctional, PFunctional]
    name: str
    order: Optional[int] = None

    @property
    def is_tfunctional(self) -> bool:
        return isinstance(self.kind, TFunctional)

    @property
    def orthonormal(self) -> bool:
        return isinstance(self.kind, PFunctional) and self.kind.orthonormal

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class FunctionalSelection:
    """
    Validated set of functionals for one run.

    Attributes:
        tfunctionals: Resolved T-functionals, in request order
        pfunctionals: Resolved P-functionals, in request order
        orthonormal: True when all P-functionals are Hermite-class
    """

    tfunctionals: Tuple[FunctionalSpec, ...]
    pfunctionals: Tuple[FunctionalSpec, ...]
    orthonormal: bool


def parse_tfunctional(token: str) -> FunctionalSpec:
    """
    Resolve a T-functional token.

    Args:
        token: User token ("radon", "T0".."T5", or "0".."5")

    Returns:
        Resolved FunctionalSpec

    Raises:
        FunctionalSpecError: If the token is not in the catalog
    """
    name = token.strip().upper()
    if name.isdigit():
        name = "T" + name

    kind = _TFUNCTIONAL_TOKENS.get(name)
    if kind is None:
        raise FunctionalSpecError(f"Unknown T-functional: {token!r}")

    return FunctionalSpec(kind=kind, name=_TFUNCTIONAL_NAMES[kind])


def parse_pfunctional(token: str) -> FunctionalSpec:
    """
    Resolve a P-functional token.

    Digits-only tokens are short forms ("2" selects P2). Tokens starting with
    "H" select the Hermite functional and must carry an unsigned integer order.

    Args:
        token: User token ("P1".."P3", "1".."3", or "H<order>")

    Returns:
        Resolved FunctionalSpec

    Raises:
        FunctionalSpecError: If the token is unknown or the Hermite order is
            missing or unparseable
    """
    name = token.strip().upper()
    if not name:
        raise FunctionalSpecError("Unknown P-functional: empty token")
    if name.isdigit():
        name = "P" + name

    kind = _PFUNCTIONAL_TOKENS.get(name)
    if kind is not None:
        return FunctionalSpec(kind=kind, name=name)

    if name[0] == "H":
        suffix = name[1:]
        if not suffix:
            raise FunctionalSpecError(
                f"Missing order parameter for Hermite P-functional: {token!r}"
            )
        # isdigit() also rejects signs, so negative orders fail here
        if not (suffix.isascii() and suffix.isdigit()):
            raise FunctionalSpecError(
                f"Unparseable order parameter for Hermite P-functional: {token!r}"
            )
        order = int(suffix)
        return FunctionalSpec(kind=PFunctional.HERMITE, name=f"H{order}", order=order)

    raise FunctionalSpecError(f"Unknown P-functional: {token!r}")


def check_orthonormal_regime(pfunctionals: Sequence[FunctionalSpec]) -> bool:
    """
    Determine the P-functional regime of a run.

    Args:
        pfunctionals: Resolved P-functionals

    Returns:
        True if every P-functional is orthonormal-class, False if none is

    Raises:
        FunctionalSpecError: If orthonormal and regular P-functionals are mixed
    """
    orthonormal_count = sum(1 for p in pfunctionals if p.orthonormal)
    if orthonormal_count == 0:
        return False
    if orthonormal_count == len(pfunctionals):
        return True
    raise FunctionalSpecError("Cannot mix regular and orthonormal P-functionals")


def _check_order(spec: FunctionalSpec) -> None:
    """Reject a Hermite spec without a valid order, or any other spec carrying one."""
    if spec.kind is PFunctional.HERMITE:
        if spec.order is None:
            raise FunctionalSpecError(
                f"Missing order parameter for Hermite P-functional: {spec.name!r}"
            )
        if spec.order < 0:
            raise FunctionalSpecError(
                f"Hermite order must be non-negative, got {spec.order} for {spec.name!r}"
            )
    elif spec.order is not None:
        raise FunctionalSpecError(f"{spec.name} takes no order parameter")


def resolve_functionals(
    tfunctionals: Sequence[Union[str, FunctionalSpec]],
    pfunctionals: Sequence[Union[str, FunctionalSpec]],
) -> FunctionalSelection:
    """
    Resolve all tokens of a run and validate their combination.

    Tokens may already be resolved specs; these pass through once their
    order parameter has been checked.

    Args:
        tfunctionals: T-functional tokens (at least one)
        pfunctionals: P-functional tokens (may be empty)

    Returns:
        FunctionalSelection

    Raises:
        FunctionalSpecError: On any unknown token, bad Hermite order, empty
            T-functional list, or mixed P-functional regimes
    """
    if not tfunctionals:
        raise FunctionalSpecError("At least one T-functional is required")

    tspecs = tuple(
        t if isinstance(t, FunctionalSpec) else parse_tfunctional(t)
        for t in tfunctionals
    )
    pspecs = tuple(
        p if isinstance(p, FunctionalSpec) else parse_pfunctional(p)
        for p in pfunctionals
    )

    for spec in tspecs:
        if not spec.is_tfunctional:
            raise FunctionalSpecError(f"{spec.name} is not a T-functional")
        _check_order(spec)
    for spec in pspecs:
        if spec.is_tfunctional:
            raise FunctionalSpecError(f"{spec.name} is not a P-functional")
        _check_order(spec)

    orthonormal = check_orthonormal_regime(pspecs)

    return FunctionalSelection(
        tfunctionals=tspecs,
        pfunctionals=pspecs,
        orthonormal=orthonormal,
    )


def list_tfunctionals() -> List[Tuple[str, str]]:
    """Catalog of T-functionals as (display name, description) pairs."""
    return [(_TFUNCTIONAL_NAMES[t], _TFUNCTIONAL_DESCRIPTIONS[t]) for t in TFunctional]


def list_pfunctionals() -> List[Tuple[str, str]]:
    """Catalog of P-functionals as (token form, description) pairs."""
    names = {
        PFunctional.P1: "P1",
        PFunctional.P2: "P2",
        PFunctional.P3: "P3",
        PFunctional.HERMITE: "H<order>",
    }
    return [(names[p], _PFUNCTIONAL_DESCRIPTIONS[p]) for p in PFunctional]
