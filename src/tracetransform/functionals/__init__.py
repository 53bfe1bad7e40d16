"""Functional catalog and token resolution."""

from tracetransform.functionals.registry import (
    TFunctional,
    PFunctional,
    FunctionalSpec,
    FunctionalSelection,
    parse_tfunctional,
    parse_pfunctional,
    check_orthonormal_regime,
    resolve_functionals,
    list_tfunctionals,
    list_pfunctionals,
)

__all__ = [
    "TFunctional",
    "PFunctional",
    "FunctionalSpec",
    "FunctionalSelection",
    "parse_tfunctional",
    "parse_pfunctional",
    "check_orthonormal_regime",
    "resolve_functionals",
    "list_tfunctionals",
    "list_pfunctionals",
]
