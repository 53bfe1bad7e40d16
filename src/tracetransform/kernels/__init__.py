"""
Batched torch kernels for the functional catalog.

The dispatch tables below cover every catalog member; the check at import
time keeps them in step with the enums in tracetransform.functionals.
"""

from typing import Callable, Dict

import torch

from tracetransform.functionals.registry import PFunctional, TFunctional
from tracetransform.kernels.pfunctionals import (
    pfunctional_1,
    pfunctional_2,
    pfunctional_3,
    pfunctional_hermite,
)
from tracetransform.kernels.tfunctionals import (
    tfunctional_1,
    tfunctional_2,
    tfunctional_3,
    tfunctional_4,
    tfunctional_5,
    tfunctional_radon,
)

TFUNCTIONAL_KERNELS: Dict[TFunctional, Callable[..., torch.Tensor]] = {
    TFunctional.RADON: tfunctional_radon,
    TFunctional.T1: tfunctional_1,
    TFunctional.T2: tfunctional_2,
    TFunctional.T3: tfunctional_3,
    TFunctional.T4: tfunctional_4,
    TFunctional.T5: tfunctional_5,
}

PFUNCTIONAL_KERNELS: Dict[PFunctional, Callable[..., torch.Tensor]] = {
    PFunctional.P1: pfunctional_1,
    PFunctional.P2: pfunctional_2,
    PFunctional.P3: pfunctional_3,
    PFunctional.HERMITE: pfunctional_hermite,
}

assert set(TFUNCTIONAL_KERNELS) == set(TFunctional), "T-functional kernel table incomplete"
assert set(PFUNCTIONAL_KERNELS) == set(PFunctional), "P-functional kernel table incomplete"

__all__ = [
    "TFUNCTIONAL_KERNELS",
    "PFUNCTIONAL_KERNELS",
]
