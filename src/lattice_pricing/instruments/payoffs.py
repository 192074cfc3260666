"""Terminal payoff callables consumed by the lattice valuators.

Each payoff accepts a scalar or a numpy array of underlying values. The
``vectorized`` class flag lets
:meth:`~lattice_pricing.models.lattice.BinomialLattice.transformed_values_at_time_index`
evaluate a whole lattice row in one call.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, overload

import numpy as np

from ..typing import FloatArray


class OptionType(str, Enum):
    """Option contract type.

    Attributes
    ----------
    CALL : str
        Call option ("call").
    PUT : str
        Put option ("put").
    """

    CALL = "call"
    PUT = "put"


@overload
def call_payoff(ST: float, K: float) -> float: ...
@overload
def call_payoff(ST: FloatArray, K: float) -> FloatArray: ...
def call_payoff(ST: float | FloatArray, K: float) -> float | FloatArray:
    return np.maximum(ST - K, 0.0)


@overload
def put_payoff(ST: float, K: float) -> float: ...
@overload
def put_payoff(ST: FloatArray, K: float) -> FloatArray: ...
def put_payoff(ST: float | FloatArray, K: float) -> float | FloatArray:
    return np.maximum(K - ST, 0.0)


def _as_output(out: float | FloatArray) -> float | FloatArray:
    # Scalar input returns a Python float
    if np.ndim(out) == 0:
        return float(out)
    return out


@dataclass(frozen=True, slots=True)
class VanillaPayoff:
    """Callable, vectorized call/put payoff."""

    kind: OptionType
    strike: float

    vectorized: ClassVar[bool] = True

    @overload
    def __call__(self, ST: float) -> float: ...
    @overload
    def __call__(self, ST: FloatArray) -> FloatArray: ...

    def __call__(self, ST: float | FloatArray) -> float | FloatArray:
        if self.kind == OptionType.CALL:
            out = call_payoff(ST, K=self.strike)
        elif self.kind == OptionType.PUT:
            out = put_payoff(ST, K=self.strike)
        else:
            raise ValueError(f"Unsupported option kind: {self.kind}")
        return _as_output(out)


@dataclass(frozen=True, slots=True)
class DigitalPayoff:
    """Cash-or-nothing payoff: ``cash`` if ``S_T > strike`` (call) else 0."""

    strike: float
    cash: float = 1.0
    kind: OptionType = OptionType.CALL

    vectorized: ClassVar[bool] = True

    def __call__(self, ST: float | FloatArray) -> float | FloatArray:
        ST = np.asarray(ST, dtype=float)
        if self.kind == OptionType.CALL:
            hit = ST > self.strike
        elif self.kind == OptionType.PUT:
            hit = ST < self.strike
        else:
            raise ValueError(f"Unsupported option kind: {self.kind}")
        return _as_output(np.where(hit, self.cash, 0.0))


def make_vanilla_payoff(kind: OptionType, *, K: float) -> VanillaPayoff:
    return VanillaPayoff(kind=OptionType(kind), strike=float(K))
