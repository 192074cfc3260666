"""Contract valuation on a :class:`~lattice_pricing.models.lattice.BinomialLattice`.

Every valuator is a frozen dataclass holding contract terms only. ``value``
drives the lattice through its public contract (node values, node
probabilities, one-step conditional expectation) and keeps no state between
calls, so one contract can be valued on many lattices.

The three contracts differ only in how they aggregate the shared backward step:

- :class:`EuropeanOption`: no induction, a dot product with the terminal
  probability row;
- :class:`AmericanOption`: ``max(continuation, exercise)`` at every index;
- :class:`KnockOutBarrierOption`: continuation times the barrier indicator at
  every index.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass

import numpy as np

from ..models.lattice import BinomialLattice
from ..typing import FloatArray, ScalarFn

logger = logging.getLogger(__name__)

# ----------------------------
# Shared helpers
# ----------------------------


def _validate_maturity(maturity: float) -> None:
    if not math.isfinite(maturity) or maturity < 0.0:
        raise ValueError("maturity must be finite and non-negative")


def _maturity_index(lattice: BinomialLattice, maturity: float) -> int:
    k = lattice.time_index(maturity)
    logger.debug(
        "Valuing at maturity %.6g -> index %d of %d",
        maturity,
        k,
        lattice.number_of_times,
    )
    return k


def _induct(
    lattice: BinomialLattice,
    row: FloatArray,
    start_index: int,
    policy: Callable[[int, FloatArray], FloatArray],
) -> float:
    """Step ``row`` from ``start_index`` back to index 0.

    At each index ``k`` the continuation values from ``k + 1`` are handed to
    ``policy(k, continuation)``, which returns the row kept at ``k``.
    """
    for k in range(start_index - 1, -1, -1):
        row = policy(k, lattice.conditional_expectation(row))
    if row.size != 1:
        raise RuntimeError("Backward induction did not reduce to a single value.")
    return float(row[0])


# ----------------------------
# European
# ----------------------------


@dataclass(frozen=True, slots=True)
class EuropeanOption:
    """European contract paying ``payoff(S_T)`` at ``maturity``."""

    maturity: float
    payoff: ScalarFn

    def __post_init__(self) -> None:
        _validate_maturity(self.maturity)

    def value(self, lattice: BinomialLattice) -> float:
        """Discounted risk-neutral expectation of the terminal payoff."""
        k = _maturity_index(lattice, self.maturity)
        payoffs = lattice.transformed_values_at_time_index(k, self.payoff)
        probabilities = lattice.probabilities_at_time_index(k)
        return float(np.dot(payoffs, probabilities) * lattice.discount_factor(k))

    def value_by_induction(self, lattice: BinomialLattice) -> float:
        """Same price obtained by rolling the payoff back one step at a time."""
        k = _maturity_index(lattice, self.maturity)
        row = lattice.transformed_values_at_time_index(k, self.payoff)
        return _induct(lattice, row, k, lambda _k, continuation: continuation)


# ----------------------------
# American
# ----------------------------


@dataclass(frozen=True, slots=True)
class AmericanOption:
    """Contract exercisable at every grid time up to ``maturity``.

    At each node the holder takes the better of holding and exercising;
    indifference resolves to exercise, which leaves the value unchanged.
    """

    maturity: float
    payoff: ScalarFn

    def __post_init__(self) -> None:
        _validate_maturity(self.maturity)

    def value(self, lattice: BinomialLattice) -> float:
        k = _maturity_index(lattice, self.maturity)
        row = lattice.transformed_values_at_time_index(k, self.payoff)

        def exercise_or_hold(index: int, continuation: FloatArray) -> FloatArray:
            exercise = lattice.transformed_values_at_time_index(index, self.payoff)
            return np.where(exercise >= continuation, exercise, continuation)

        return _induct(lattice, row, k, exercise_or_hold)


# ----------------------------
# Knock-out barrier
# ----------------------------


@dataclass(frozen=True, slots=True)
class BarrierBounds:
    """Price corridor ``[lower, upper]``; both bounds are inclusive.

    One-sided barriers use ``-inf`` or ``+inf`` for the missing side.
    """

    lower: float = -math.inf
    upper: float = math.inf

    def __post_init__(self) -> None:
        if math.isnan(self.lower) or math.isnan(self.upper):
            raise ValueError("barrier bounds must not be NaN")
        if not self.lower < self.upper:
            raise ValueError(
                f"lower barrier must be < upper barrier, got {self.lower} >= {self.upper}"
            )

    def indicator(self, values) -> FloatArray:
        """1.0 where ``lower <= x <= upper``, else 0.0."""
        arr = np.asarray(values, dtype=float)
        return ((arr >= self.lower) & (arr <= self.upper)).astype(float)

    def contains(self, x: float) -> bool:
        return self.lower <= x <= self.upper


@dataclass(frozen=True, slots=True)
class KnockOutBarrierOption:
    """European payoff that is lost if the underlying leaves the corridor.

    The corridor is checked at every grid time from 0 to ``maturity``
    (discrete monitoring on the lattice).
    """

    maturity: float
    payoff: ScalarFn
    lower_barrier: float = -math.inf
    upper_barrier: float = math.inf

    def __post_init__(self) -> None:
        _validate_maturity(self.maturity)
        BarrierBounds(self.lower_barrier, self.upper_barrier)

    @property
    def bounds(self) -> BarrierBounds:
        return BarrierBounds(self.lower_barrier, self.upper_barrier)

    def value(
        self,
        lattice: BinomialLattice,
        lower_barrier: float | None = None,
        upper_barrier: float | None = None,
    ) -> float:
        """Price on ``lattice``; barriers passed here override the stored ones."""
        bounds = BarrierBounds(
            self.lower_barrier if lower_barrier is None else lower_barrier,
            self.upper_barrier if upper_barrier is None else upper_barrier,
        )
        k = _maturity_index(lattice, self.maturity)
        payoffs = lattice.transformed_values_at_time_index(k, self.payoff)
        row = payoffs * bounds.indicator(lattice.values_at_time_index(k))

        def knock_out(index: int, continuation: FloatArray) -> FloatArray:
            return continuation * bounds.indicator(lattice.values_at_time_index(index))

        return _induct(lattice, row, k, knock_out)


__all__ = [
    "EuropeanOption",
    "AmericanOption",
    "BarrierBounds",
    "KnockOutBarrierOption",
]
