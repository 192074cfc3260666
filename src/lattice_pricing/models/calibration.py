"""Calibration strategies mapping Black-Scholes inputs to lattice factors.

A calibration turns ``(rate, volatility, time_step)`` into the multiplicative
up/down factors ``(u, d)`` of a recombining binomial lattice. The lattice engine
only sees the :class:`Calibration` protocol, so strategies are interchangeable.

- :class:`CoxRossRubinstein` and :class:`JarrowRudd` are contract-agnostic.
- :class:`LeisenReimer` matches the Black-Scholes ``d1``/``d2`` of a specific
  contract and must be rebuilt for every (spot, strike, maturity).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..exceptions import InvalidCalibrationError
from .bs import d1_d2_from_spot


@runtime_checkable
class Calibration(Protocol):
    """Minimum capability the lattice engine needs from a calibration."""

    def up_down_factors(
        self, rate: float, volatility: float, time_step: float
    ) -> tuple[float, float]:
        """Return the ``(u, d)`` pair for one lattice step."""


def _validate_step_inputs(*, volatility: float, time_step: float) -> None:
    if not math.isfinite(volatility) or volatility <= 0.0:
        raise InvalidCalibrationError("volatility must be finite and positive")
    if not math.isfinite(time_step) or time_step <= 0.0:
        raise InvalidCalibrationError("time_step must be finite and positive")


@dataclass(frozen=True, slots=True)
class CoxRossRubinstein:
    """``u = exp(sigma * sqrt(dt))``, ``d = 1 / u``."""

    def up_down_factors(
        self, rate: float, volatility: float, time_step: float
    ) -> tuple[float, float]:
        _validate_step_inputs(volatility=volatility, time_step=time_step)
        u = math.exp(volatility * math.sqrt(time_step))
        return u, 1.0 / u


@dataclass(frozen=True, slots=True)
class JarrowRudd:
    """Equal-probability lattice centred on the risk-neutral log drift."""

    def up_down_factors(
        self, rate: float, volatility: float, time_step: float
    ) -> tuple[float, float]:
        _validate_step_inputs(volatility=volatility, time_step=time_step)
        drift = (rate - 0.5 * volatility * volatility) * time_step
        diffusion = volatility * math.sqrt(time_step)
        return math.exp(drift + diffusion), math.exp(drift - diffusion)


def peizer_pratt_inversion(z: float, n: int) -> float:
    """Peizer-Pratt (method 2) approximation of the binomial inverse.

    Returns ``p`` such that the binomial distribution with ``n`` trials and
    success probability ``p`` approximates ``N(z)`` at its median.
    """
    if n < 1:
        raise InvalidCalibrationError("Peizer-Pratt inversion needs n >= 1")
    denom = n + 1.0 / 3.0 + 0.1 / (n + 1.0)
    exponent = (z / denom) ** 2 * (n + 1.0 / 6.0)
    return 0.5 + math.copysign(0.5, z) * math.sqrt(1.0 - math.exp(-exponent))


def is_odd_steps(n_steps: int) -> bool:
    """Leisen-Reimer lattices are usually run on an odd number of steps."""
    return n_steps % 2 == 1


@dataclass(frozen=True, slots=True)
class LeisenReimer:
    """Leisen-Reimer calibration for one contract.

    Parameters
    ----------
    spot : float
        Initial price of the underlying.
    strike : float
        Strike of the contract the lattice is tuned for.
    maturity : float
        Maturity of that contract. Together with ``time_step`` it fixes the
        number of steps ``n = round(maturity / time_step)``.

    Notes
    -----
    With ``p = h(d2, n)`` and ``p' = h(d1, n)`` (``h`` the Peizer-Pratt
    inversion), the factors are

    ``u = exp(r dt) * p' / p``,  ``d = exp(r dt) * (1 - p') / (1 - p)``

    so that the lattice's risk-neutral up probability is exactly ``p``. The
    contract terms are fields of the strategy and are therefore known before
    any factor is computed.
    """

    spot: float
    strike: float
    maturity: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.spot) or self.spot <= 0.0:
            raise InvalidCalibrationError("spot must be finite and positive")
        if not math.isfinite(self.strike) or self.strike <= 0.0:
            raise InvalidCalibrationError("strike must be finite and positive")
        if not math.isfinite(self.maturity) or self.maturity <= 0.0:
            raise InvalidCalibrationError("maturity must be finite and positive")

    @classmethod
    def for_contract(
        cls, *, spot: float, strike: float, maturity: float
    ) -> LeisenReimer:
        return cls(spot=float(spot), strike=float(strike), maturity=float(maturity))

    def n_steps(self, time_step: float) -> int:
        return max(1, int(round(self.maturity / time_step)))

    def up_down_factors(
        self, rate: float, volatility: float, time_step: float
    ) -> tuple[float, float]:
        _validate_step_inputs(volatility=volatility, time_step=time_step)
        n = self.n_steps(time_step)
        d1, d2 = d1_d2_from_spot(
            spot=self.spot,
            strike=self.strike,
            r=rate,
            q=0.0,
            sigma=volatility,
            tau=self.maturity,
        )
        p = peizer_pratt_inversion(d2, n)
        p_prime = peizer_pratt_inversion(d1, n)
        if not (0.0 < p < 1.0):
            raise InvalidCalibrationError(
                f"Leisen-Reimer probability p={p:.6g} is degenerate for n={n}"
            )

        growth = math.exp(rate * time_step)
        u = growth * p_prime / p
        d = growth * (1.0 - p_prime) / (1.0 - p)
        return u, d


__all__ = [
    "Calibration",
    "CoxRossRubinstein",
    "JarrowRudd",
    "LeisenReimer",
    "peizer_pratt_inversion",
    "is_odd_steps",
]
