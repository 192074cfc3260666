from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LatticeConfig:
    """Numerical knobs of :class:`~lattice_pricing.models.lattice.BinomialLattice`.

    Parameters
    ----------
    prob_tol : float, default 1e-9
        Tolerance on ``|sum(P[k]) - 1|`` checked when the probability lattice is
        generated. Rows beyond the tolerance are logged, not rejected.
    arbitrage_tol : float, default 0.0
        Slack allowed on the risk-neutral probability outside ``[0, 1]``. Within
        the slack the probability is clipped; beyond it construction fails.
    eager : bool, default False
        Generate both lattices at construction instead of on first demand.
    """

    prob_tol: float = 1e-9
    arbitrage_tol: float = 0.0
    eager: bool = False

    def __post_init__(self) -> None:
        if not math.isfinite(self.prob_tol) or self.prob_tol <= 0:
            raise ValueError("prob_tol must be finite and > 0")
        if not math.isfinite(self.arbitrage_tol) or self.arbitrage_tol < 0:
            raise ValueError("arbitrage_tol must be finite and >= 0")


DEFAULT_CONFIG = LatticeConfig()
