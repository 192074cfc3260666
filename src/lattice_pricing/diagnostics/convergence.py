"""Price-versus-N sweeps for lattice valuations.

A contract is valued on lattices with an increasing number of times, under one
or more calibrations, and optionally compared to a closed-form benchmark.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

import numpy as np
import pandas as pd

from ..models.calibration import (
    Calibration,
    CoxRossRubinstein,
    JarrowRudd,
    LeisenReimer,
)
from ..models.lattice import BinomialLattice

logger = logging.getLogger(__name__)


class _Valuator(Protocol):
    maturity: float

    def value(self, lattice: BinomialLattice) -> float: ...


def _number_of_times_grid(number_of_times: int | Iterable[int]) -> np.ndarray:
    # Convenience: an int means "max number of times".
    # Up to 500 every N in 2..max is used; beyond that a geometric grid.
    if isinstance(number_of_times, (int, np.integer)):
        max_n = int(number_of_times)
        if max_n < 2:
            raise ValueError("number_of_times must be >= 2")
        if max_n <= 500:
            return np.arange(2, max_n + 1, dtype=int)
        grid = np.unique(np.round(np.geomspace(2, max_n, num=80)).astype(int))
        if grid[-1] != max_n:
            grid = np.append(grid, max_n)
        return grid

    grid = np.asarray(list(number_of_times), dtype=int)
    if grid.size == 0:
        raise ValueError("number_of_times must be non-empty")
    if np.any(grid < 2):
        raise ValueError("number_of_times must be integers >= 2")
    return np.unique(grid)


def convergence_series(
    price_fn: Callable[[int], float],
    number_of_times: int | Iterable[int],
    *,
    benchmark: float | None = None,
) -> dict[str, np.ndarray]:
    """Evaluate ``price_fn(N)`` over a grid of N.

    Returns a dict with keys:
      - number_of_times: (m,) int
      - price:           (m,) float
      - abs_error:       (m,) float, NaN when no benchmark is given
    """
    grid = _number_of_times_grid(number_of_times)
    prices = np.array([float(price_fn(int(n))) for n in grid], dtype=float)
    if benchmark is None:
        abs_err = np.full_like(prices, np.nan)
    else:
        abs_err = np.abs(prices - float(benchmark))
    return {"number_of_times": grid, "price": prices, "abs_error": abs_err}


def default_calibrations(
    *, spot: float, strike: float | None, maturity: float
) -> dict[str, Callable[[], Calibration]]:
    """CRR and Jarrow-Rudd, plus Leisen-Reimer when a strike is known."""
    out: dict[str, Callable[[], Calibration]] = {
        "cox_ross_rubinstein": CoxRossRubinstein,
        "jarrow_rudd": JarrowRudd,
    }
    if strike is not None:
        out["leisen_reimer"] = lambda: LeisenReimer.for_contract(
            spot=spot, strike=strike, maturity=maturity
        )
    return out


def convergence_table(
    option: _Valuator,
    *,
    spot: float,
    rate: float,
    volatility: float,
    number_of_times: int | Iterable[int],
    last_time: float | None = None,
    strike: float | None = None,
    calibrations: Mapping[str, Callable[[], Calibration]] | None = None,
    benchmark: float | None = None,
) -> pd.DataFrame:
    """Value ``option`` for every N and every calibration.

    Returns a DataFrame indexed by ``number_of_times`` with one price column per
    calibration and, when ``benchmark`` is given, one ``<name>_abs_error``
    column per calibration plus a constant ``benchmark`` column.
    """
    last_time = option.maturity if last_time is None else float(last_time)
    if calibrations is None:
        calibrations = default_calibrations(
            spot=spot, strike=strike, maturity=option.maturity
        )

    columns: dict[str, np.ndarray] = {}
    grid: np.ndarray | None = None
    for name, make_calibration in calibrations.items():
        logger.debug("Convergence sweep for %s", name)

        def price_at(n: int, make_calibration=make_calibration) -> float:
            lattice = BinomialLattice.from_number_of_times(
                spot,
                rate,
                volatility,
                last_time,
                n,
                calibration=make_calibration(),
            )
            return option.value(lattice)

        series = convergence_series(price_at, number_of_times, benchmark=benchmark)
        grid = series["number_of_times"]
        columns[name] = series["price"]
        if benchmark is not None:
            columns[f"{name}_abs_error"] = series["abs_error"]

    if grid is None:
        raise ValueError("calibrations must be non-empty")

    df = pd.DataFrame(columns, index=pd.Index(grid, name="number_of_times"))
    if benchmark is not None:
        df["benchmark"] = float(benchmark)
    return df
