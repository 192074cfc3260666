"""Recombining binomial lattice approximating a Black-Scholes asset.

The lattice has ``number_of_times`` time indices ``k = 0, ..., N - 1`` spaced by
``time_step``. After ``k`` moves with ``j`` of them down the asset is worth

``V[k][j] = S0 * u**(k - j) * d**j``,   ``0 <= j <= k``

and that node is reached with risk-neutral probability

``P[k][j] = C(k, j) * q**(k - j) * (1 - q)**j``.

Both triangular lattices are generated once, on first demand (or eagerly, see
:class:`~lattice_pricing.config.LatticeConfig`), and returned row by row as
read-only arrays. Factor calibration is delegated to a
:class:`~lattice_pricing.models.calibration.Calibration`.
"""

from __future__ import annotations

import logging
import math
import threading

import numpy as np

from ..config import DEFAULT_CONFIG, LatticeConfig
from ..exceptions import (
    DegenerateLatticeError,
    InvalidCalibrationError,
    TimeIndexOutOfRangeError,
)
from ..typing import FloatArray, FloatDType, ScalarFn
from .calibration import Calibration, CoxRossRubinstein

logger = logging.getLogger(__name__)


def _read_only(row: np.ndarray) -> FloatArray:
    row.setflags(write=False)
    return row


class BinomialLattice:
    """Binomial approximation of a log-normal asset on a uniform time grid.

    Parameters
    ----------
    initial_price : float
        Spot price ``S0`` at time index 0.
    rate : float
        Continuously-compounded risk-free rate ``r``.
    volatility : float
        Black-Scholes volatility ``sigma``.
    last_time : float
        Requested horizon. With ``time_step`` construction the last grid index
        sits at :attr:`grid_end`, the nearest multiple of ``dt``.
    number_of_times : int, optional
        Number of time indices ``N``; the time step is ``last_time / (N - 1)``.
    time_step : float, optional
        Time step ``dt``; then ``N = round(last_time / dt) + 1``.
    calibration : Calibration, optional
        Strategy producing ``(u, d)``. Defaults to :class:`CoxRossRubinstein`.
    config : LatticeConfig, optional

    Exactly one of ``number_of_times`` and ``time_step`` must be given.

    Raises
    ------
    InvalidCalibrationError
        If the calibrated factors violate ``d < 1 + rho < u``, or a
        contract-specific calibration carries a ``spot`` different from
        ``initial_price`` or a ``maturity`` beyond the last grid index.
    DegenerateLatticeError
        If ``u == d``.

    Notes
    -----
    A single-index lattice (``number_of_times=1``) is only defined for
    ``last_time == 0``. It has no steps, so calibration is skipped and every
    valuation reduces to the payoff at ``initial_price``.
    """

    def __init__(
        self,
        initial_price: float,
        rate: float,
        volatility: float,
        last_time: float,
        *,
        number_of_times: int | None = None,
        time_step: float | None = None,
        calibration: Calibration | None = None,
        config: LatticeConfig | None = None,
    ) -> None:
        if not math.isfinite(initial_price) or initial_price <= 0.0:
            raise ValueError("initial_price must be finite and positive")
        if not math.isfinite(last_time) or last_time < 0.0:
            raise ValueError("last_time must be finite and non-negative")
        if (number_of_times is None) == (time_step is None):
            raise ValueError("Pass exactly one of number_of_times and time_step")

        if number_of_times is not None:
            number_of_times = int(number_of_times)
            if number_of_times < 1:
                raise ValueError("number_of_times must be >= 1")
            if number_of_times == 1:
                if last_time != 0.0:
                    raise ValueError(
                        "number_of_times=1 requires last_time == 0 (no steps)"
                    )
                time_step = 0.0
            else:
                time_step = last_time / (number_of_times - 1)
        else:
            time_step = float(time_step)
            if not math.isfinite(time_step) or time_step <= 0.0:
                raise ValueError("time_step must be finite and positive")
            number_of_times = int(round(last_time / time_step)) + 1

        self._initial_price = float(initial_price)
        self._rate = float(rate)
        self._volatility = float(volatility)
        self._last_time = float(last_time)
        self._time_step = time_step
        self._number_of_times = number_of_times
        self._calibration = calibration if calibration is not None else CoxRossRubinstein()
        self._config = config if config is not None else DEFAULT_CONFIG

        if number_of_times == 1 and time_step == 0.0:
            self._up_factor = 1.0
            self._down_factor = 1.0
            self._risk_free_factor = 0.0
            self._q_up = 0.5
        else:
            self._calibrate()

        self._values: list[FloatArray] | None = None
        self._probabilities: list[FloatArray] | None = None
        self._lock = threading.Lock()

        logger.debug(
            "BinomialLattice(%s): N=%d dt=%.6g u=%.10g d=%.10g rho=%.6g q=%.10g",
            type(self._calibration).__name__,
            self._number_of_times,
            self._time_step,
            self._up_factor,
            self._down_factor,
            self._risk_free_factor,
            self._q_up,
        )

        if self._config.eager:
            self._ensure_values()
            self._ensure_probabilities()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def from_number_of_times(
        cls,
        initial_price: float,
        rate: float,
        volatility: float,
        last_time: float,
        number_of_times: int,
        *,
        calibration: Calibration | None = None,
        config: LatticeConfig | None = None,
    ) -> BinomialLattice:
        return cls(
            initial_price,
            rate,
            volatility,
            last_time,
            number_of_times=number_of_times,
            calibration=calibration,
            config=config,
        )

    @classmethod
    def from_time_step(
        cls,
        initial_price: float,
        rate: float,
        volatility: float,
        last_time: float,
        time_step: float,
        *,
        calibration: Calibration | None = None,
        config: LatticeConfig | None = None,
    ) -> BinomialLattice:
        return cls(
            initial_price,
            rate,
            volatility,
            last_time,
            time_step=time_step,
            calibration=calibration,
            config=config,
        )

    def _check_contract_terms(self) -> None:
        # Contract-specific calibrations must be tuned to this lattice.
        spot = getattr(self._calibration, "spot", None)
        if spot is not None and not math.isclose(
            spot, self._initial_price, rel_tol=1e-12
        ):
            raise InvalidCalibrationError(
                f"Calibration spot {spot!r} differs from the lattice initial "
                f"price {self._initial_price!r}"
            )
        maturity = getattr(self._calibration, "maturity", None)
        if maturity is not None:
            n = int(round(maturity / self._time_step))
            if n > self._number_of_times - 1:
                raise InvalidCalibrationError(
                    f"Calibration maturity {maturity!r} needs {n} steps, the "
                    f"lattice has {self._number_of_times - 1}"
                )

    def _calibrate(self) -> None:
        self._check_contract_terms()
        u, d = self._calibration.up_down_factors(
            self._rate, self._volatility, self._time_step
        )
        u, d = float(u), float(d)
        if not (math.isfinite(u) and math.isfinite(d)):
            raise InvalidCalibrationError(f"Non-finite factors: u={u!r}, d={d!r}")
        if u <= 0.0 or d <= 0.0:
            raise InvalidCalibrationError(f"Factors must be positive: u={u}, d={d}")
        if u == d:
            raise DegenerateLatticeError(
                f"Up and down factors coincide (u = d = {u}); "
                "the risk-neutral probability is undefined."
            )
        if d > u:
            raise InvalidCalibrationError(f"Need d < u, got u={u}, d={d}")

        rho = math.exp(self._rate * self._time_step) - 1.0
        q = (1.0 + rho - d) / (u - d)

        tol = self._config.arbitrage_tol
        if not (-tol <= q <= 1.0 + tol):
            raise InvalidCalibrationError(
                f"Risk-neutral probability out of bounds: q={q:.6g} "
                f"(u={u:.6g}, d={d:.6g}, 1+rho={1.0 + rho:.6g}). "
                "Need d < 1 + rho < u; try more time steps or check rate/volatility."
            )

        self._up_factor = u
        self._down_factor = d
        self._risk_free_factor = rho
        self._q_up = min(max(q, 0.0), 1.0)

    # ------------------------------------------------------------------
    # Lattice generation
    # ------------------------------------------------------------------
    def _generate_values(self) -> list[FloatArray]:
        rows: list[FloatArray] = []
        for k in range(self._number_of_times):
            downs = np.arange(k + 1, dtype=FloatDType)
            row = (
                self._initial_price
                * self._up_factor ** (k - downs)
                * self._down_factor**downs
            )
            rows.append(_read_only(row))
        return rows

    def _generate_probabilities(self) -> list[FloatArray]:
        q = self._q_up
        rows: list[FloatArray] = [_read_only(np.ones(1, dtype=FloatDType))]
        # C(k, j + 1) = C(k, j) * (k - j) / (j + 1), accumulated as a cumulative
        # sum of log ratios instead of a running product. C(k, j) alone exceeds
        # the float range near k = 1030 even though C(k, j) q^(k-j) (1-q)^j
        # does not, so the powers are added in log space before exponentiating.
        log_q = math.log(q) if q > 0.0 else -math.inf
        log_1mq = math.log1p(-q) if q < 1.0 else -math.inf
        for k in range(1, self._number_of_times):
            downs = np.arange(k + 1, dtype=FloatDType)
            if q == 0.0 or q == 1.0:
                row = np.zeros(k + 1, dtype=FloatDType)
                row[k if q == 0.0 else 0] = 1.0
            else:
                j = downs[:-1]
                log_ratio = np.log(k - j) - np.log(j + 1.0)
                log_comb = np.concatenate(([0.0], np.cumsum(log_ratio)))
                row = np.exp(log_comb + (k - downs) * log_q + downs * log_1mq)

            err = abs(float(row.sum()) - 1.0)
            if err > self._config.prob_tol:
                logger.warning(
                    "Probability row %d sums to 1 %+.3e (tolerance %.1e)",
                    k,
                    float(row.sum()) - 1.0,
                    self._config.prob_tol,
                )
            rows.append(_read_only(row))
        return rows

    def _ensure_values(self) -> list[FloatArray]:
        if self._values is None:
            with self._lock:
                if self._values is None:
                    logger.debug("Generating value lattice (N=%d)", self._number_of_times)
                    self._values = self._generate_values()
        return self._values

    def _ensure_probabilities(self) -> list[FloatArray]:
        if self._probabilities is None:
            with self._lock:
                if self._probabilities is None:
                    logger.debug(
                        "Generating probability lattice (N=%d)", self._number_of_times
                    )
                    self._probabilities = self._generate_probabilities()
        return self._probabilities

    # ------------------------------------------------------------------
    # Time grid
    # ------------------------------------------------------------------
    def _check_index(self, time_index: int) -> int:
        k = int(time_index)
        if k != time_index or not (0 <= k < self._number_of_times):
            raise TimeIndexOutOfRangeError(
                f"time index {time_index!r} outside [0, {self._number_of_times - 1}]"
            )
        return k

    def time_index(self, time: float) -> int:
        """Snap ``time`` to the nearest grid index.

        Exact half-step ties go to the later index (``floor(t / dt + 1/2)``).
        The result is validated: times snapping off the grid raise
        :class:`TimeIndexOutOfRangeError`.
        """
        if not math.isfinite(time):
            raise TimeIndexOutOfRangeError(f"time must be finite, got {time!r}")
        if self._time_step == 0.0:
            k = 0 if time == 0.0 else -1
        else:
            k = math.floor(time / self._time_step + 0.5)
        if not (0 <= k < self._number_of_times):
            raise TimeIndexOutOfRangeError(
                f"time {time!r} snaps to index {k}, outside "
                f"[0, {self._number_of_times - 1}]"
            )
        return k

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------
    def values_at_time_index(self, time_index: int) -> FloatArray:
        """Underlying values ``V[k][0..k]``, ordered from most ups to most downs."""
        k = self._check_index(time_index)
        return self._ensure_values()[k]

    def values_at_time(self, time: float) -> FloatArray:
        return self.values_at_time_index(self.time_index(time))

    def transformed_values_at_time_index(
        self, time_index: int, transform: ScalarFn
    ) -> FloatArray:
        """Apply ``transform`` elementwise to :meth:`values_at_time_index`.

        Numpy ufuncs and callables flagged with a truthy ``vectorized``
        attribute are applied to the whole row at once; any other callable is
        treated as scalar-to-scalar.
        """
        row = self.values_at_time_index(time_index)
        if isinstance(transform, np.ufunc) or getattr(transform, "vectorized", False):
            return np.asarray(transform(row), dtype=FloatDType).reshape(row.shape)
        return np.fromiter(
            (transform(float(x)) for x in row), dtype=FloatDType, count=row.size
        )

    def transformed_values_at_time(
        self, time: float, transform: ScalarFn
    ) -> FloatArray:
        return self.transformed_values_at_time_index(self.time_index(time), transform)

    def probabilities_at_time_index(self, time_index: int) -> FloatArray:
        """Risk-neutral probabilities ``P[k][0..k]`` of the nodes at index ``k``."""
        k = self._check_index(time_index)
        return self._ensure_probabilities()[k]

    def probabilities_at_time(self, time: float) -> FloatArray:
        return self.probabilities_at_time_index(self.time_index(time))

    def conditional_expectation(self, values) -> FloatArray:
        """One discounted backward step.

        Given the ``m`` values a quantity can take at some time index, return
        the ``m - 1`` discounted risk-neutral conditional expectations at the
        previous index:

        ``(values[j] * q + values[j + 1] * (1 - q)) / (1 + rho)``.
        """
        arr = np.asarray(values, dtype=FloatDType)
        if arr.ndim != 1 or arr.size < 2:
            raise ValueError("conditional_expectation needs a 1-D array of length >= 2")
        q = self._q_up
        return (arr[:-1] * q + arr[1:] * (1.0 - q)) / (1.0 + self._risk_free_factor)

    def discount_factor(self, time_index: int) -> float:
        """``(1 + rho) ** -k``."""
        k = self._check_index(time_index)
        return (1.0 + self._risk_free_factor) ** (-k)

    # ------------------------------------------------------------------
    # Read-only accessors
    # ------------------------------------------------------------------
    @property
    def initial_price(self) -> float:
        return self._initial_price

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def volatility(self) -> float:
        return self._volatility

    @property
    def up_factor(self) -> float:
        return self._up_factor

    @property
    def down_factor(self) -> float:
        return self._down_factor

    @property
    def risk_free_factor(self) -> float:
        """``rho = exp(r * dt) - 1``, not to be confused with the rate ``r``."""
        return self._risk_free_factor

    @property
    def risk_neutral_probability_up(self) -> float:
        return self._q_up

    @property
    def up_down_probabilities(self) -> tuple[float, float]:
        return self._q_up, 1.0 - self._q_up

    @property
    def time_step(self) -> float:
        return self._time_step

    @property
    def number_of_times(self) -> int:
        return self._number_of_times

    @property
    def number_of_steps(self) -> int:
        return self._number_of_times - 1

    @property
    def last_time(self) -> float:
        """Requested last time, as passed at construction.

        With ``time_step`` construction the grid ends at
        ``(number_of_times - 1) * time_step``, which can differ from this value
        when ``last_time / time_step`` is not an integer; see :attr:`grid_end`.
        """
        return self._last_time

    @property
    def grid_end(self) -> float:
        """Time of the last grid index, ``(number_of_times - 1) * time_step``."""
        return (self._number_of_times - 1) * self._time_step

    @property
    def times(self) -> FloatArray:
        return np.arange(self._number_of_times, dtype=FloatDType) * self._time_step

    @property
    def calibration(self) -> Calibration:
        return self._calibration

    @property
    def config(self) -> LatticeConfig:
        return self._config

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(initial_price={self._initial_price!r}, "
            f"number_of_times={self._number_of_times}, time_step={self._time_step!r}, "
            f"calibration={self._calibration!r})"
        )
