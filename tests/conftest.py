"""Pytest helpers for the lattice_pricing library."""

from __future__ import annotations

import numpy as np
import pytest

from lattice_pricing.models.calibration import (
    Calibration,
    CoxRossRubinstein,
    JarrowRudd,
    LeisenReimer,
)
from lattice_pricing.models.lattice import BinomialLattice


@pytest.fixture
def base_params() -> dict:
    """A small set of canonical parameters used across tests."""
    return {
        "S": 100.0,
        "K": 100.0,
        "r": 0.05,
        "sigma": 0.2,
        "T": 1.0,
    }


@pytest.fixture
def make_lattice():
    """Factory fixture for constructing a BinomialLattice from a number of times."""

    def _make(
        *,
        S: float = 100.0,
        r: float = 0.05,
        sigma: float = 0.2,
        T: float = 1.0,
        N: int = 101,
        calibration: Calibration | None = None,
        **kwargs,
    ) -> BinomialLattice:
        return BinomialLattice.from_number_of_times(
            S, r, sigma, T, N, calibration=calibration, **kwargs
        )

    return _make


@pytest.fixture(params=["crr", "jr", "lr"])
def calibration(request) -> Calibration:
    """Each calibration strategy, LR tuned to S=K=100, T=1."""
    if request.param == "crr":
        return CoxRossRubinstein()
    if request.param == "jr":
        return JarrowRudd()
    return LeisenReimer(spot=100.0, strike=100.0, maturity=1.0)


@pytest.fixture
def rng():
    """Seeded RNG factory."""

    def _rng(seed: int) -> np.random.Generator:
        return np.random.default_rng(seed)

    return _rng
