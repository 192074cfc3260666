import numpy as np
import pytest

from lattice_pricing.diagnostics.convergence import (
    convergence_series,
    convergence_table,
    default_calibrations,
)
from lattice_pricing.instruments import OptionType, VanillaPayoff
from lattice_pricing.models.bs import call_price
from lattice_pricing.models.calibration import CoxRossRubinstein
from lattice_pricing.pricers.tree import EuropeanOption


def test_series_with_explicit_grid_is_sorted_and_unique():
    out = convergence_series(lambda n: 1.0 / n, [10, 5, 10, 20], benchmark=0.0)
    np.testing.assert_array_equal(out["number_of_times"], [5, 10, 20])
    np.testing.assert_allclose(out["price"], [0.2, 0.1, 0.05])
    np.testing.assert_allclose(out["abs_error"], [0.2, 0.1, 0.05])


def test_series_from_max_number_of_times():
    out = convergence_series(float, 12)
    np.testing.assert_array_equal(out["number_of_times"], np.arange(2, 13))
    assert np.all(np.isnan(out["abs_error"]))

    big = convergence_series(float, 2000)
    assert big["number_of_times"][0] == 2
    assert big["number_of_times"][-1] == 2000
    assert big["number_of_times"].size <= 81


@pytest.mark.parametrize("grid", [1, [], [1, 5]])
def test_series_rejects_bad_grids(grid):
    with pytest.raises(ValueError):
        convergence_series(float, grid)


def test_default_calibrations_include_leisen_reimer_only_with_strike():
    assert set(default_calibrations(spot=1.0, strike=None, maturity=1.0)) == {
        "cox_ross_rubinstein",
        "jarrow_rudd",
    }
    with_lr = default_calibrations(spot=1.0, strike=1.0, maturity=1.0)
    assert "leisen_reimer" in with_lr


def test_table_compares_calibrations_to_benchmark():
    S, K, r, sigma, T = 100.0, 100.0, 0.05, 0.2, 1.0
    option = EuropeanOption(T, VanillaPayoff(kind=OptionType.CALL, strike=K))
    bs = call_price(spot=S, strike=K, r=r, sigma=sigma, tau=T)

    df = convergence_table(
        option,
        spot=S,
        rate=r,
        volatility=sigma,
        strike=K,
        number_of_times=[12, 52, 102],
        benchmark=bs,
    )

    assert list(df.index) == [12, 52, 102]
    assert df.index.name == "number_of_times"
    for name in ("cox_ross_rubinstein", "jarrow_rudd", "leisen_reimer"):
        assert name in df.columns
        assert f"{name}_abs_error" in df.columns
    assert (df["benchmark"] == bs).all()
    assert df["leisen_reimer_abs_error"].iloc[-1] < 2e-3
    assert df["cox_ross_rubinstein_abs_error"].iloc[-1] < df[
        "cox_ross_rubinstein_abs_error"
    ].iloc[0]


def test_table_with_custom_calibrations_and_no_benchmark():
    option = EuropeanOption(1.0, VanillaPayoff(kind=OptionType.PUT, strike=100.0))
    df = convergence_table(
        option,
        spot=100.0,
        rate=0.0,
        volatility=0.3,
        number_of_times=[11, 21],
        calibrations={"crr": CoxRossRubinstein},
    )
    assert list(df.columns) == ["crr"]
    assert (df["crr"] > 0).all()


def test_table_rejects_empty_calibrations():
    option = EuropeanOption(1.0, VanillaPayoff(kind=OptionType.PUT, strike=100.0))
    with pytest.raises(ValueError):
        convergence_table(
            option,
            spot=100.0,
            rate=0.0,
            volatility=0.3,
            number_of_times=[11],
            calibrations={},
        )
