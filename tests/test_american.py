import pytest

from lattice_pricing.instruments import OptionType, VanillaPayoff
from lattice_pricing.models.calibration import CoxRossRubinstein, JarrowRudd
from lattice_pricing.models.lattice import BinomialLattice
from lattice_pricing.pricers.tree import AmericanOption, EuropeanOption


def _put(K: float) -> VanillaPayoff:
    return VanillaPayoff(kind=OptionType.PUT, strike=K)


def _call(K: float) -> VanillaPayoff:
    return VanillaPayoff(kind=OptionType.CALL, strike=K)


def test_american_put_has_early_exercise_premium_with_positive_rate():
    """S=1, sigma=0.7, T=1, K=1, CRR, N=50."""
    lat = BinomialLattice.from_number_of_times(1.0, 0.05, 0.7, 1.0, 50)
    american = AmericanOption(1.0, _put(1.0)).value(lat)
    european = EuropeanOption(1.0, _put(1.0)).value(lat)
    assert american > european + 1e-6


def test_american_put_without_rate_matches_european():
    # with r = 0 the discounted underlying is a martingale and the put's
    # continuation value never falls below its intrinsic value
    lat = BinomialLattice.from_number_of_times(1.0, 0.0, 0.7, 1.0, 50)
    american = AmericanOption(1.0, _put(1.0)).value(lat)
    european = EuropeanOption(1.0, _put(1.0)).value(lat)
    assert american >= european - 1e-12
    assert american == pytest.approx(european, abs=1e-10)


def test_american_never_below_european(rng):
    gen = rng(2024)
    for _ in range(25):
        S = gen.uniform(50.0, 150.0)
        K = gen.uniform(50.0, 150.0)
        r = gen.uniform(0.0, 0.1)
        sigma = gen.uniform(0.1, 0.6)
        T = gen.uniform(0.25, 2.0)
        N = int(gen.integers(20, 121))
        payoff = _put(K) if gen.random() < 0.5 else _call(K)
        calib = CoxRossRubinstein() if gen.random() < 0.5 else JarrowRudd()

        lat = BinomialLattice.from_number_of_times(S, r, sigma, T, N, calibration=calib)
        american = AmericanOption(T, payoff).value(lat)
        european = EuropeanOption(T, payoff).value(lat)
        assert american >= european - 1e-12


def test_american_call_without_dividends_equals_european(make_lattice):
    lat = make_lattice(r=0.05, N=201)
    american = AmericanOption(1.0, _call(100.0)).value(lat)
    european = EuropeanOption(1.0, _call(100.0)).value(lat)
    assert american == pytest.approx(european, rel=1e-10)


def test_american_put_reference_value(base_params):
    p = base_params
    lat = BinomialLattice.from_number_of_times(p["S"], p["r"], p["sigma"], p["T"], 801)
    american = AmericanOption(p["T"], _put(p["K"])).value(lat)
    european = EuropeanOption(p["T"], _put(p["K"])).value(lat)

    assert 6.0 < american < 6.2
    assert 5.5 < european < 5.65


def test_american_value_at_least_intrinsic(make_lattice):
    lat = make_lattice(S=80.0, N=101)
    payoff = _put(100.0)
    assert AmericanOption(1.0, payoff).value(lat) >= payoff(80.0)


def test_scalar_payoff_callable(make_lattice):
    lat = make_lattice(N=61)
    vectorized = AmericanOption(1.0, _put(100.0)).value(lat)
    scalar = AmericanOption(1.0, lambda x: max(100.0 - x, 0.0)).value(lat)
    assert scalar == pytest.approx(vectorized, rel=1e-14)


def test_single_time_lattice_returns_the_payoff():
    lat = BinomialLattice.from_number_of_times(100.0, 0.05, 0.2, 0.0, 1)
    assert AmericanOption(0.0, _put(110.0)).value(lat) == 10.0


def test_invalid_maturity():
    with pytest.raises(ValueError):
        AmericanOption(-0.5, _put(1.0))
