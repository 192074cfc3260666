import math

import pytest

from lattice_pricing.models.bs import (
    call_price,
    digital_call_price,
    down_and_out_call_price,
    put_price,
)


def test_put_call_parity_no_dividends():
    """C - P = S - K*exp(-rT) for European options with q=0."""
    S, K, r, sigma, T = 100.0, 105.0, 0.03, 0.25, 1.2
    C = call_price(spot=S, strike=K, r=r, sigma=sigma, tau=T)
    P = put_price(spot=S, strike=K, r=r, sigma=sigma, tau=T)
    assert abs((C - P) - (S - K * math.exp(-r * T))) < 1e-10


def test_call_bounds():
    """max(S-K*df,0) <= C <= S."""
    S, K, r, sigma, T = 120.0, 100.0, 0.04, 0.3, 0.75
    C = call_price(spot=S, strike=K, r=r, sigma=sigma, tau=T)
    assert max(S - K * math.exp(-r * T), 0.0) - 1e-12 <= C <= S + 1e-12


def test_digital_call_bounds_and_strike_monotonicity():
    kw = {"spot": 100.0, "r": 0.02, "sigma": 0.3, "tau": 0.5}
    d_low = digital_call_price(strike=95.0, **kw)
    d_high = digital_call_price(strike=105.0, **kw)
    assert 0.0 <= d_high <= d_low <= math.exp(-0.02 * 0.5)
    assert digital_call_price(strike=95.0, cash=10.0, **kw) == pytest.approx(10 * d_low)


def test_down_and_out_below_vanilla_and_zero_when_knocked():
    kw = {"strike": 100.0, "r": 0.0, "sigma": 0.2, "tau": 1.0}
    vanilla = call_price(spot=100.0, **kw)
    dao = down_and_out_call_price(spot=100.0, barrier=90.0, **kw)
    assert 0.0 < dao < vanilla
    assert down_and_out_call_price(spot=89.0, barrier=90.0, **kw) == 0.0


def test_down_and_out_tends_to_vanilla_for_remote_barrier():
    kw = {"spot": 100.0, "strike": 100.0, "r": 0.05, "sigma": 0.2, "tau": 1.0}
    vanilla = call_price(**kw)
    assert down_and_out_call_price(barrier=1.0, **kw) == pytest.approx(vanilla, abs=1e-8)


def test_down_and_out_requires_barrier_below_strike():
    with pytest.raises(ValueError):
        down_and_out_call_price(
            spot=100.0, strike=100.0, barrier=105.0, r=0.0, sigma=0.2, tau=1.0
        )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"spot": 0.0, "strike": 100.0, "sigma": 0.2, "tau": 1.0},
        {"spot": 100.0, "strike": 100.0, "sigma": 0.0, "tau": 1.0},
        {"spot": 100.0, "strike": 100.0, "sigma": 0.2, "tau": 0.0},
    ],
)
def test_invalid_inputs(kwargs):
    with pytest.raises(ValueError):
        call_price(r=0.0, **kwargs)
