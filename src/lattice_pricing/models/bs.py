"""Black-Scholes closed forms used as benchmarks for lattice prices.

Nothing in the lattice engine or the valuators imports this module; it is
consumed by the convergence diagnostics and the tests.
"""

from __future__ import annotations

import math

from scipy.stats import norm


def _validate_scalar_inputs(
    *, spot: float, strike: float, sigma: float, tau: float
) -> None:
    if spot <= 0.0:
        raise ValueError("spot must be positive")
    if strike <= 0.0:
        raise ValueError("strike must be positive")
    if sigma <= 0.0:
        raise ValueError("sigma must be positive")
    if tau <= 0.0:
        raise ValueError("tau must be positive")


def discount_factor(rate: float, tau: float) -> float:
    return math.exp(-rate * tau)


def d1_d2_from_spot(
    *, spot: float, strike: float, r: float, sigma: float, tau: float, q: float = 0.0
) -> tuple[float, float]:
    _validate_scalar_inputs(spot=spot, strike=strike, sigma=sigma, tau=tau)
    vol_sqrt_t = sigma * math.sqrt(tau)
    num = math.log(spot / strike) + (r - q + 0.5 * sigma * sigma) * tau
    d1 = num / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    return float(d1), float(d2)


def call_price(
    *, spot: float, strike: float, r: float, sigma: float, tau: float, q: float = 0.0
) -> float:
    """
    Black–Scholes European call with continuous dividend yield q.
    """
    d1, d2 = d1_d2_from_spot(spot=spot, strike=strike, r=r, q=q, sigma=sigma, tau=tau)
    df_r = discount_factor(r, tau)
    df_q = discount_factor(q, tau)
    return float(spot * df_q * norm.cdf(d1) - strike * df_r * norm.cdf(d2))


def put_price(
    *, spot: float, strike: float, r: float, sigma: float, tau: float, q: float = 0.0
) -> float:
    """
    Black–Scholes European put with continuous dividend yield q.
    """
    d1, d2 = d1_d2_from_spot(spot=spot, strike=strike, r=r, q=q, sigma=sigma, tau=tau)
    df_r = discount_factor(r, tau)
    df_q = discount_factor(q, tau)
    return float(strike * df_r * norm.cdf(-d2) - spot * df_q * norm.cdf(-d1))


def digital_call_price(
    *,
    spot: float,
    strike: float,
    r: float,
    sigma: float,
    tau: float,
    cash: float = 1.0,
) -> float:
    """Cash-or-nothing call paying ``cash`` if ``S_T > K``."""
    _, d2 = d1_d2_from_spot(spot=spot, strike=strike, r=r, sigma=sigma, tau=tau)
    return float(cash * discount_factor(r, tau) * norm.cdf(d2))


def down_and_out_call_price(
    *,
    spot: float,
    strike: float,
    barrier: float,
    r: float,
    sigma: float,
    tau: float,
) -> float:
    """Continuously monitored down-and-out call, no rebate, ``barrier <= strike``.

    ``C(S) - (S/H)^(-(2r/sigma^2 - 1)) * C(H^2/S)`` with ``C`` the vanilla call.
    """
    if barrier <= 0.0:
        raise ValueError("barrier must be positive")
    if barrier > strike:
        raise ValueError("closed form requires barrier <= strike")
    if spot <= barrier:
        return 0.0

    vanilla = call_price(spot=spot, strike=strike, r=r, sigma=sigma, tau=tau)
    reflected = call_price(
        spot=barrier * barrier / spot, strike=strike, r=r, sigma=sigma, tau=tau
    )
    exponent = -(2.0 * r / (sigma * sigma) - 1.0)
    return float(vanilla - (spot / barrier) ** exponent * reflected)
