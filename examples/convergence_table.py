from __future__ import annotations


def main() -> None:
    import pandas as pd

    from lattice_pricing import EuropeanOption, OptionType, VanillaPayoff
    from lattice_pricing.diagnostics import convergence_table
    from lattice_pricing.models.bs import call_price

    spot, strike, rate, sigma, expiry = 100.0, 110.0, 0.03, 0.30, 0.5
    option = EuropeanOption(expiry, VanillaPayoff(kind=OptionType.CALL, strike=strike))
    benchmark = call_price(spot=spot, strike=strike, r=rate, sigma=sigma, tau=expiry)

    df = convergence_table(
        option,
        spot=spot,
        rate=rate,
        volatility=sigma,
        strike=strike,
        number_of_times=[26, 52, 102, 202, 402],
        benchmark=benchmark,
    )
    with pd.option_context("display.float_format", "{:.6f}".format):
        print(df)


if __name__ == "__main__":
    main()
