from __future__ import annotations


def main() -> None:
    from lattice_pricing import (
        AmericanOption,
        BinomialLattice,
        CoxRossRubinstein,
        EuropeanOption,
        KnockOutBarrierOption,
        LeisenReimer,
        OptionType,
        VanillaPayoff,
    )
    from lattice_pricing.models.bs import call_price

    spot, strike, rate, sigma, expiry = 100.0, 100.0, 0.05, 0.20, 1.0

    lattice = BinomialLattice.from_number_of_times(
        spot, rate, sigma, expiry, 501, calibration=CoxRossRubinstein()
    )
    call = VanillaPayoff(kind=OptionType.CALL, strike=strike)
    put = VanillaPayoff(kind=OptionType.PUT, strike=strike)

    print("BS:", call_price(spot=spot, strike=strike, r=rate, sigma=sigma, tau=expiry))
    print("CRR European call:", EuropeanOption(expiry, call).value(lattice))
    print("CRR American put:", AmericanOption(expiry, put).value(lattice))
    print(
        "CRR down-and-out call (H=90):",
        KnockOutBarrierOption(expiry, call, lower_barrier=90.0).value(lattice),
    )

    lr = BinomialLattice.from_number_of_times(
        spot,
        rate,
        sigma,
        expiry,
        102,
        calibration=LeisenReimer.for_contract(
            spot=spot, strike=strike, maturity=expiry
        ),
    )
    print("LR European call (101 steps):", EuropeanOption(expiry, call).value(lr))


if __name__ == "__main__":
    main()
