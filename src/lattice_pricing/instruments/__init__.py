"""lattice_pricing.instruments

Payoff definitions ("what is being priced"), independent of the lattice and of
the valuation algorithm.
"""

from .payoffs import (
    DigitalPayoff,
    OptionType,
    VanillaPayoff,
    call_payoff,
    make_vanilla_payoff,
    put_payoff,
)

__all__ = [
    "OptionType",
    "VanillaPayoff",
    "DigitalPayoff",
    "call_payoff",
    "put_payoff",
    "make_vanilla_payoff",
]
