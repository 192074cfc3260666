"""Contract valuators driving a binomial lattice by backward induction."""

from .tree import AmericanOption, BarrierBounds, EuropeanOption, KnockOutBarrierOption

__all__ = [
    "EuropeanOption",
    "AmericanOption",
    "BarrierBounds",
    "KnockOutBarrierOption",
]
