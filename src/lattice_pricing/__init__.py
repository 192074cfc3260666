"""
lattice_pricing

Binomial-lattice approximation of the Black-Scholes model and backward-induction
pricing of European, American and knock-out barrier contracts.

The main user-facing names are re-exported at the top level, so you can write,
for example:

    from lattice_pricing import BinomialLattice, EuropeanOption, VanillaPayoff
"""

from .config import LatticeConfig
from .exceptions import (
    DegenerateLatticeError,
    InvalidCalibrationError,
    LatticeError,
    TimeIndexOutOfRangeError,
)
from .instruments import DigitalPayoff, OptionType, VanillaPayoff
from .models import (
    BinomialLattice,
    Calibration,
    CoxRossRubinstein,
    JarrowRudd,
    LeisenReimer,
)
from .pricers import AmericanOption, BarrierBounds, EuropeanOption, KnockOutBarrierOption

__all__ = [
    # Config / errors
    "LatticeConfig",
    "LatticeError",
    "TimeIndexOutOfRangeError",
    "InvalidCalibrationError",
    "DegenerateLatticeError",
    # Payoffs
    "OptionType",
    "VanillaPayoff",
    "DigitalPayoff",
    # Model
    "BinomialLattice",
    "Calibration",
    "CoxRossRubinstein",
    "JarrowRudd",
    "LeisenReimer",
    # Valuators
    "EuropeanOption",
    "AmericanOption",
    "BarrierBounds",
    "KnockOutBarrierOption",
]
