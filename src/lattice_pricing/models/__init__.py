"""Lattice model and calibration strategies."""

from .calibration import (
    Calibration,
    CoxRossRubinstein,
    JarrowRudd,
    LeisenReimer,
    is_odd_steps,
    peizer_pratt_inversion,
)
from .lattice import BinomialLattice

__all__ = [
    "BinomialLattice",
    "Calibration",
    "CoxRossRubinstein",
    "JarrowRudd",
    "LeisenReimer",
    "is_odd_steps",
    "peizer_pratt_inversion",
]
