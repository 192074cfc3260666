"""Exceptions raised by the lattice engine and its calibrations."""


class LatticeError(Exception):
    """Base class for lattice construction and query failures."""


class TimeIndexOutOfRangeError(LatticeError, IndexError, ValueError):
    """Raised when a time index (or a time snapped to one) is off the grid.

    Valid indices are ``0 <= k < number_of_times``. Out-of-range requests are
    never clamped to the nearest valid index.
    """


class InvalidCalibrationError(LatticeError, ValueError):
    """Raised when calibrated factors do not define an arbitrage-free lattice.

    Notes
    -----
    The risk-neutral up probability is

    ``q = (1 + rho - d) / (u - d)``

    with ``rho = exp(r * dt) - 1``. Arbitrage-freedom is ``d < 1 + rho < u``,
    i.e. ``0 <= q <= 1``. Outside that range every downstream price is
    meaningless, so the lattice refuses to be built.
    """


class DegenerateLatticeError(InvalidCalibrationError):
    """Raised when the up and down factors coincide (``u == d``)."""
