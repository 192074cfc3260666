from .convergence import convergence_series, convergence_table, default_calibrations

__all__ = ["convergence_series", "convergence_table", "default_calibrations"]
