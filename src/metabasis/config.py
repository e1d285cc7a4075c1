"""
Global Configuration for Metabasis Package
==========================================

This module provides package-wide configuration settings that users can modify
to control solver tolerances, advisory-check behavior, and trajectory sampling.

Examples
--------
View current configuration:

>>> import metabasis
>>> print(metabasis.config)

Modify settings:

>>> metabasis.config.LAMBERT_MAX_ITERATIONS = 50
>>> metabasis.config.TRAJECTORY_POINTS = 200

Reset to defaults:

>>> metabasis.config.reset()

Temporarily modify settings:

>>> with metabasis.temp_config(STRICT_ADVISORIES=True):
...     # numerical drift now raises instead of warning
...     metabasis.compute_transfer("2025-01-01", "lambert", 50)

Notes
-----
These settings affect package-wide behavior. Modifying them will impact
all subsequent computations until changed again or reset.
"""

from dataclasses import dataclass
from contextlib import contextmanager


@dataclass
class MetabasisConfig:
    """
    Global configuration for Metabasis package.

    Attributes
    ----------
    LAMBERT_TOLERANCE : float
        Convergence threshold on the nondimensional time-of-flight residual.
        Default: 1e-14
    LAMBERT_MAX_ITERATIONS : int
        Householder iteration budget before the solver gives up.
        Default: 30
    LAMBERT_MAX_STEP : float
        Largest change of x allowed in a single iteration.
        Default: 0.5
    LAMBERT_X_MIN, LAMBERT_X_MAX : float
        Bounds on the universal variable x during iteration.
        Default: -1.0, 50.0
    DETERMINANT_TOL : float
        Allowed drift of the Lagrange determinant f*gdot - fdot*g from 1.
        Default: 1e-10
    ENERGY_BALANCE_TOL : float
        Relative tolerance of the patched-conic escape-leg energy check.
        Default: 1e-6
    ARRIVAL_RESIDUAL_TOL_KM : float
        Allowed miss distance when a Lambert arc is propagated to arrival.
        Default: 1.0
    STRICT_ADVISORIES : bool
        If True, advisory numerical checks raise ConvergenceError.
        If False, they issue NumericalDriftWarning.
        Default: False
    EQUALITY_RTOL : float
        Relative tolerance for floating-point equality comparisons.
        Default: 1e-12
    EQUALITY_ATOL : float
        Absolute tolerance for floating-point equality comparisons.
        Default: 1e-14
    TRAJECTORY_POINTS : int
        Number of samples in a generated trajectory point sequence.
        Default: 100
    BI_ELLIPTIC_APOAPSIS_RATIO : float
        Intermediate apoapsis of the bi-elliptic Earth leg, as a multiple
        of the Earth-Moon distance.
        Default: 2.0
    """

    # Lambert root finder
    LAMBERT_TOLERANCE: float = 1e-14
    LAMBERT_MAX_ITERATIONS: int = 30
    LAMBERT_MAX_STEP: float = 0.5
    LAMBERT_X_MIN: float = -1.0
    LAMBERT_X_MAX: float = 50.0

    # Advisory checks
    DETERMINANT_TOL: float = 1e-10
    ENERGY_BALANCE_TOL: float = 1e-6
    ARRIVAL_RESIDUAL_TOL_KM: float = 1.0
    STRICT_ADVISORIES: bool = False

    # Numerical tolerance for equality comparisons
    EQUALITY_RTOL: float = 1e-12
    EQUALITY_ATOL: float = 1e-14

    # Engine defaults
    TRAJECTORY_POINTS: int = 100
    BI_ELLIPTIC_APOAPSIS_RATIO: float = 2.0

    def reset(self):
        """
        Reset all configuration values to package defaults.

        Examples
        --------
        >>> import metabasis
        >>> metabasis.config.LAMBERT_MAX_ITERATIONS = 5  # Modify
        >>> metabasis.config.reset()  # Back to defaults
        >>> metabasis.config.LAMBERT_MAX_ITERATIONS
        30
        """
        defaults = MetabasisConfig()
        for key in self.__dataclass_fields__:
            setattr(self, key, getattr(defaults, key))

    def __repr__(self):
        """Return formatted string showing all configuration values."""
        lines = ["MetabasisConfig:"]
        lines.append("  Lambert Solver:")
        lines.append(f"    LAMBERT_TOLERANCE = {self.LAMBERT_TOLERANCE}")
        lines.append(f"    LAMBERT_MAX_ITERATIONS = {self.LAMBERT_MAX_ITERATIONS}")
        lines.append(f"    LAMBERT_MAX_STEP = {self.LAMBERT_MAX_STEP}")
        lines.append(f"    LAMBERT_X_MIN = {self.LAMBERT_X_MIN}")
        lines.append(f"    LAMBERT_X_MAX = {self.LAMBERT_X_MAX}")
        lines.append("  Advisory Checks:")
        lines.append(f"    DETERMINANT_TOL = {self.DETERMINANT_TOL}")
        lines.append(f"    ENERGY_BALANCE_TOL = {self.ENERGY_BALANCE_TOL}")
        lines.append(f"    ARRIVAL_RESIDUAL_TOL_KM = {self.ARRIVAL_RESIDUAL_TOL_KM}")
        lines.append(f"    STRICT_ADVISORIES = {self.STRICT_ADVISORIES}")
        lines.append("  Numerical Tolerances:")
        lines.append(f"    EQUALITY_RTOL = {self.EQUALITY_RTOL}")
        lines.append(f"    EQUALITY_ATOL = {self.EQUALITY_ATOL}")
        lines.append("  Engine:")
        lines.append(f"    TRAJECTORY_POINTS = {self.TRAJECTORY_POINTS}")
        lines.append(f"    BI_ELLIPTIC_APOAPSIS_RATIO = {self.BI_ELLIPTIC_APOAPSIS_RATIO}")
        return "\n".join(lines)


# Global configuration instance
config = MetabasisConfig()


@contextmanager
def temp_config(**kwargs):
    """
    Context manager for temporarily modifying configuration values.

    Configuration is automatically restored when the context exits,
    even if an exception occurs.

    Parameters
    ----------
    **kwargs
        Configuration attributes to temporarily modify.

    Examples
    --------
    >>> import metabasis
    >>> with metabasis.temp_config(LAMBERT_MAX_ITERATIONS=3):
    ...     # Starved iteration budget for this block only
    ...     pass
    >>> # Original config restored here
    >>> metabasis.config.LAMBERT_MAX_ITERATIONS
    30

    Raises
    ------
    AttributeError
        If an invalid configuration attribute is specified.
    """
    old_values = {}
    for key, value in kwargs.items():
        if not hasattr(config, key):
            raise AttributeError(
                f"MetabasisConfig has no attribute '{key}'. "
                f"Valid attributes: {list(config.__dataclass_fields__.keys())}"
            )
        old_values[key] = getattr(config, key)
        setattr(config, key, value)

    try:
        yield config
    finally:
        for key, value in old_values.items():
            setattr(config, key, value)
