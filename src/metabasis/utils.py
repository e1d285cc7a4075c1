"""
Utility functions for the Metabasis package.
"""

import math
import warnings
from typing import Type
from .config import config
from .errors import ConvergenceError, NumericalDriftWarning


def advisory(message: str, category: Type[Warning] = NumericalDriftWarning):
    """
    Report a non-fatal consistency check, escalating if configured.

    This function provides consistent advisory behavior across the package.
    When STRICT_ADVISORIES is False (default), issues a warning of the given
    category. When True, numerical-drift advisories raise ConvergenceError
    instead; other categories still only warn.

    Parameters
    ----------
    message : str
        Advisory message
    category : Type[Warning], optional
        Warning category to issue.
        Default: NumericalDriftWarning

    Raises
    ------
    ConvergenceError
        If config.STRICT_ADVISORIES is True and category is
        NumericalDriftWarning

    Warns
    -----
    Warning (of type category)
        Otherwise

    Examples
    --------
    >>> from metabasis.utils import advisory
    >>> advisory("Lagrange determinant drifted by 3e-9")  # Issues warning
    >>> from metabasis import temp_config
    >>> with temp_config(STRICT_ADVISORIES=True):
    ...     advisory("Lagrange determinant drifted by 3e-9")  # Raises
    """
    if config.STRICT_ADVISORIES and issubclass(category, NumericalDriftWarning):
        raise ConvergenceError(message)
    warnings.warn(message, category, stacklevel=3)


def is_finite_number(value) -> bool:
    """True for real, finite scalars (bools excluded)."""
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)
    except TypeError:
        return False
