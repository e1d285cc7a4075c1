"""
Unit Conversion and Boundary Validation
=======================================

The engine's caller speaks hours and km/s; parts of the engine work in
seconds and m/s. Every crossing between the two goes through one of these
functions, which reject negative, non-finite or implausible values before
they reach any computation.

Examples
--------
>>> from metabasis import units
>>> units.hours_to_seconds(72)
259200.0
>>> units.validate_mission_time(0.05)
Traceback (most recent call last):
...
metabasis.errors.InvalidInputError: Mission time too short (minimum 6 minutes), got 0.05 h
"""

from .errors import InvalidInputError
from .utils import is_finite_number

# Time conversions
SECONDS_PER_HOUR = 3600.0
HOURS_PER_SECOND = 1.0 / 3600.0
SECONDS_PER_DAY = 86400.0

# Distance conversions
METERS_PER_KM = 1e3
KM_PER_METER = 1e-3

# Velocity conversions
MS_PER_KMS = 1e3
KMS_PER_MS = 1e-3

# Plausibility limits
MIN_MISSION_HOURS = 0.1        # 6 minutes
MAX_MISSION_HOURS = 8760.0     # 1 year
MAX_DELTA_V_KMS = 20.0         # chemical propulsion ceiling


def _require_finite(value, what: str):
    if not is_finite_number(value):
        raise InvalidInputError(f"{what} must be finite, got {value!r}")


def hours_to_seconds(hours: float) -> float:
    """Convert time from hours to seconds (API boundary -> internal)."""
    _require_finite(hours, "Time")
    if hours < 0:
        raise InvalidInputError(f"Time cannot be negative, got {hours} h")
    return float(hours) * SECONDS_PER_HOUR


def seconds_to_hours(seconds: float) -> float:
    """Convert time from seconds to hours (internal -> API boundary)."""
    _require_finite(seconds, "Time")
    if seconds < 0:
        raise InvalidInputError(f"Time cannot be negative, got {seconds} s")
    return float(seconds) * HOURS_PER_SECOND


def km_per_sec_to_m_per_sec(km_per_sec: float) -> float:
    """Convert velocity from km/s to m/s."""
    _require_finite(km_per_sec, "Velocity")
    return float(km_per_sec) * MS_PER_KMS


def m_per_sec_to_km_per_sec(m_per_sec: float) -> float:
    """Convert velocity from m/s to km/s."""
    _require_finite(m_per_sec, "Velocity")
    return float(m_per_sec) * KMS_PER_MS


def validate_mission_time(hours: float) -> float:
    """
    Check that a mission duration is plausible.

    Parameters
    ----------
    hours : float
        Mission duration [h]

    Returns
    -------
    float
        The validated duration, unchanged

    Raises
    ------
    InvalidInputError
        If the duration is non-finite, under 0.1 h or over 8760 h
    """
    _require_finite(hours, "Mission time")
    if hours < MIN_MISSION_HOURS:
        raise InvalidInputError(
            f"Mission time too short (minimum 6 minutes), got {hours} h"
        )
    if hours > MAX_MISSION_HOURS:
        raise InvalidInputError(
            f"Mission time too long (maximum 1 year), got {hours} h"
        )
    return float(hours)


def validate_delta_v(delta_v_kms: float) -> float:
    """
    Check that a delta-V is within chemical-propulsion plausibility.

    Raises
    ------
    InvalidInputError
        If delta-V is non-finite, negative or above 20 km/s
    """
    _require_finite(delta_v_kms, "Delta-V")
    if delta_v_kms < 0:
        raise InvalidInputError(f"Delta-V cannot be negative, got {delta_v_kms} km/s")
    if delta_v_kms > MAX_DELTA_V_KMS:
        raise InvalidInputError(
            f"Delta-V exceeds reasonable chemical propulsion limits "
            f"(>{MAX_DELTA_V_KMS:g} km/s), got {delta_v_kms} km/s"
        )
    return float(delta_v_kms)


def validate_positive(value: float, name: str) -> float:
    """Require a finite, strictly positive scalar."""
    _require_finite(value, name)
    if value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return float(value)
