"""
Propellant Sizing
=================

Tsiolkovsky rocket equation sizing of the propellant load for a total
delta-V, with a burn-time estimate for a constant-thrust engine.

    mass_ratio = exp(dv / (Isp g0))
    m_prop     = m_dry (mass_ratio - 1)

The burn-time correction for high thrust-to-weight vehicles is a bounded
heuristic (at most +20%), not an integration of the gravity losses.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Callable, Dict

from .defaults import DEFAULT_VEHICLE, G0, VehicleParams
from .errors import InvalidInputError, InvalidMassRatioError, NegativePropellantError
from .units import SECONDS_PER_HOUR, km_per_sec_to_m_per_sec, validate_delta_v, validate_positive
from .utils import advisory

# Heuristic gravity-loss parameters
GRAVITY_LOSS_TW_THRESHOLD = 0.5     # correction applied above this T/W
GRAVITY_LOSS_MIN_BURN = 60.0        # s
GRAVITY_LOSS_REFERENCE_BURN = 600.0 # s
GRAVITY_LOSS_SCALE = 0.05
GRAVITY_LOSS_CAP = 1.2

# Advisory thresholds
HEAVY_PROPELLANT_RATIO = 10.0
LONG_BURN_SECONDS = SECONDS_PER_HOUR


@dataclass(frozen=True)
class FuelPlan:
    """
    Propellant budget for one mission.

    Attributes
    ----------
    mass_ratio : float
        Initial over final mass (>= 1), rounded to 4 decimals
    propellant_mass : float
        Propellant [kg], rounded to 0.1 kg
    specific_impulse : float
        Engine specific impulse [s]
    burn_time : float
        Total burn duration [s], rounded to 0.1 s
    dry_mass : float
        Vehicle mass without propellant [kg]
    thrust_to_weight : float
        Initial thrust-to-weight ratio
    """
    mass_ratio: float
    propellant_mass: float
    specific_impulse: float
    burn_time: float
    dry_mass: float = DEFAULT_VEHICLE.dry_mass
    thrust_to_weight: float = DEFAULT_VEHICLE.thrust_to_weight

    @property
    def initial_mass(self) -> float:
        return self.dry_mass + self.propellant_mass

    def to_dict(self) -> Dict:
        return {
            'massRatio': self.mass_ratio,
            'propellantMass': self.propellant_mass,
            'specificImpulse': self.specific_impulse,
            'burnTime': self.burn_time,
        }


def gravity_loss_factor(burn_time: float, thrust_to_weight: float) -> float:
    """
    Fractional burn-time increase for finite-burn losses.

    Zero for burns under a minute; otherwise grows linearly with burn time
    up to 10 minutes and scales with 1/(T/W), floored at 0.1.
    """
    if burn_time < GRAVITY_LOSS_MIN_BURN:
        return 0.0
    time_factor = min(burn_time / GRAVITY_LOSS_REFERENCE_BURN, 1.0)
    thrust_factor = max(0.1, 1.0 / thrust_to_weight)
    return GRAVITY_LOSS_SCALE * time_factor * thrust_factor


def constant_thrust_burn_time(initial_mass: float, dry_mass: float,
                              thrust_to_weight: float,
                              exhaust_velocity: float) -> float:
    """
    Burn time of a constant-thrust engine sized by its initial T/W [s].

    Parameters
    ----------
    initial_mass, dry_mass : float
        Mass before and after the burn [kg]
    thrust_to_weight : float
        Thrust over initial weight
    exhaust_velocity : float
        Effective exhaust velocity Isp g0 [m/s]
    """
    thrust = thrust_to_weight * initial_mass * G0
    mass_flow = thrust / exhaust_velocity
    burn_time = (initial_mass - dry_mass) / mass_flow
    if thrust_to_weight > GRAVITY_LOSS_TW_THRESHOLD:
        corrected = burn_time * (1.0 + gravity_loss_factor(burn_time, thrust_to_weight))
        return min(corrected, burn_time * GRAVITY_LOSS_CAP)
    return burn_time


def variable_thrust_burn_time(propellant_mass: float,
                              thrust_profile: Callable[[float], float],
                              exhaust_velocity: float,
                              sample_window: float = 1000.0,
                              n_samples: int = 2) -> float:
    """
    Approximate burn time for a throttled or electric engine [s].

    The thrust profile [N] is averaged over sample_window seconds and the
    burn is then treated as constant-thrust at that average.

    Warns
    -----
    UserWarning
        Always, since no integration over the profile is performed
    """
    propellant_mass = validate_positive(propellant_mass, "Propellant mass")
    exhaust_velocity = validate_positive(exhaust_velocity, "Exhaust velocity")
    if n_samples < 2:
        raise InvalidInputError(f"At least two thrust samples required, got {n_samples}")
    advisory("Variable thrust profiles require numerical integration - "
             "using constant thrust approximation", UserWarning)
    times = np.linspace(0.0, sample_window, n_samples)
    average_thrust = float(np.mean([thrust_profile(t) for t in times]))
    average_thrust = validate_positive(average_thrust, "Average thrust")
    return propellant_mass / (average_thrust / exhaust_velocity)


def optimize_fuel(delta_v: float,
                  dry_mass: float = DEFAULT_VEHICLE.dry_mass,
                  specific_impulse: float = DEFAULT_VEHICLE.specific_impulse,
                  thrust_to_weight: float = DEFAULT_VEHICLE.thrust_to_weight) -> FuelPlan:
    """
    Size the propellant load for a total delta-V.

    Parameters
    ----------
    delta_v : float
        Total mission delta-V [km/s], 0 to 20
    dry_mass : float, optional
        Vehicle dry mass [kg] (default 5000)
    specific_impulse : float, optional
        Engine specific impulse [s] (default 450)
    thrust_to_weight : float, optional
        Initial thrust-to-weight ratio, in (0, 2] (default 0.3)

    Returns
    -------
    FuelPlan

    Raises
    ------
    InvalidInputError
        For an implausible delta-V or invalid vehicle parameters
    InvalidMassRatioError
        If the mass ratio is non-finite or below one
    NegativePropellantError
        If the propellant mass comes out negative

    Warns
    -----
    UserWarning
        If propellant exceeds ten times the dry mass, or the burn is
        longer than one hour

    Examples
    --------
    >>> plan = optimize_fuel(0.0)
    >>> plan.mass_ratio, plan.propellant_mass
    (1.0, 0.0)
    """
    delta_v = validate_delta_v(delta_v)
    dry_mass = validate_positive(dry_mass, "Dry mass")
    specific_impulse = validate_positive(specific_impulse, "Specific impulse")
    if not 0 < thrust_to_weight <= 2.0:
        raise InvalidInputError(
            f"Thrust-to-weight ratio must be between 0 and 2.0, got {thrust_to_weight}")
    vehicle = VehicleParams(dry_mass, specific_impulse, thrust_to_weight)

    exhaust_velocity = vehicle.specific_impulse * G0
    mass_ratio = math.exp(km_per_sec_to_m_per_sec(delta_v) / exhaust_velocity)
    if not math.isfinite(mass_ratio) or mass_ratio < 1.0:
        raise InvalidMassRatioError(
            f"Invalid mass ratio calculated from Tsiolkovsky equation: {mass_ratio}")

    initial_mass = vehicle.dry_mass * mass_ratio
    propellant_mass = initial_mass - vehicle.dry_mass
    if propellant_mass < 0:
        raise NegativePropellantError(f"Negative propellant mass calculated: {propellant_mass} kg")
    if propellant_mass > HEAVY_PROPELLANT_RATIO * vehicle.dry_mass:
        advisory(f"Very high propellant-to-dry mass ratio: "
                 f"{propellant_mass / vehicle.dry_mass:.2f}", UserWarning)

    burn_time = constant_thrust_burn_time(initial_mass, vehicle.dry_mass,
                                          vehicle.thrust_to_weight, exhaust_velocity)
    if burn_time > LONG_BURN_SECONDS:
        advisory(f"Long burn time {burn_time / SECONDS_PER_HOUR:.1f} hours "
                 f"may require multiple burn phases", UserWarning)

    return FuelPlan(
        mass_ratio=round(mass_ratio, 4),
        propellant_mass=round(propellant_mass, 1),
        specific_impulse=vehicle.specific_impulse,
        burn_time=round(burn_time, 1),
        dry_mass=vehicle.dry_mass,
        thrust_to_weight=vehicle.thrust_to_weight,
    )
