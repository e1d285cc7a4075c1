"""
Default Bodies and Vehicle Configuration
========================================

Physical parameters for the Earth-Moon system and the reference spacecraft
used by the trajectory engine.

Units referenced to km (i.e. mu = km^3/s^2), except vehicle mass [kg] and
specific impulse [s].

Examples
--------
>>> from metabasis.defaults import EARTH, MOON
>>> EARTH.parking_radius
6571.0
>>> MOON.circular_speed(MOON.parking_radius)  # km/s
1.6336...
"""
import math
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class BodyParams:
    """
    Immutable parameters for a celestial body.

    Attributes
    ----------
    mu : float
        Gravitational parameter [km^3/s^2]
    radius : float
        Mean radius [km]
    parking_altitude : float
        Altitude of the circular parking orbit used for departure or
        arrival [km]
    name : str, optional
        Body identifier
    """
    mu: float
    radius: float
    parking_altitude: float = 0.0
    name: Optional[str] = None

    def __post_init__(self):
        # Validate parameters
        if not self.mu > 0:
            raise ValueError(f"Gravitational parameter must be positive, got {self.mu}")
        if not self.radius > 0:
            raise ValueError(f"Radius must be positive, got {self.radius}")
        if self.parking_altitude < 0:
            raise ValueError(f"Parking altitude cannot be negative, got {self.parking_altitude}")

    @property
    def parking_radius(self) -> float:
        """Radius of the circular parking orbit [km]"""
        return self.radius + self.parking_altitude

    def circular_speed(self, r: float) -> float:
        """Circular orbit speed at radius r [km/s]"""
        return math.sqrt(self.mu / r)


@dataclass(frozen=True)
class VehicleParams:
    """
    Immutable parameters for the reference spacecraft.

    Attributes
    ----------
    dry_mass : float
        Mass without propellant [kg]
    specific_impulse : float
        Engine specific impulse [s]
    thrust_to_weight : float
        Initial thrust-to-weight ratio (dimensionless, at most 2.0)
    """
    dry_mass: float
    specific_impulse: float
    thrust_to_weight: float = 0.3

    def __post_init__(self):
        if not self.dry_mass > 0:
            raise ValueError(f"Dry mass must be positive, got {self.dry_mass}")
        if not self.specific_impulse > 0:
            raise ValueError(f"Specific impulse must be positive, got {self.specific_impulse}")
        if not 0 < self.thrust_to_weight <= 2.0:
            raise ValueError(
                f"Thrust-to-weight ratio must be in (0, 2.0], got {self.thrust_to_weight}"
            )


# Standard gravity [m/s^2]
G0 = 9.80665

"""
Predefined bodies for the Earth-Moon transfer problem
Parking orbits: 200 km LEO departure, 100 km low lunar orbit arrival
"""
EARTH = BodyParams(
    mu=398600.4418,
    radius=6371.0,
    parking_altitude=200.0,
    name='Earth'
)

MOON = BodyParams(
    mu=4902.7779,
    radius=1737.0,
    parking_altitude=100.0,
    name='Moon'
)

# Mean Earth-Moon distance [km]
EARTH_MOON_DISTANCE = 384400.0

"""
Reference chemical-propulsion spacecraft
"""
DEFAULT_VEHICLE = VehicleParams(
    dry_mass=5000.0,
    specific_impulse=450.0,
    thrust_to_weight=0.3
)
