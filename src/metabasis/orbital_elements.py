'''Orbital elements of a single conic arc segment

The engine works with a simplified planar model, so inclination, node,
argument of perigee and true anomaly all default to zero.'''

import numpy as np
from typing import Dict, Optional

from .config import config
from .errors import InvalidInputError


class OrbitalElements:
    """
    Keplerian description of one conic arc.

    OrbitalElements is immutable: the underlying array is read-only and all
    access goes through properties. Create a new instance to change values.

    Parameters
    ----------
    semi_major_axis : float
        Semi-major axis [km], positive for elliptic arcs
    eccentricity : float
        Eccentricity (dimensionless, >= 0)
    inclination, right_ascension, arg_of_perigee, true_anomaly : float, optional
        Angles [rad], default 0 for the planar model
    mu : float, optional
        Gravitational parameter of the central body [km^3/s^2]; only
        needed for period and energy queries
    """
    # ========== CLASS CONSTANTS ==========
    _HASH_DECIMALS = 10     # Rounding for consistent hashing
    _FIELDS = ('semiMajorAxis', 'eccentricity', 'inclination',
               'rightAscension', 'argOfPerigee', 'trueAnomaly')

    # ========== CONSTRUCTION ==========
    def __init__(self, semi_major_axis: float, eccentricity: float,
                 inclination: float = 0.0, right_ascension: float = 0.0,
                 arg_of_perigee: float = 0.0, true_anomaly: float = 0.0,
                 mu: Optional[float] = None):
        self._elements = np.array([semi_major_axis, eccentricity, inclination,
                                   right_ascension, arg_of_perigee, true_anomaly],
                                  dtype=np.float64)
        # Ensure immutability of elements array
        self._elements.flags.writeable = False
        self._mu = mu
        self._validate()

    @classmethod
    def from_apsides(cls, r_periapsis: float, r_apoapsis: float,
                     mu: Optional[float] = None) -> 'OrbitalElements':
        """
        Elements of the ellipse joining two apsis radii.

        The radii may be given in either order; the semi-major axis is their
        mean and the eccentricity |ra - rp| / (ra + rp).
        """
        a = (r_periapsis + r_apoapsis) / 2
        e = abs(r_apoapsis - r_periapsis) / (r_periapsis + r_apoapsis)
        return cls(a, e, mu=mu)

    # ========== VALIDATION ==========
    def _validate(self):
        if not np.all(np.isfinite(self._elements)):
            raise InvalidInputError(f"Orbital elements contain NaN or Inf: {self._elements}")
        a, e, i, raan, w, nu = self._elements
        if e < 0:
            raise InvalidInputError(f"Eccentricity cannot be negative, got {e}")
        # Validate a-e combination for physical consistency
        if e < 1 and a <= 0:
            raise InvalidInputError(f"Elliptic orbit (e={e}) "
                                    f"requires positive semi-major axis, got a={a}")
        if e > 1 and a >= 0:
            raise InvalidInputError(f"Hyperbolic orbit (e={e}) "
                                    f"requires negative semi-major axis, got a={a}")
        if i < 0 or i > np.pi:
            raise InvalidInputError("Inclination out of range")
        if self._mu is not None and not self._mu > 0:
            raise InvalidInputError(f"Gravitational parameter must be positive, got {self._mu}")

    # ========== PROPERTY ACCESS ==========
    @property
    def semi_major_axis(self) -> float:
        """Semi-major axis [km]"""
        return float(self._elements[0])

    @property
    def eccentricity(self) -> float:
        return float(self._elements[1])

    @property
    def inclination(self) -> float:
        return float(self._elements[2])

    @property
    def right_ascension(self) -> float:
        return float(self._elements[3])

    @property
    def arg_of_perigee(self) -> float:
        return float(self._elements[4])

    @property
    def true_anomaly(self) -> float:
        return float(self._elements[5])

    @property
    def elements(self) -> np.ndarray:
        """Read-only [a, e, i, RAAN, w, nu] array"""
        return self._elements

    @property
    def mu(self) -> Optional[float]:
        return self._mu

    # ========== ORBITAL PROPERTIES ==========
    def periapsis_radius(self) -> float:
        return self.semi_major_axis * (1 - self.eccentricity)

    def apoapsis_radius(self) -> float:
        """Apoapsis radius [km] (elliptic orbits only)"""
        if self.eccentricity >= 1:
            raise ValueError("Apoapsis undefined for parabolic/hyperbolic orbits")
        return self.semi_major_axis * (1 + self.eccentricity)

    def orbital_period(self) -> float:
        """
        Calculate orbital period

        Returns period in seconds (only for elliptic orbits with known mu)
        """
        if self._mu is None:
            raise ValueError("Orbital period requires a gravitational parameter")
        if self.eccentricity >= 1:
            raise ValueError("Orbital period undefined for parabolic/hyperbolic orbits")
        return 2 * np.pi * np.sqrt(self.semi_major_axis**3 / self._mu)

    def specific_energy(self) -> float:
        """Specific orbital energy -mu/(2a) [km^2/s^2]"""
        if self._mu is None:
            raise ValueError("Specific energy requires a gravitational parameter")
        return -self._mu / (2 * self.semi_major_axis)

    # ========== EXPORT ==========
    def to_dict(self) -> Dict[str, float]:
        """Record form with camelCase keys, as stored by the caller."""
        return {name: float(value) for name, value in zip(self._FIELDS, self._elements)}

    # ========== SPECIAL METHODS ==========
    def __repr__(self):
        #Machine-readable representation
        return f"OrbitalElements({self._elements.tolist()})"

    def __str__(self):
        a, e, i, raan, w, nu = self._elements
        return (f"Keplerian Elements:\n"
                f"  a     = {a:12.4f} km\n"
                f"  e     = {e:12.6f}\n"
                f"  i     = {np.degrees(i):12.4f}°\n"
                f"  RAAN  = {np.degrees(raan):12.4f}°\n"
                f"  ω     = {np.degrees(w):12.4f}°\n"
                f"  ν     = {np.degrees(nu):12.4f}°")

    def __eq__(self, other):
        #Check equality with tolerance
        if not isinstance(other, OrbitalElements):
            return NotImplemented
        return np.allclose(self._elements, other._elements,
                           rtol=config.EQUALITY_RTOL,
                           atol=config.EQUALITY_ATOL)

    def __hash__(self):
        #Hash with rounding to match equality
        rounded = tuple(round(float(x), self._HASH_DECIMALS) for x in self._elements)
        return hash(rounded)
