"""
Impulsive Transfer Models
=========================

Closed-form two-impulse (Hohmann) and three-impulse (bi-elliptic) transfers
between coplanar circular orbits, and the patched-conic Earth to Moon model
built from them.

Patched conic model
-------------------
The Earth leg is a transfer ellipse from the Earth parking orbit out to the
boundary of the lunar sphere of influence (SOI), R_soi = D (mu_M/mu_E)^(2/5).
At the boundary the spacecraft speed in the Earth frame is compared with the
Moon's circular speed to obtain the hyperbolic excess speed v_inf. Inside
the SOI the spacecraft follows a lunar hyperbola down to the lunar parking
radius, where a capture burn places it on an ellipse reaching out to the
SOI and an insertion burn circularizes it.

All speeds in km/s, distances in km, times in hours unless noted.

Examples
--------
>>> from metabasis.hohmann import earth_moon_transfer
>>> transfer = earth_moon_transfer()
>>> round(transfer.total_delta_v, 1)
3.9
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Optional

from .config import config
from .defaults import EARTH, EARTH_MOON_DISTANCE, MOON, BodyParams
from .errors import InvalidInputError
from .orbital_elements import OrbitalElements
from .units import HOURS_PER_SECOND, validate_positive
from .utils import advisory


@dataclass(frozen=True)
class TransferResult:
    """
    Impulses, duration and geometry of one transfer leg.

    Attributes
    ----------
    delta_v1, delta_v2 : float
        First and second impulse magnitudes [km/s]
    transfer_time_hours : float
        Coast duration of the leg [h]
    transfer_orbit : OrbitalElements
        Conic followed during the leg (the first ellipse for bi-elliptic)
    delta_v3 : float
        Third impulse [km/s], zero for two-impulse legs
    """
    delta_v1: float
    delta_v2: float
    transfer_time_hours: float
    transfer_orbit: OrbitalElements
    delta_v3: float = 0.0

    def __post_init__(self):
        for name in ('delta_v1', 'delta_v2', 'delta_v3'):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0:
                raise InvalidInputError(f"{name} must be finite and non-negative, got {value}")
        if not self.transfer_time_hours > 0:
            raise InvalidInputError(
                f"Transfer time must be positive, got {self.transfer_time_hours} h")

    @property
    def total_delta_v(self) -> float:
        return self.delta_v1 + self.delta_v2 + self.delta_v3

    def to_dict(self) -> Dict:
        result = {
            'deltaV1': self.delta_v1,
            'deltaV2': self.delta_v2,
            'totalDeltaV': self.total_delta_v,
            'transferTime': self.transfer_time_hours,
            'transferOrbit': self.transfer_orbit.to_dict(),
        }
        if self.delta_v3:
            result['deltaV3'] = self.delta_v3
        return result


@dataclass(frozen=True)
class PatchedConicTransfer:
    """
    Earth escape leg patched to a lunar capture at the SOI boundary.

    Attributes
    ----------
    earth_escape : TransferResult
        Departure burn(s) and Earth-centred coast to the SOI
    lunar_capture : TransferResult
        Capture and circularization burns; time is the hyperbolic approach
    lunar_soi : float
        Radius of the lunar sphere of influence [km]
    v_infinity : float
        Hyperbolic excess speed relative to the Moon [km/s]
    details : dict
        Intermediate speeds and the energy balance diagnostic
    """
    earth_escape: TransferResult
    lunar_capture: TransferResult
    lunar_soi: float
    v_infinity: float
    details: Dict = field(default_factory=dict)

    @property
    def total_delta_v(self) -> float:
        return self.earth_escape.total_delta_v + self.lunar_capture.total_delta_v

    @property
    def total_time_hours(self) -> float:
        return self.earth_escape.transfer_time_hours + self.lunar_capture.transfer_time_hours

    def to_dict(self) -> Dict:
        return {
            'earthEscape': self.earth_escape.to_dict(),
            'lunarCapture': self.lunar_capture.to_dict(),
            'lunarSOI': self.lunar_soi,
            'vInfinity': self.v_infinity,
            'totalDeltaV': self.total_delta_v,
            'totalTime': self.total_time_hours,
            'details': dict(self.details),
        }


# ========== CONIC HELPERS ==========
def _vis_viva(mu: float, r: float, a: float) -> float:
    return math.sqrt(mu * (2.0 / r - 1.0 / a))


def transfer_time(a: float, mu: float) -> float:
    """Half the period of an ellipse with semi-major axis a [h]."""
    return math.pi * math.sqrt(a**3 / mu) * HOURS_PER_SECOND


def lunar_soi_radius(distance: float = EARTH_MOON_DISTANCE,
                     mu_moon: float = MOON.mu,
                     mu_earth: float = EARTH.mu) -> float:
    """Laplace sphere of influence radius D (mu_moon/mu_earth)^(2/5) [km]."""
    return distance * (mu_moon / mu_earth) ** 0.4


def hyperbolic_approach_time(v_infinity: float, r_periapsis: float,
                             r_start: float, mu: float) -> float:
    """
    Time to fall from r_start to periapsis along a hyperbola [s].

    Parameters
    ----------
    v_infinity : float
        Hyperbolic excess speed [km/s]
    r_periapsis : float
        Periapsis radius [km]
    r_start : float
        Starting radius on the inbound branch [km], at least r_periapsis
    mu : float
        Gravitational parameter of the central body [km^3/s^2]
    """
    v_infinity = validate_positive(v_infinity, "Hyperbolic excess speed")
    a = mu / v_infinity**2          # |a|
    e = 1.0 + r_periapsis / a
    cosh_F = (1.0 + r_start / a) / e
    if cosh_F < 1.0:
        raise InvalidInputError(
            f"Start radius {r_start} km is inside periapsis radius {r_periapsis} km")
    F = math.acosh(cosh_F)
    M = e * math.sinh(F) - F
    return M * math.sqrt(a**3 / mu)


# ========== TRANSFERS BETWEEN CIRCULAR ORBITS ==========
def hohmann_transfer(r1: float, r2: float, mu: float) -> TransferResult:
    """
    Two-impulse Hohmann transfer between coplanar circular orbits.

    Parameters
    ----------
    r1, r2 : float
        Initial and final circular orbit radii [km]
    mu : float
        Gravitational parameter [km^3/s^2]

    Returns
    -------
    TransferResult
        Impulses at each apsis, half-period coast time and the transfer
        ellipse

    Examples
    --------
    >>> result = hohmann_transfer(6571.0, 42164.0, 398600.4418)
    >>> round(result.total_delta_v, 2)
    3.93
    """
    r1 = validate_positive(r1, "Initial radius")
    r2 = validate_positive(r2, "Final radius")
    mu = validate_positive(mu, "Gravitational parameter")

    a = (r1 + r2) / 2.0
    dv1 = abs(_vis_viva(mu, r1, a) - math.sqrt(mu / r1))
    dv2 = abs(math.sqrt(mu / r2) - _vis_viva(mu, r2, a))
    return TransferResult(
        delta_v1=dv1,
        delta_v2=dv2,
        transfer_time_hours=transfer_time(a, mu),
        transfer_orbit=OrbitalElements.from_apsides(r1, r2, mu=mu),
    )


def bi_elliptic_transfer(r1: float, r2: float, r_b: float, mu: float) -> TransferResult:
    """
    Three-impulse bi-elliptic transfer through an intermediate apoapsis r_b.

    The first burn raises apoapsis to r_b, the second (at r_b) raises
    periapsis to r2 and the third circularizes at r2. The reported orbit is
    the first transfer ellipse.

    Raises
    ------
    InvalidInputError
        If r_b is below either circular radius
    """
    r1 = validate_positive(r1, "Initial radius")
    r2 = validate_positive(r2, "Final radius")
    r_b = validate_positive(r_b, "Intermediate apoapsis")
    mu = validate_positive(mu, "Gravitational parameter")
    if r_b < max(r1, r2):
        raise InvalidInputError(
            f"Intermediate apoapsis {r_b} km must be at least max(r1, r2) = {max(r1, r2)} km")

    a1 = (r1 + r_b) / 2.0
    a2 = (r2 + r_b) / 2.0
    dv1 = abs(_vis_viva(mu, r1, a1) - math.sqrt(mu / r1))
    dv2 = abs(_vis_viva(mu, r_b, a2) - _vis_viva(mu, r_b, a1))
    dv3 = abs(_vis_viva(mu, r2, a2) - math.sqrt(mu / r2))
    return TransferResult(
        delta_v1=dv1,
        delta_v2=dv2,
        delta_v3=dv3,
        transfer_time_hours=transfer_time(a1, mu) + transfer_time(a2, mu),
        transfer_orbit=OrbitalElements.from_apsides(r1, r_b, mu=mu),
    )


# ========== EARTH-MOON PATCHED CONICS ==========
def lunar_capture(v_infinity: float, moon: BodyParams = MOON,
                  r_soi: Optional[float] = None) -> TransferResult:
    """
    Capture from a lunar hyperbola into the lunar parking orbit.

    The capture burn at periapsis leaves the spacecraft on an ellipse from
    the parking radius out to the SOI; the insertion burn circularizes it.
    The leg time is the hyperbolic fall from the SOI to periapsis.
    """
    if r_soi is None:
        r_soi = lunar_soi_radius()
    r_park = moon.parking_radius
    v_periapsis = math.sqrt(v_infinity**2 + 2.0 * moon.mu / r_park)
    capture_orbit = OrbitalElements.from_apsides(r_park, r_soi, mu=moon.mu)
    v_ellipse = _vis_viva(moon.mu, r_park, capture_orbit.semi_major_axis)
    v_circular = moon.circular_speed(r_park)
    approach = hyperbolic_approach_time(v_infinity, r_park, r_soi, moon.mu)
    return TransferResult(
        delta_v1=abs(v_periapsis - v_ellipse),
        delta_v2=abs(v_ellipse - v_circular),
        transfer_time_hours=approach * HOURS_PER_SECOND,
        transfer_orbit=capture_orbit,
    )


def _energy_balance(mu: float, v_a: float, r_a: float, v_b: float, r_b: float) -> float:
    # Relative mismatch of specific energy at two points of one conic
    e_a = v_a**2 / 2.0 - mu / r_a
    e_b = v_b**2 / 2.0 - mu / r_b
    return abs(e_a - e_b) / abs(e_a)


def earth_moon_transfer(earth: BodyParams = EARTH, moon: BodyParams = MOON,
                        distance: float = EARTH_MOON_DISTANCE) -> PatchedConicTransfer:
    """
    Patched-conic transfer from the Earth parking orbit to the lunar one.

    Returns
    -------
    PatchedConicTransfer
        Typical values for the default bodies: 3.92 km/s total, about
        109 h from departure to lunar periapsis

    Warns
    -----
    NumericalDriftWarning
        If the Earth-leg energies at the parking radius and at the SOI
        boundary disagree by more than config.ENERGY_BALANCE_TOL
    """
    r_park = earth.parking_radius
    r_soi = lunar_soi_radius(distance, moon.mu, earth.mu)
    r_boundary = distance - r_soi

    # Earth leg: ellipse from the parking orbit to the SOI boundary
    escape_orbit = OrbitalElements.from_apsides(r_park, r_boundary, mu=earth.mu)
    a = escape_orbit.semi_major_axis
    energy = -earth.mu / (2.0 * a)
    v_circular = earth.circular_speed(r_park)
    v_departure = math.sqrt(2.0 * (energy + earth.mu / r_park))
    v_boundary = math.sqrt(2.0 * (energy + earth.mu / r_boundary))
    escape = TransferResult(
        delta_v1=abs(v_departure - v_circular),
        delta_v2=0.0,
        transfer_time_hours=transfer_time(a, earth.mu),
        transfer_orbit=escape_orbit,
    )

    # Patch at the SOI boundary
    v_moon = math.sqrt(earth.mu / distance)
    v_infinity = abs(v_moon - v_boundary)
    capture = lunar_capture(v_infinity, moon, r_soi)

    balance = _energy_balance(earth.mu, v_departure, r_park, v_boundary, r_boundary)
    if balance > config.ENERGY_BALANCE_TOL:
        advisory(f"Energy conservation error in patched conic: {balance:.3e}")

    details = {
        'earth_parking_radius': r_park,
        'lunar_parking_radius': moon.parking_radius,
        'soi_boundary_radius': r_boundary,
        'departure_speed': v_departure,
        'soi_arrival_speed': v_boundary,
        'moon_orbital_speed': v_moon,
        'energy_balance_check': {
            'relative_error': balance,
            'passed': balance <= config.ENERGY_BALANCE_TOL,
        },
    }
    return PatchedConicTransfer(escape, capture, r_soi, v_infinity, details)


def earth_moon_bi_elliptic_transfer(apoapsis_ratio: Optional[float] = None,
                                    earth: BodyParams = EARTH, moon: BodyParams = MOON,
                                    distance: float = EARTH_MOON_DISTANCE) -> PatchedConicTransfer:
    """
    Bi-elliptic Earth leg patched to the lunar capture model.

    The Earth leg climbs to r_b = apoapsis_ratio * D, then drops its
    periapsis to the lunar distance. Instead of the third (circularizing)
    burn the arrival speed at D is patched against the Moon's speed.

    Parameters
    ----------
    apoapsis_ratio : float, optional
        r_b / D, at least 1. Defaults to config.BI_ELLIPTIC_APOAPSIS_RATIO
    """
    if apoapsis_ratio is None:
        apoapsis_ratio = config.BI_ELLIPTIC_APOAPSIS_RATIO
    apoapsis_ratio = validate_positive(apoapsis_ratio, "Apoapsis ratio")
    if apoapsis_ratio < 1.0:
        raise InvalidInputError(f"Apoapsis ratio must be at least 1, got {apoapsis_ratio}")

    r_park = earth.parking_radius
    r_b = apoapsis_ratio * distance
    full = bi_elliptic_transfer(r_park, distance, r_b, earth.mu)
    escape = TransferResult(
        delta_v1=full.delta_v1,
        delta_v2=full.delta_v2,
        transfer_time_hours=full.transfer_time_hours,
        transfer_orbit=full.transfer_orbit,
    )

    second_orbit = OrbitalElements.from_apsides(distance, r_b, mu=earth.mu)
    v_arrival = _vis_viva(earth.mu, distance, second_orbit.semi_major_axis)
    v_moon = math.sqrt(earth.mu / distance)
    v_infinity = abs(v_moon - v_arrival)
    r_soi = lunar_soi_radius(distance, moon.mu, earth.mu)
    capture = lunar_capture(v_infinity, moon, r_soi)

    details = {
        'earth_parking_radius': r_park,
        'lunar_parking_radius': moon.parking_radius,
        'intermediate_apoapsis': r_b,
        'second_transfer_orbit': second_orbit.to_dict(),
        'arrival_speed': v_arrival,
        'moon_orbital_speed': v_moon,
    }
    return PatchedConicTransfer(escape, capture, r_soi, v_infinity, details)
