"""
Earth-Moon Trajectory Engine
============================

Entry point of the package: validates a transfer request, dispatches it to
the matching transfer model, sizes the propellant and assembles the
immutable TrajectoryRecord handed back to the caller.

Transfer models
---------------
hohmann
    Patched-conic transfer (metabasis.hohmann.earth_moon_transfer). The
    requested flight time is replaced by the model's own.
bi_elliptic
    Bi-elliptic Earth leg patched to the same lunar capture. The requested
    flight time is replaced by the model's own.
lambert
    Izzo Lambert arc from the Earth parking radius to the lunar distance in
    exactly the requested flight time. The arc is propagated with heyoka to
    produce the trajectory points.
custom
    Recognised but not supported; rejected with InvalidInputError.

Examples
--------
>>> from metabasis import compute_transfer
>>> record = compute_transfer("2025-07-01T12:00:00", "hohmann", 72)
>>> 3.5 < record.total_delta_v < 4.5
True
>>> record.risk_factors
('Monitor solar activity during launch window', 'Debris avoidance maneuvers may be required')
"""

import math
import numpy as np
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from . import vector
from .config import config
from .defaults import EARTH, EARTH_MOON_DISTANCE, MOON
from .errors import InvalidInputError
from .fuel import optimize_fuel
from .hohmann import (PatchedConicTransfer, earth_moon_bi_elliptic_transfer,
                      earth_moon_transfer, hohmann_transfer)
from .lambert import solve_lambert
from .orbital_elements import OrbitalElements
from .propagation import propagate_two_body
from .record import TrajectoryPoint, TrajectoryRecord, TransferType
from .risk import assess_trajectory_risks
from .units import (HOURS_PER_SECOND, hours_to_seconds, validate_delta_v,
                    validate_mission_time)
from .utils import advisory

# Share of trajectory points spent on the Earth escape ellipse
EARTH_PHASE_FRACTION = 0.8
# Lateral offset of the cosmetic lunar approach, as a fraction of R_soi
LUNAR_APPROACH_OFFSET = 0.1


@dataclass(frozen=True)
class ModelResult:
    """Raw output of one transfer model, before fuel sizing and rounding."""
    delta_v: float
    flight_time_hours: float
    trajectory_points: Tuple[TrajectoryPoint, ...]
    orbital_elements: Tuple[OrbitalElements, ...]
    calculations: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TransferComputation:
    """Computed transfer with boundary rounding applied, not yet recorded."""
    total_delta_v: float
    flight_time: float
    fuel_mass: int
    efficiency: float
    trajectory_points: Tuple[TrajectoryPoint, ...]
    orbital_elements: Tuple[OrbitalElements, ...]
    risk_factors: Tuple[str, ...]
    calculations: Dict[str, Any]


# ========== TRAJECTORY POINTS ==========
def _eccentric_anomaly(theta: float, e: float) -> float:
    # Continuous over theta in [0, 2*pi]
    return 2.0 * math.atan2(math.sqrt(1.0 - e) * math.sin(theta / 2.0),
                            math.sqrt(1.0 + e) * math.cos(theta / 2.0))


def ellipse_arc_points(r_periapsis: float, r_apoapsis: float,
                       theta_start: float, theta_end: float, n_points: int,
                       half_period_hours: float, t_offset: float = 0.0,
                       rotation: float = 0.0) -> List[TrajectoryPoint]:
    """
    Sample an ellipse between two true anomalies, endpoints included.

    Times follow Kepler's equation, measured from theta_start and shifted
    by t_offset [h]. The apse line is rotated by `rotation` [rad].
    """
    a = (r_periapsis + r_apoapsis) / 2.0
    e = abs(r_apoapsis - r_periapsis) / (r_apoapsis + r_periapsis)
    p = a * (1.0 - e**2)

    def mean_anomaly(theta):
        E = _eccentric_anomaly(theta, e)
        return E - e * math.sin(E)

    m_start = mean_anomaly(theta_start)
    points = []
    for theta in np.linspace(theta_start, theta_end, n_points):
        r = p / (1.0 + e * math.cos(theta))
        t = t_offset + (mean_anomaly(theta) - m_start) / math.pi * half_period_hours
        points.append(TrajectoryPoint(
            x=r * math.cos(theta + rotation),
            y=r * math.sin(theta + rotation),
            z=0.0,
            time=t,
        ))
    return points


def lunar_approach_points(r_start: float, r_end: float, lunar_soi: float,
                          n_points: int, t_start: float,
                          t_end: float) -> List[TrajectoryPoint]:
    """
    Cosmetic approach from the SOI boundary to the Moon.

    A radial interpolation with a sinusoidal sideways bulge of
    0.1 R_soi, for display only; it is not a dynamical trajectory.
    The first sample (t = 0) is omitted.
    """
    points = []
    for i in range(1, n_points + 1):
        t = i / n_points
        points.append(TrajectoryPoint(
            x=r_start + t * (r_end - r_start),
            y=math.sin(t * math.pi / 2.0) * lunar_soi * LUNAR_APPROACH_OFFSET,
            z=0.0,
            time=t_start + t * (t_end - t_start),
        ))
    return points


def patched_conic_points(transfer: PatchedConicTransfer, n_points: int) -> List[TrajectoryPoint]:
    """Escape ellipse toward +x followed by the cosmetic lunar approach."""
    escape = transfer.earth_escape
    earth_points = int(n_points * EARTH_PHASE_FRACTION)
    lunar_points = n_points - earth_points
    r_park = transfer.details['earth_parking_radius']
    r_boundary = transfer.details['soi_boundary_radius']
    points = ellipse_arc_points(r_park, r_boundary, 0.0, math.pi, earth_points + 1,
                                escape.transfer_time_hours, rotation=math.pi)
    points += lunar_approach_points(r_boundary, r_boundary + transfer.lunar_soi,
                                    transfer.lunar_soi, lunar_points,
                                    escape.transfer_time_hours, transfer.total_time_hours)
    return points


def bi_elliptic_points(transfer: PatchedConicTransfer, n_points: int) -> List[TrajectoryPoint]:
    """
    Outbound ellipse to the intermediate apoapsis, down to the lunar distance
    at +x, then the cosmetic lunar approach out to the parking radius.
    """
    escape = transfer.earth_escape
    r_park = transfer.details['earth_parking_radius']
    r_b = transfer.details['intermediate_apoapsis']
    first_half = math.pi * math.sqrt(escape.transfer_orbit.semi_major_axis**3
                                     / EARTH.mu) * HOURS_PER_SECOND
    second_half = escape.transfer_time_hours - first_half
    earth_points = int(n_points * EARTH_PHASE_FRACTION)
    lunar_points = n_points - earth_points
    n_first = earth_points // 2
    points = ellipse_arc_points(r_park, r_b, 0.0, math.pi, n_first + 1, first_half)
    # Second ellipse shares the apse line; skip its duplicated apoapsis sample
    points += ellipse_arc_points(EARTH_MOON_DISTANCE, r_b, math.pi, 2.0 * math.pi,
                                 earth_points - n_first + 1, second_half,
                                 t_offset=first_half)[1:]
    points += lunar_approach_points(EARTH_MOON_DISTANCE,
                                    EARTH_MOON_DISTANCE + transfer.details['lunar_parking_radius'],
                                    transfer.lunar_soi, lunar_points,
                                    escape.transfer_time_hours, transfer.total_time_hours)
    return points


# ========== TRANSFER MODELS ==========
def _hohmann_model(flight_time_hours: float) -> ModelResult:
    transfer = earth_moon_transfer()
    return ModelResult(
        delta_v=transfer.total_delta_v,
        flight_time_hours=transfer.total_time_hours,
        trajectory_points=tuple(patched_conic_points(transfer, config.TRAJECTORY_POINTS)),
        orbital_elements=(transfer.earth_escape.transfer_orbit,
                          transfer.lunar_capture.transfer_orbit),
        calculations={
            'hohmannTransfer': transfer.earth_escape.to_dict(),
            'patchedConic': transfer.to_dict(),
        },
    )


def _bi_elliptic_model(flight_time_hours: float) -> ModelResult:
    transfer = earth_moon_bi_elliptic_transfer()
    second = transfer.details['second_transfer_orbit']
    return ModelResult(
        delta_v=transfer.total_delta_v,
        flight_time_hours=transfer.total_time_hours,
        trajectory_points=tuple(bi_elliptic_points(transfer, config.TRAJECTORY_POINTS)),
        orbital_elements=(transfer.earth_escape.transfer_orbit,
                          OrbitalElements(second['semiMajorAxis'], second['eccentricity'],
                                          mu=EARTH.mu),
                          transfer.lunar_capture.transfer_orbit),
        calculations={
            'biEllipticTransfer': transfer.earth_escape.to_dict(),
            'patchedConic': transfer.to_dict(),
        },
    )


def _arc_elements(r, v, mu: float) -> OrbitalElements:
    # a from the energy, e from the eccentricity vector
    r_mag = vector.magnitude(r)
    v_mag = vector.magnitude(v)
    energy = v_mag**2 / 2.0 - mu / r_mag
    a = -mu / (2.0 * energy)
    e_vec = (np.multiply(r, v_mag**2 - mu / r_mag) - np.multiply(v, vector.dot(r, v))) / mu
    e = float(np.linalg.norm(e_vec))
    if a > 0:
        e = min(e, 1.0)  # rectilinear arcs sit at e = 1
    return OrbitalElements(a, e, mu=mu)


def _lambert_model(flight_time_hours: float) -> ModelResult:
    r_park = EARTH.parking_radius
    r1 = vector.vec3(r_park, 0.0, 0.0)
    r2 = vector.vec3(EARTH_MOON_DISTANCE, 0.0, 0.0)
    tof = hours_to_seconds(flight_time_hours)
    solution = solve_lambert(r1, r2, tof, EARTH.mu)

    dv_departure = abs(vector.magnitude(solution.velocity_departure) - EARTH.circular_speed(r_park))
    dv_arrival = abs(vector.magnitude(solution.velocity_arrival)
                     - MOON.circular_speed(MOON.parking_radius))

    arc = propagate_two_body(r1, solution.velocity_departure, tof, EARTH.mu)
    arrival, _ = arc.state_at(arc.tf)
    residual = vector.magnitude(vector.subtract(arrival, r2))
    if residual > config.ARRIVAL_RESIDUAL_TOL_KM:
        advisory(f"Propagated Lambert arc misses the arrival point by {residual:.3f} km")

    times = arc.get_times(config.TRAJECTORY_POINTS + 1)
    states = arc.evaluate_raw(times)
    points = tuple(TrajectoryPoint(x=float(s[0]), y=float(s[1]), z=float(s[2]),
                                   time=float(t) * HOURS_PER_SECOND)
                   for t, s in zip(times, states))

    lambert = solution.to_dict()
    lambert['arrivalResidual'] = residual
    return ModelResult(
        delta_v=dv_departure + dv_arrival,
        flight_time_hours=flight_time_hours,
        trajectory_points=points,
        orbital_elements=(_arc_elements(r1, solution.velocity_departure, EARTH.mu),),
        calculations={'lambertSolution': lambert},
    )


def _unsupported_model(flight_time_hours: float) -> ModelResult:
    raise InvalidInputError("Custom transfer type is not supported by the engine")


_TRANSFER_MODELS: Dict[TransferType, Callable[[float], ModelResult]] = {
    TransferType.HOHMANN: _hohmann_model,
    TransferType.LAMBERT: _lambert_model,
    TransferType.BI_ELLIPTIC: _bi_elliptic_model,
    TransferType.CUSTOM: _unsupported_model,
}


# ========== ENGINE ==========
def parse_launch_date(launch_date: Union[datetime, date, str]) -> datetime:
    """Accept a datetime, a date or an ISO-8601 string."""
    if isinstance(launch_date, datetime):
        return launch_date
    if isinstance(launch_date, date):
        return datetime(launch_date.year, launch_date.month, launch_date.day)
    if isinstance(launch_date, str):
        text = launch_date.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            pass
    raise InvalidInputError(f"Invalid launch date provided: {launch_date!r}")


def calculate_efficiency(delta_v: float, r1: float = EARTH.parking_radius,
                         r2: float = EARTH_MOON_DISTANCE, mu: float = EARTH.mu) -> float:
    """
    Ideal Hohmann delta-V between r1 and r2 as a percentage of delta_v.

    Clamped to [0, 100]; a transfer cheaper than the ideal scores 100.
    """
    if delta_v <= 0:
        return 100.0
    ideal = hohmann_transfer(r1, r2, mu).total_delta_v
    return max(0.0, min(100.0, ideal / delta_v * 100.0))


def generate_earth_moon_trajectory(launch_date: Union[datetime, date, str],
                                   transfer_type: Union[TransferType, str] = TransferType.HOHMANN,
                                   flight_time_hours: float = 72.0) -> TransferComputation:
    """
    Compute an Earth to Moon transfer.

    Parameters
    ----------
    launch_date : datetime, date or str
        Launch date; strings must be ISO-8601
    transfer_type : TransferType or str
        'hohmann', 'lambert' or 'bi_elliptic' ('custom' is rejected)
    flight_time_hours : float
        Requested flight time [h], 0.1 to 8760. Only the lambert model
        honours it; the others report their own duration.

    Returns
    -------
    TransferComputation

    Raises
    ------
    InvalidInputError
        For an invalid date, transfer type, flight time or an implausible
        resulting delta-V
    EngineError
        Any error of the underlying model, unchanged
    """
    parse_launch_date(launch_date)
    flight_time_hours = validate_mission_time(flight_time_hours)
    transfer_type = TransferType.parse(transfer_type)

    model = _TRANSFER_MODELS[transfer_type](flight_time_hours)
    delta_v = validate_delta_v(model.delta_v)
    fuel = optimize_fuel(delta_v)
    risks = assess_trajectory_risks(transfer_type, delta_v, model.flight_time_hours)
    efficiency = calculate_efficiency(delta_v)

    calculations = dict(model.calculations)
    calculations['fuelOptimization'] = fuel.to_dict()
    return TransferComputation(
        total_delta_v=round(delta_v, 3),
        flight_time=round(model.flight_time_hours, 1),
        fuel_mass=int(round(fuel.propellant_mass)),
        efficiency=round(efficiency, 1),
        trajectory_points=model.trajectory_points,
        orbital_elements=model.orbital_elements,
        risk_factors=tuple(risks),
        calculations=calculations,
    )


def build_trajectory_record(mission_id: Optional[str], name: Optional[str],
                            transfer_type: Union[TransferType, str],
                            launch_window: Union[datetime, date, str],
                            computation: TransferComputation) -> TrajectoryRecord:
    """Wrap a computation in a storable record (inactive, no decision linked)."""
    return TrajectoryRecord(
        mission_id=mission_id,
        name=name,
        type=TransferType.parse(transfer_type),
        launch_window=parse_launch_date(launch_window).isoformat(),
        total_delta_v=computation.total_delta_v,
        flight_time=computation.flight_time,
        fuel_mass=computation.fuel_mass,
        efficiency=computation.efficiency,
        trajectory_points=tuple(computation.trajectory_points),
        orbital_elements=tuple(computation.orbital_elements),
        risk_factors=tuple(computation.risk_factors),
        calculations=computation.calculations,
        is_active=False,
        decision_id=None,
    )


def compute_transfer(launch_date: Union[datetime, date, str],
                     transfer_type: Union[TransferType, str] = TransferType.HOHMANN,
                     flight_time_hours: float = 72.0,
                     mission_id: Optional[str] = None,
                     name: Optional[str] = None) -> TrajectoryRecord:
    """
    Compute a transfer and return it as a TrajectoryRecord.

    See generate_earth_moon_trajectory for the parameters and errors.
    """
    computation = generate_earth_moon_trajectory(launch_date, transfer_type, flight_time_hours)
    return build_trajectory_record(mission_id, name, transfer_type, launch_date, computation)
