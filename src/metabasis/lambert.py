"""
Lambert Solver (Izzo's Method)
==============================

Solves the two-point boundary value problem of two-body motion: given
departure and arrival positions and a time of flight, find the departure
and arrival velocities. Single-revolution transfers only.

The problem is reduced to one nondimensional geometry parameter

    lambda = sqrt(|r1| |r2|) cos(dnu / 2) / s

and one nondimensional time T = sqrt(2 mu / s^3) tof, where s is the
semi-perimeter of the triangle (r1, r2, chord). The universal variable x
(x < 1 elliptic, x = 1 parabolic, x > 1 hyperbolic) is found with a
third-order Householder iteration on Izzo's time-of-flight equation

    T(x) = [psi / sqrt|1 - x^2| - x + lambda y] / (1 - x^2)
    y(x) = sqrt(1 - lambda^2 (1 - x^2))

and the velocities are recovered through Lagrange coefficients.

References
----------
    [1] Izzo, "Revisiting Lambert's problem", Celestial Mechanics and
        Dynamical Astronomy, 121(1), 2015.
    [2] Battin, "An Introduction to the Mathematics and Methods of
        Astrodynamics", AIAA, 1999.
"""

import math
import numpy as np
from dataclasses import dataclass
from typing import Dict, Tuple

from . import vector
from .config import config
from .errors import (ConvergenceError, DegenerateGeometryError,
                     ImpossibleGeometryError, InvalidInputError,
                     InvalidOrbitError, SingularSolutionError,
                     TimeTooShortError, UnsupportedTransferError)
from .units import validate_positive
from .utils import advisory

# Step of the central difference used for d2T/dx2 in the Householder
# correction term. The residual itself always uses the analytic T(x).
SECOND_DERIVATIVE_STEP = 1e-8

# |x - 1| below which T(x) is evaluated with Battin's series
BATTIN_THRESHOLD = 0.01

# Unclamped Householder steps smaller than this count as converged
X_RESOLUTION = 1e-13

MIN_RADIUS = 1e-6           # km
MIN_CHORD = 1e-6            # km
MIN_LAGRANGE_G = 1e-15      # s
_MIN_DENOMINATOR = 1e-15
_HYPERGEOMETRIC_TOL = 1e-16


@dataclass(frozen=True)
class LagrangeCoefficients:
    """Scalars mapping the departure state onto the arrival state."""
    f: float
    g: float
    fdot: float
    gdot: float

    @property
    def determinant(self) -> float:
        """f*gdot - fdot*g, identically 1 for an exact two-body solution"""
        return self.f * self.gdot - self.fdot * self.g


@dataclass(frozen=True)
class LambertSolution:
    """
    Departure and arrival velocities of a single-revolution Lambert arc.

    Attributes
    ----------
    velocity_departure, velocity_arrival : np.ndarray
        Read-only velocity vectors [km/s]
    solution_type : str
        'prograde' or 'retrograde'
    iterations : int
        Householder iterations used
    x : float
        Converged universal variable
    semi_major_axis : float
        Semi-major axis of the transfer arc [km]
    lagrange : LagrangeCoefficients
        Coefficients used to recover the velocities
    """
    velocity_departure: np.ndarray
    velocity_arrival: np.ndarray
    solution_type: str
    iterations: int
    x: float
    semi_major_axis: float
    lagrange: LagrangeCoefficients

    def to_dict(self) -> Dict:
        """Record form with camelCase keys."""
        v1, v2 = self.velocity_departure, self.velocity_arrival
        return {
            'velocityDeparture': {'x': float(v1[0]), 'y': float(v1[1]), 'z': float(v1[2])},
            'velocityArrival': {'x': float(v2[0]), 'y': float(v2[1]), 'z': float(v2[2])},
            'solutionType': self.solution_type,
            'convergenceIterations': self.iterations,
            'universalVariable': self.x,
            'semiMajorAxis': self.semi_major_axis,
            'lagrangeCoefficients': {
                'f': self.lagrange.f,
                'g': self.lagrange.g,
                'fdot': self.lagrange.fdot,
                'gdot': self.lagrange.gdot,
            },
        }


# ========== TIME-OF-FLIGHT EQUATION ==========
def minimum_energy_time(lam: float) -> float:
    """Nondimensional lower bound on T for a single-revolution solution."""
    return (1.0 - lam**3) / 3.0


def _y(x: float, lam: float) -> float:
    return math.sqrt(1.0 - lam * lam * (1.0 - x * x))


def _hypergeometric(z: float) -> float:
    # 2F1(3, 1; 5/2; z)
    total = 1.0
    term = 1.0
    j = 0
    while abs(term) > _HYPERGEOMETRIC_TOL:
        term = term * (3.0 + j) * (1.0 + j) / (2.5 + j) * z / (j + 1)
        total += term
        j += 1
    return total


def time_of_flight(x: float, lam: float) -> float:
    """
    Izzo's nondimensional time of flight T(x) for geometry lambda.

    Piecewise on the orbit energy: the elliptic branch (x < 1) recovers the
    auxiliary angle psi with asin, wrapped past pi/2 when cos(psi) < 0; the
    hyperbolic branch (x > 1) uses asinh; around the parabola (x = 1) the
    closed form loses precision and Battin's hypergeometric series is used,
    whose x = 1 value is the parabolic time (2/3)(1 - lambda^3).

    Returns
    -------
    float
        T(x); infinite at x <= -1
    """
    if x <= -1.0:
        return math.inf
    y = _y(x, lam)
    if abs(x - 1.0) < BATTIN_THRESHOLD:
        eta = y - lam * x
        s1 = 0.5 * (1.0 - lam - x * eta)
        q = 4.0 / 3.0 * _hypergeometric(s1)
        return (eta**3 * q + 4.0 * lam * eta) / 2.0

    one_minus_x2 = 1.0 - x * x
    if x < 1.0:
        root = math.sqrt(one_minus_x2)
        sin_psi = min(1.0, root * (y - lam * x))
        psi = math.asin(sin_psi)
        if x * y + lam * one_minus_x2 < 0.0:
            psi = math.pi - psi
    else:
        root = math.sqrt(-one_minus_x2)
        psi = math.asinh(root * (y - lam * x))
    return (psi / root - x + lam * y) / one_minus_x2


def time_derivative(x: float, lam: float) -> float:
    """Analytic dT/dx, with its limit (2/5)(lambda^5 - 1) at x = 1."""
    one_minus_x2 = 1.0 - x * x
    if abs(one_minus_x2) < 1e-12:
        return 0.4 * (lam**5 - 1.0)
    y = _y(x, lam)
    t = time_of_flight(x, lam)
    return (3.0 * t * x - 2.0 + 2.0 * lam**3 * x / y) / one_minus_x2


def time_second_derivative(x: float, lam: float,
                           step: float = SECOND_DERIVATIVE_STEP) -> float:
    """Central finite difference of the analytic dT/dx."""
    return (time_derivative(x + step, lam) - time_derivative(x - step, lam)) / (2.0 * step)


# ========== ROOT FINDER ==========
def initial_guess(T: float, lam: float) -> float:
    """Closed-form starting point for the Householder iteration."""
    if T >= 1.0 / 3.0:
        return (3.0 * T) ** (1.0 / 3.0) - 1.0
    return 5.0 * T**3 / (2.0 * (1.0 - lam**3))


def householder(T: float, lam: float) -> Tuple[float, int]:
    """
    Solve T(x) = T for x with Householder's third-order iteration.

    Parameters
    ----------
    T : float
        Target nondimensional time of flight
    lam : float
        Geometry parameter, |lam| < 1

    Returns
    -------
    x : float
        Converged universal variable
    iterations : int
        Number of updates applied

    Raises
    ------
    ConvergenceError
        If the residual is still above tolerance after
        config.LAMBERT_MAX_ITERATIONS updates, or a derivative vanishes
    """
    tol = config.LAMBERT_TOLERANCE
    max_iter = config.LAMBERT_MAX_ITERATIONS
    max_step = config.LAMBERT_MAX_STEP
    x_min, x_max = config.LAMBERT_X_MIN, config.LAMBERT_X_MAX

    # The seed is non-negative for any T > 0
    x = min(initial_guess(T, lam), x_max)
    iterations = 0
    while True:
        F = time_of_flight(x, lam) - T
        if abs(F) < tol:
            return x, iterations
        if iterations >= max_iter:
            raise ConvergenceError(
                f"Izzo solver did not converge after {max_iter} iterations "
                f"(x={x:.15g}, residual={F:.3e})"
            )
        d1 = time_derivative(x, lam)
        d2 = time_second_derivative(x, lam)
        if abs(d1) < _MIN_DENOMINATOR:
            raise ConvergenceError(
                f"Izzo solver: derivative too small in Householder iteration at x={x}")
        denominator = d1 - F * d2 / (2.0 * d1)
        if denominator * d1 <= 0.0:
            # Curvature term reversed the step direction, fall back to Newton
            denominator = d1
        if abs(denominator) < _MIN_DENOMINATOR:
            raise ConvergenceError(
                f"Izzo solver: derivative too small in Householder iteration at x={x}")

        step = -F / denominator
        clamped = abs(step) > max_step
        step = math.copysign(min(abs(step), max_step), step)
        x_new = x + step
        if x_new > x_max:
            x_new = x_max
            clamped = True
        if x_new <= x_min:
            # T is unbounded at the lower limit, approach it by halving
            x_new = 0.5 * (x + x_min)
            clamped = True
        iterations += 1
        # Clamped updates never count as converged
        if not clamped and abs(x_new - x) < X_RESOLUTION:
            return x_new, iterations
        x = x_new


# ========== PUBLIC API ==========
def solve_lambert(r1, r2, tof: float, mu: float, prograde: bool = True,
                  revolutions: int = 0) -> LambertSolution:
    """
    Solve Lambert's problem for a single-revolution transfer.

    Parameters
    ----------
    r1, r2 : array_like
        Departure and arrival position vectors [km]
    tof : float
        Time of flight [s], positive
    mu : float
        Gravitational parameter of the central body [km^3/s^2]
    prograde : bool, optional
        Direction of motion (default True). Prograde transfers sweep
        counter-clockwise about +z.
    revolutions : int, optional
        Number of complete revolutions; only 0 is supported

    Returns
    -------
    LambertSolution

    Raises
    ------
    UnsupportedTransferError
        If revolutions > 0
    InvalidInputError
        If tof or mu is non-positive or non-finite
    DegenerateGeometryError
        If either radius or the chord is (near) zero
    ImpossibleGeometryError
        If |lambda| >= 1
    TimeTooShortError
        If T is below the minimum-time bound
    ConvergenceError
        If the Householder iteration does not converge
    InvalidOrbitError
        If the converged arc has a non-positive semi-major axis
    SingularSolutionError
        If the Lagrange g coefficient vanishes

    Examples
    --------
    >>> sol = solve_lambert([1, 0, 0], [0, 1, 0], np.pi / 2, mu=1.0)
    >>> np.round(sol.velocity_departure, 6)
    array([0., 1., 0.])
    """
    if revolutions != 0:
        if isinstance(revolutions, int) and revolutions > 0:
            raise UnsupportedTransferError(
                "Multi-revolution Lambert transfers not implemented")
        raise InvalidInputError(f"Revolutions must be a non-negative integer, got {revolutions!r}")
    r1 = vector.vec3(r1)
    r2 = vector.vec3(r2)
    tof = validate_positive(tof, "Time of flight")
    mu = validate_positive(mu, "Gravitational parameter")

    r1_mag = vector.magnitude(r1)
    r2_mag = vector.magnitude(r2)
    if r1_mag < MIN_RADIUS or r2_mag < MIN_RADIUS:
        raise DegenerateGeometryError(
            f"Invalid position vectors: magnitudes too small ({r1_mag}, {r2_mag} km)")
    c = vector.magnitude(vector.subtract(r2, r1))
    if c < MIN_CHORD:
        raise DegenerateGeometryError(
            f"Degenerate Lambert problem: positions too close (chord {c} km)")
    s = (r1_mag + r2_mag + c) / 2.0

    # Transfer angle, oriented by the requested direction about +z
    h = vector.cross(r1, r2)
    dnu = math.atan2(vector.magnitude(h), vector.dot(r1, r2))
    if prograde:
        if h[2] < 0.0:
            dnu = 2.0 * math.pi - dnu
    elif h[2] >= 0.0:
        dnu = 2.0 * math.pi - dnu

    lam = math.sqrt(r1_mag * r2_mag) * math.cos(dnu / 2.0) / s
    if abs(lam) >= 1.0:
        raise ImpossibleGeometryError(
            f"Lambert problem: impossible geometry (|lambda| = {abs(lam)} >= 1)")
    T = math.sqrt(2.0 * mu / s**3) * tof
    T_min = minimum_energy_time(lam)
    if T < T_min:
        raise TimeTooShortError(
            f"Time of flight too short. Minimum: {T_min:.6g}, given: {T:.6g} (nondimensional)")

    x, iterations = householder(T, lam)

    # ========== LAGRANGE COEFFICIENTS ==========
    one_minus_x2 = 1.0 - x * x
    a = s / (2.0 * one_minus_x2) if one_minus_x2 != 0.0 else math.inf
    if not math.isfinite(a) or a <= 0.0:
        raise InvalidOrbitError(
            f"Invalid semi-major axis in Lagrange coefficient calculation (a={a}, x={x})")
    y = _y(x, lam)
    root = math.sqrt(one_minus_x2)
    psi = math.atan2(root * (y - lam * x), x * y + lam * one_minus_x2)
    dE = 2.0 * psi  # eccentric anomaly swept along the arc

    f = 1.0 - a / r1_mag * (1.0 - math.cos(dE))
    gdot = 1.0 - a / r2_mag * (1.0 - math.cos(dE))
    g = tof - math.sqrt(a**3 / mu) * (dE - math.sin(dE))
    fdot = -math.sqrt(mu * a) * math.sin(dE) / (r1_mag * r2_mag)
    if abs(g) < MIN_LAGRANGE_G:
        raise SingularSolutionError(
            "Lambert solver: g coefficient too small, singular solution")
    coeffs = LagrangeCoefficients(f=f, g=g, fdot=fdot, gdot=gdot)

    drift = abs(coeffs.determinant - 1.0)
    if drift > config.DETERMINANT_TOL:
        advisory(f"Lagrange coefficients determinant error: {drift:.3e}")

    v1 = vector.scale(vector.subtract(r2, vector.scale(r1, f)), 1.0 / g)
    v2 = vector.add(vector.scale(r1, fdot), vector.scale(v1, gdot))

    return LambertSolution(
        velocity_departure=v1,
        velocity_arrival=v2,
        solution_type='prograde' if prograde else 'retrograde',
        iterations=iterations,
        x=x,
        semi_major_axis=a,
        lagrange=coeffs,
    )
