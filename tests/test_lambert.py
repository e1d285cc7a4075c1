"""
Test suite for the Izzo Lambert solver.

Tests cover:
- Known analytic case (quarter of a circular orbit)
- Round trip over sampled planar and inclined geometries for several
  central bodies (iteration count, Lagrange determinant)
- Two-body energy and angular momentum consistency
- Time-of-flight equation pieces (minimum time, parabolic limit, derivative)
- Error conditions (degenerate geometry, short time, hyperbolic arcs,
  multi-revolution requests, invalid input)
"""

import math
import pytest
import numpy as np
from metabasis import EARTH, MOON, solve_lambert, temp_config
from metabasis.errors import (ConvergenceError, DegenerateGeometryError,
                              InvalidInputError, InvalidOrbitError,
                              TimeTooShortError, UnsupportedTransferError)
from metabasis.lambert import (BATTIN_THRESHOLD, LambertSolution, minimum_energy_time,
                               time_derivative, time_of_flight)

MU = EARTH.mu


def _geometry(r1, r2):
    """Semi-perimeter and lambda for a prograde transfer between r1 and r2."""
    r1, r2 = np.asarray(r1, float), np.asarray(r2, float)
    r1m, r2m = np.linalg.norm(r1), np.linalg.norm(r2)
    c = np.linalg.norm(r2 - r1)
    s = (r1m + r2m + c) / 2
    dnu = math.atan2(np.linalg.norm(np.cross(r1, r2)), np.dot(r1, r2))
    if np.cross(r1, r2)[2] < 0:
        dnu = 2 * math.pi - dnu
    lam = math.sqrt(r1m * r2m) * math.cos(dnu / 2) / s
    return s, lam


def _parabolic_tof(r1, r2, mu=MU):
    """Dimensional time of flight of the parabolic arc between r1 and r2."""
    s, lam = _geometry(r1, r2)
    return (2.0 / 3.0) * (1 - lam**3) / math.sqrt(2 * mu / s**3)


CENTRAL_BODY_MU = (MOON.mu, EARTH.mu, 126686534.0)  # Moon, Earth, Jupiter


def _sampled_cases():
    """Planar and inclined geometries around several central bodies."""
    rng = np.random.default_rng(20240617)
    cases = []
    for k in range(30):
        mu = CENTRAL_BODY_MU[k % 3]
        r1m = rng.uniform(6600, 20000)
        r2m = rng.uniform(6600, 50000)
        angle = rng.uniform(np.radians(10), np.radians(350))
        if abs(angle - np.pi) < np.radians(5):
            angle += np.radians(10)
        # Every other case lifts r2 out of the reference plane
        tilt = rng.uniform(np.radians(-40), np.radians(40)) if k % 2 else 0.0
        r1 = np.array([r1m, 0.0, 0.0])
        r2 = r2m * np.array([np.cos(angle) * np.cos(tilt),
                             np.sin(angle) * np.cos(tilt),
                             np.sin(tilt)])
        factor = rng.uniform(1.2, 3.0)
        cases.append((r1, r2, factor * _parabolic_tof(r1, r2, mu), mu))
    return cases


@pytest.fixture
def quarter_orbit():
    """Quarter of a circular orbit in canonical units."""
    return solve_lambert([1.0, 0.0, 0.0], [0.0, 1.0, 0.0], math.pi / 2, mu=1.0)


class TestKnownSolutions:
    """Test against analytically known transfers."""

    def test_quarter_circular_departure(self, quarter_orbit):
        assert np.allclose(quarter_orbit.velocity_departure, [0.0, 1.0, 0.0], atol=1e-8)

    def test_quarter_circular_arrival(self, quarter_orbit):
        assert np.allclose(quarter_orbit.velocity_arrival, [-1.0, 0.0, 0.0], atol=1e-8)

    def test_quarter_circular_semi_major_axis(self, quarter_orbit):
        assert np.isclose(quarter_orbit.semi_major_axis, 1.0, rtol=1e-8)

    def test_solution_metadata(self, quarter_orbit):
        assert isinstance(quarter_orbit, LambertSolution)
        assert quarter_orbit.solution_type == 'prograde'
        assert 0 <= quarter_orbit.iterations <= 30

    def test_velocities_read_only(self, quarter_orbit):
        with pytest.raises(ValueError):
            quarter_orbit.velocity_departure[0] = 1.0

    def test_retrograde_reverses_motion(self):
        """The retrograde quarter arc is three quarters of a clockwise circle."""
        sol = solve_lambert([1.0, 0.0, 0.0], [0.0, 1.0, 0.0], 3 * math.pi / 2,
                            mu=1.0, prograde=False)
        assert sol.solution_type == 'retrograde'
        assert np.allclose(sol.velocity_departure, [0.0, -1.0, 0.0], atol=1e-8)

    def test_to_dict(self, quarter_orbit):
        d = quarter_orbit.to_dict()
        assert set(d['velocityDeparture']) == {'x', 'y', 'z'}
        assert d['solutionType'] == 'prograde'
        assert d['convergenceIterations'] == quarter_orbit.iterations
        assert np.isclose(d['lagrangeCoefficients']['g'], quarter_orbit.lagrange.g)


class TestSampledGeometries:
    """Round-trip properties over a spread of planar geometries."""

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases())
    def test_converges_within_budget(self, r1, r2, tof, mu):
        sol = solve_lambert(r1, r2, tof, mu)
        assert sol.iterations <= 30

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases())
    def test_lagrange_determinant(self, r1, r2, tof, mu):
        sol = solve_lambert(r1, r2, tof, mu)
        assert abs(sol.lagrange.determinant - 1.0) < 1e-8

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases())
    def test_energy_consistency(self, r1, r2, tof, mu):
        """Specific energy matches at both ends and equals -mu/2a."""
        sol = solve_lambert(r1, r2, tof, mu)
        e1 = np.dot(sol.velocity_departure, sol.velocity_departure) / 2 - mu / np.linalg.norm(r1)
        e2 = np.dot(sol.velocity_arrival, sol.velocity_arrival) / 2 - mu / np.linalg.norm(r2)
        assert abs(e1 - e2) / abs(e1) < 1e-6
        assert np.isclose(e1, -mu / (2 * sol.semi_major_axis), rtol=1e-6)

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases())
    def test_angular_momentum_conserved(self, r1, r2, tof, mu):
        sol = solve_lambert(r1, r2, tof, mu)
        h1 = np.cross(r1, sol.velocity_departure)
        h2 = np.cross(r2, sol.velocity_arrival)
        assert np.allclose(h1, h2, rtol=1e-8, atol=1e-6 * np.linalg.norm(h1))

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases())
    def test_prograde_arcs_turn_counter_clockwise(self, r1, r2, tof, mu):
        sol = solve_lambert(r1, r2, tof, mu)
        assert np.cross(r1, sol.velocity_departure)[2] > 0

    @pytest.mark.parametrize("r1, r2, tof, mu", _sampled_cases()[1::2])
    def test_inclined_arc_stays_in_transfer_plane(self, r1, r2, tof, mu):
        """Departure velocity lies in the plane spanned by r1 and r2."""
        sol = solve_lambert(r1, r2, tof, mu)
        normal = np.cross(r1, r2)
        normal /= np.linalg.norm(normal)
        v1 = sol.velocity_departure
        assert abs(np.dot(normal, v1)) < 1e-9 * np.linalg.norm(v1)


class TestTimeOfFlightEquation:
    """Test the nondimensional time equation and its derivative."""

    def test_minimum_time_monotonic(self):
        """T_min decreases strictly as lambda increases."""
        lams = np.linspace(-0.99, 0.99, 50)
        values = [minimum_energy_time(lam) for lam in lams]
        assert np.all(np.diff(values) < 0)

    @pytest.mark.parametrize("lam", [-0.6, 0.0, 0.13, 0.7])
    def test_parabolic_limit(self, lam):
        assert np.isclose(time_of_flight(1.0, lam), (2.0 / 3.0) * (1 - lam**3), rtol=1e-14)

    @pytest.mark.parametrize("lam", [-0.5, 0.0, 0.4])
    def test_minimum_energy_ellipse(self, lam):
        """At x = 0, T = acos(lambda) + lambda sqrt(1 - lambda^2)."""
        expected = math.acos(lam) + lam * math.sqrt(1 - lam**2)
        assert np.isclose(time_of_flight(0.0, lam), expected, rtol=1e-14)

    @pytest.mark.parametrize("lam", [-0.5, 0.2, 0.9])
    @pytest.mark.parametrize("side", [-1, 1])
    def test_continuous_across_series_switch(self, lam, side):
        x_switch = 1.0 + side * BATTIN_THRESHOLD
        inside = time_of_flight(x_switch - side * 1e-9, lam)
        outside = time_of_flight(x_switch + side * 1e-9, lam)
        assert abs(inside - outside) < 1e-8

    def test_decreasing_in_x(self):
        xs = np.linspace(-0.9, 3.0, 60)
        values = [time_of_flight(x, 0.3) for x in xs]
        assert np.all(np.diff(values) < 0)

    def test_unbounded_at_lower_limit(self):
        assert time_of_flight(-1.0, 0.3) == math.inf

    @pytest.mark.parametrize("x", [-0.5, 0.3, 0.95, 1.5, 4.0])
    def test_derivative_matches_finite_difference(self, x):
        lam, h = 0.35, 1e-6
        numeric = (time_of_flight(x + h, lam) - time_of_flight(x - h, lam)) / (2 * h)
        assert np.isclose(time_derivative(x, lam), numeric, rtol=1e-5)

    def test_derivative_at_parabola(self):
        lam = 0.4
        assert np.isclose(time_derivative(1.0, lam), 0.4 * (lam**5 - 1))


class TestErrors:
    """Test error conditions."""

    def test_zero_chord(self):
        with pytest.raises(DegenerateGeometryError):
            solve_lambert([7000, 0, 0], [7000, 0, 0], 3600.0, MU)

    def test_zero_radius(self):
        with pytest.raises(DegenerateGeometryError):
            solve_lambert([0, 0, 0], [7000, 0, 0], 3600.0, MU)

    def test_time_too_short(self):
        with pytest.raises(TimeTooShortError, match="too short"):
            solve_lambert([7000, 0, 0], [0, 8000, 0], 1.0, MU)

    def test_hyperbolic_arc_rejected(self):
        """Times between T_min and the parabolic time give hyperbolic arcs."""
        r1, r2 = [7000.0, 0, 0], [0, 7000.0, 0]
        with pytest.raises(InvalidOrbitError):
            solve_lambert(r1, r2, 0.75 * _parabolic_tof(r1, r2), MU)

    @pytest.mark.parametrize("tof", [0.0, -100.0, math.nan])
    def test_bad_time_of_flight(self, tof):
        with pytest.raises(InvalidInputError):
            solve_lambert([7000, 0, 0], [0, 8000, 0], tof, MU)

    def test_bad_mu(self):
        with pytest.raises(InvalidInputError):
            solve_lambert([7000, 0, 0], [0, 8000, 0], 3600.0, 0.0)

    def test_multi_revolution_unsupported(self):
        with pytest.raises(UnsupportedTransferError):
            solve_lambert([7000, 0, 0], [0, 8000, 0], 36000.0, MU, revolutions=1)

    def test_negative_revolutions(self):
        with pytest.raises(InvalidInputError):
            solve_lambert([7000, 0, 0], [0, 8000, 0], 36000.0, MU, revolutions=-1)

    def test_clamped_iterate_is_not_converged(self):
        """An iterate pinned at the upper x bound reports non-convergence."""
        r1, r2 = [7000.0, 0, 0], [0, 7000.0, 0]
        with temp_config(LAMBERT_X_MAX=0.5):
            with pytest.raises(ConvergenceError, match="did not converge"):
                solve_lambert(r1, r2, 0.75 * _parabolic_tof(r1, r2), MU)

    def test_iteration_budget(self):
        """A starved iteration budget reports non-convergence."""
        with temp_config(LAMBERT_MAX_ITERATIONS=0):
            with pytest.raises(ConvergenceError, match="did not converge"):
                solve_lambert([7000, 0, 0], [0, 8000, 0], 2 * _parabolic_tof([7000, 0, 0], [0, 8000, 0]), MU)
