"""
Test suite for OrbitalElements.

Tests cover:
- Construction and read-only storage
- Physical validation of the a-e combination
- Derived quantities (apsides, period, energy)
- Equality, hashing and record export
"""

import pytest
import numpy as np
from metabasis import OrbitalElements, OE, EARTH
from metabasis.errors import InvalidInputError


class TestConstruction:
    """Test element construction."""

    def test_planar_defaults(self):
        oe = OE(7000, 0.1)
        assert oe.semi_major_axis == 7000
        assert oe.eccentricity == 0.1
        assert oe.inclination == 0.0
        assert oe.right_ascension == 0.0
        assert oe.arg_of_perigee == 0.0
        assert oe.true_anomaly == 0.0

    def test_elements_read_only(self):
        oe = OE(7000, 0.1)
        with pytest.raises(ValueError):
            oe.elements[0] = 8000

    def test_from_apsides(self):
        oe = OrbitalElements.from_apsides(6571, 384400)
        assert np.isclose(oe.semi_major_axis, 195485.5)
        assert np.isclose(oe.periapsis_radius(), 6571)
        assert np.isclose(oe.apoapsis_radius(), 384400)

    def test_from_apsides_any_order(self):
        assert OrbitalElements.from_apsides(384400, 6571) == OrbitalElements.from_apsides(6571, 384400)

    def test_circular_from_equal_apsides(self):
        oe = OrbitalElements.from_apsides(7000, 7000)
        assert oe.eccentricity == 0.0


class TestValidation:
    """Test rejection of unphysical elements."""

    def test_negative_eccentricity(self):
        with pytest.raises(InvalidInputError, match="Eccentricity"):
            OE(7000, -0.1)

    def test_elliptic_negative_a(self):
        with pytest.raises(InvalidInputError, match="positive semi-major axis"):
            OE(-7000, 0.5)

    def test_hyperbolic_positive_a(self):
        with pytest.raises(InvalidInputError, match="negative semi-major axis"):
            OE(7000, 1.5)

    def test_hyperbolic_negative_a_accepted(self):
        oe = OE(-7000, 1.5)
        assert oe.periapsis_radius() == pytest.approx(3500)

    def test_non_finite(self):
        with pytest.raises(InvalidInputError, match="NaN or Inf"):
            OE(np.nan, 0.1)

    def test_inclination_range(self):
        with pytest.raises(InvalidInputError, match="Inclination"):
            OE(7000, 0.1, inclination=4.0)

    def test_bad_mu(self):
        with pytest.raises(InvalidInputError, match="Gravitational parameter"):
            OE(7000, 0.1, mu=-1.0)


class TestDerivedQuantities:
    """Test period, energy and apsides."""

    def test_period(self):
        oe = OE(7000, 0.0, mu=EARTH.mu)
        expected = 2 * np.pi * np.sqrt(7000**3 / EARTH.mu)
        assert np.isclose(oe.orbital_period(), expected)

    def test_period_requires_mu(self):
        with pytest.raises(ValueError, match="gravitational parameter"):
            OE(7000, 0.0).orbital_period()

    def test_period_undefined_for_hyperbola(self):
        with pytest.raises(ValueError):
            OE(-7000, 1.5, mu=EARTH.mu).orbital_period()

    def test_specific_energy(self):
        oe = OE(7000, 0.2, mu=EARTH.mu)
        assert np.isclose(oe.specific_energy(), -EARTH.mu / 14000)

    def test_apoapsis_undefined_for_hyperbola(self):
        with pytest.raises(ValueError):
            OE(-7000, 1.5).apoapsis_radius()


class TestSpecialMethods:
    """Test equality, hashing and export."""

    def test_equality_tolerance(self):
        assert OE(7000, 0.1) == OE(7000 * (1 + 1e-14), 0.1)
        assert OE(7000, 0.1) != OE(7001, 0.1)

    def test_equal_objects_hash_equal(self):
        assert hash(OE(7000, 0.1)) == hash(OE(7000, 0.1))
        assert len({OE(7000, 0.1), OE(7000, 0.1)}) == 1

    def test_comparison_with_other_type(self):
        assert OE(7000, 0.1) != "orbit"

    def test_to_dict(self):
        d = OE(7000, 0.1).to_dict()
        assert list(d) == ['semiMajorAxis', 'eccentricity', 'inclination',
                           'rightAscension', 'argOfPerigee', 'trueAnomaly']
        assert d['semiMajorAxis'] == 7000.0

    def test_repr_and_str(self):
        oe = OE(7000, 0.1)
        assert repr(oe).startswith("OrbitalElements(")
        assert "Keplerian Elements" in str(oe)
