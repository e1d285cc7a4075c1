"""
Test suite for unit conversion and boundary validation.

Tests cover:
- Hour/second and km/s to m/s conversions
- Mission time plausibility bounds
- Delta-V plausibility bounds
- Rejection of non-finite and negative values
"""

import math
import pytest
import numpy as np
from metabasis import units
from metabasis.errors import InvalidInputError


class TestConversions:
    """Test plain unit conversions."""

    def test_hours_to_seconds(self):
        assert units.hours_to_seconds(72) == 259200.0

    def test_seconds_to_hours(self):
        assert np.isclose(units.seconds_to_hours(5400.0), 1.5)

    def test_round_trip_time(self):
        """Seconds and hours conversions invert each other."""
        assert np.isclose(units.seconds_to_hours(units.hours_to_seconds(12.3)), 12.3)

    def test_velocity_conversions(self):
        assert np.isclose(units.km_per_sec_to_m_per_sec(3.2), 3200.0)
        assert np.isclose(units.m_per_sec_to_km_per_sec(450.0), 0.45)

    def test_negative_velocity_allowed(self):
        """Velocities are signed, only finiteness is required."""
        assert units.km_per_sec_to_m_per_sec(-1.0) == -1000.0

    @pytest.mark.parametrize("func", [units.hours_to_seconds, units.seconds_to_hours])
    def test_negative_time_rejected(self, func):
        with pytest.raises(InvalidInputError, match="negative"):
            func(-1.0)

    @pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, "72", None])
    def test_non_finite_rejected(self, value):
        with pytest.raises(InvalidInputError):
            units.hours_to_seconds(value)
        with pytest.raises(InvalidInputError):
            units.km_per_sec_to_m_per_sec(value)


class TestMissionTime:
    """Test mission time bounds (0.1 h to 8760 h inclusive)."""

    def test_just_below_minimum(self):
        with pytest.raises(InvalidInputError, match="too short"):
            units.validate_mission_time(0.09)

    def test_minimum_accepted(self):
        assert units.validate_mission_time(0.1) == 0.1

    def test_maximum_accepted(self):
        assert units.validate_mission_time(8760) == 8760.0

    def test_just_above_maximum(self):
        with pytest.raises(InvalidInputError, match="too long"):
            units.validate_mission_time(8761)

    def test_nan_rejected(self):
        with pytest.raises(InvalidInputError):
            units.validate_mission_time(math.nan)


class TestDeltaV:
    """Test delta-V bounds (0 to 20 km/s)."""

    def test_zero_accepted(self):
        assert units.validate_delta_v(0.0) == 0.0

    def test_limit_accepted(self):
        assert units.validate_delta_v(20.0) == 20.0

    def test_above_limit_rejected(self):
        with pytest.raises(InvalidInputError, match="chemical propulsion"):
            units.validate_delta_v(20.01)

    def test_negative_rejected(self):
        with pytest.raises(InvalidInputError, match="negative"):
            units.validate_delta_v(-0.1)

    def test_validate_positive(self):
        assert units.validate_positive(2, "Mass") == 2.0
        with pytest.raises(InvalidInputError, match="Mass must be positive"):
            units.validate_positive(0.0, "Mass")

    def test_error_is_value_error(self):
        """Input errors remain catchable as ValueError."""
        with pytest.raises(ValueError):
            units.validate_delta_v(50.0)
