"""
Test suite for the trajectory record.
"""

import dataclasses
import pytest
from datetime import date
from metabasis import TrajectoryRecord, TransferType, compute_transfer
from metabasis.errors import InvalidInputError
from metabasis.record import TrajectoryPoint


@pytest.fixture(scope="module")
def record():
    return compute_transfer("2025-07-01T12:00:00", "hohmann", 72,
                            mission_id="m-001", name="Artemis relay")


class TestTransferType:
    """Test transfer type parsing."""

    @pytest.mark.parametrize("text, expected", [
        ("hohmann", TransferType.HOHMANN),
        ("Lambert", TransferType.LAMBERT),
        (" bi_elliptic ", TransferType.BI_ELLIPTIC),
        ("CUSTOM", TransferType.CUSTOM),
    ])
    def test_parse(self, text, expected):
        assert TransferType.parse(text) is expected

    def test_member_passthrough(self):
        assert TransferType.parse(TransferType.LAMBERT) is TransferType.LAMBERT

    def test_unknown(self):
        with pytest.raises(InvalidInputError, match="Invalid transfer type"):
            TransferType.parse("ballistic")


class TestRecord:
    """Test a record built by the engine."""

    def test_identity(self, record):
        assert record.mission_id == "m-001"
        assert record.name == "Artemis relay"
        assert record.type is TransferType.HOHMANN

    def test_created_inactive(self, record):
        assert record.is_active is False
        assert record.decision_id is None

    def test_launch_window_iso(self, record):
        assert record.launch_window == "2025-07-01T12:00:00"

    def test_launch_window_from_date(self):
        rec = compute_transfer(date(2025, 7, 1), "hohmann", 72)
        assert rec.launch_window == "2025-07-01T00:00:00"
        assert rec.mission_id is None

    def test_immutable(self, record):
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.is_active = True
        assert isinstance(record.trajectory_points, tuple)
        assert isinstance(record.risk_factors, tuple)

    def test_rounding(self, record):
        assert record.total_delta_v == round(record.total_delta_v, 3)
        assert record.flight_time == round(record.flight_time, 1)
        assert isinstance(record.fuel_mass, int)

    def test_to_dict_keys(self, record):
        d = record.to_dict()
        assert set(d) == {
            'missionId', 'name', 'type', 'launchWindow', 'totalDeltaV', 'flightTime',
            'fuelMass', 'efficiency', 'trajectoryPoints', 'orbitalElements',
            'riskFactors', 'calculations', 'isActive', 'decisionId',
        }
        assert d['type'] == 'hohmann'
        assert d['isActive'] is False
        assert set(d['trajectoryPoints'][0]) == {'x', 'y', 'z', 'time'}
        assert 'semiMajorAxis' in d['orbitalElements'][0]

    def test_points_dataframe(self, record):
        df = record.points_dataframe()
        assert df.shape == (101, 4)
        assert list(df.columns) == ['time', 'x', 'y', 'z']
        assert df['time'].is_monotonic_increasing


class TestValidation:
    """Test record construction checks."""

    @staticmethod
    def _make(efficiency):
        return TrajectoryRecord(
            mission_id=None, name=None, type=TransferType.HOHMANN,
            launch_window="2025-07-01T00:00:00", total_delta_v=3.9, flight_time=100.0,
            fuel_mass=7000, efficiency=efficiency,
            trajectory_points=(TrajectoryPoint(6571.0, 0.0, 0.0, 0.0),),
            orbital_elements=(), risk_factors=(), calculations={},
        )

    @pytest.mark.parametrize("efficiency", [-0.1, 100.1])
    def test_efficiency_range(self, efficiency):
        with pytest.raises(InvalidInputError, match="Efficiency"):
            self._make(efficiency)

    def test_bounds_accepted(self):
        assert self._make(0.0).efficiency == 0.0
        assert self._make(100.0).points_dataframe().shape == (1, 4)
