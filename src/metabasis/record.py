'''Trajectory record returned to the calling layer

The record is built fresh for every request and never mutated afterwards:
it is a frozen dataclass whose sequences are tuples.'''

import numpy as np
import pandas as pd
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .errors import InvalidInputError


class TransferType(Enum):
    """Transfer families understood by the engine."""
    HOHMANN = "hohmann"
    LAMBERT = "lambert"
    BI_ELLIPTIC = "bi_elliptic"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value: Union["TransferType", str]) -> "TransferType":
        """Accept an enum member or its string value (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        valid = ", ".join(t.value for t in cls)
        raise InvalidInputError(f"Invalid transfer type: {value!r}. Must be one of: {valid}")


@dataclass(frozen=True)
class TrajectoryPoint:
    """One sample of a trajectory: position [km] and elapsed time [h]."""
    x: float
    y: float
    z: float
    time: float

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'z': self.z, 'time': self.time}


@dataclass(frozen=True)
class TrajectoryRecord:
    """
    Complete, JSON-ready description of one computed transfer.

    Attributes
    ----------
    mission_id, name : str or None
        Identifiers supplied by the caller
    type : TransferType
    launch_window : str
        ISO-8601 launch date
    total_delta_v : float
        [km/s], 3 decimals
    flight_time : float
        [h], 1 decimal
    fuel_mass : int
        Propellant [kg]
    efficiency : float
        Ideal Hohmann delta-V over actual, percent in [0, 100]
    trajectory_points : tuple of TrajectoryPoint
    orbital_elements : tuple of OrbitalElements
    risk_factors : tuple of str
    calculations : dict
        Per-model intermediate results, keyed hohmannTransfer,
        biEllipticTransfer, lambertSolution, patchedConic and
        fuelOptimization
    is_active : bool
        Always False when created
    decision_id : None
        Linked later by the caller
    """
    mission_id: Optional[str]
    name: Optional[str]
    type: TransferType
    launch_window: str
    total_delta_v: float
    flight_time: float
    fuel_mass: int
    efficiency: float
    trajectory_points: Tuple[TrajectoryPoint, ...]
    orbital_elements: Tuple[Any, ...]
    risk_factors: Tuple[str, ...]
    calculations: Dict[str, Any]
    is_active: bool = False
    decision_id: Optional[str] = None

    def __post_init__(self):
        if not 0.0 <= self.efficiency <= 100.0:
            raise InvalidInputError(f"Efficiency must be in [0, 100], got {self.efficiency}")

    def to_dict(self) -> Dict[str, Any]:
        """camelCase mapping of the record, as stored by the caller."""
        return {
            'missionId': self.mission_id,
            'name': self.name,
            'type': self.type.value,
            'launchWindow': self.launch_window,
            'totalDeltaV': self.total_delta_v,
            'flightTime': self.flight_time,
            'fuelMass': self.fuel_mass,
            'efficiency': self.efficiency,
            'trajectoryPoints': [p.to_dict() for p in self.trajectory_points],
            'orbitalElements': [e.to_dict() for e in self.orbital_elements],
            'riskFactors': list(self.risk_factors),
            'calculations': dict(self.calculations),
            'isActive': self.is_active,
            'decisionId': self.decision_id,
        }

    def points_dataframe(self) -> pd.DataFrame:
        """Trajectory points as a DataFrame with columns time, x, y, z."""
        points = np.array([[p.time, p.x, p.y, p.z] for p in self.trajectory_points],
                          dtype=np.float64).reshape(-1, 4)
        return pd.DataFrame({
            'time': points[:, 0],
            'x': points[:, 1],
            'y': points[:, 2],
            'z': points[:, 3],
        })
