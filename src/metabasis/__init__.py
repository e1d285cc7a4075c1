"""
Metabasis: Earth-Moon Orbital Transfer Trajectories

A Python package for computing impulsive Earth to Moon transfers: Izzo's
Lambert solver, Hohmann and patched-conic models, Tsiolkovsky propellant
sizing and mission risk rules, with heyoka Taylor integration for sampling
transfer arcs.
"""

# Core classes
from .orbital_elements import OrbitalElements, OrbitalElements as OE
from .lambert import LambertSolution, solve_lambert
from .hohmann import (TransferResult, PatchedConicTransfer, hohmann_transfer,
                      bi_elliptic_transfer, earth_moon_transfer,
                      earth_moon_bi_elliptic_transfer)
from .fuel import FuelPlan, optimize_fuel
from .propagation import Trajectory, propagate_two_body
from .record import TrajectoryRecord, TrajectoryPoint, TransferType
from .risk import WeatherConstraint, RiskAssessment, assess_space_weather
from .engine import (TransferComputation, compute_transfer,
                     generate_earth_moon_trajectory, build_trajectory_record)

# Physical constants and reference vehicle
from .defaults import BodyParams, VehicleParams, EARTH, MOON, DEFAULT_VEHICLE

# Configuration and errors
from .config import config, temp_config
from .errors import EngineError, NumericalDriftWarning

# Package metadata
__version__ = "0.1.0"

# Define what gets imported with "from metabasis import *"
__all__ = [
    # Classes
    "OrbitalElements",
    "LambertSolution",
    "TransferResult",
    "PatchedConicTransfer",
    "FuelPlan",
    "Trajectory",
    "TrajectoryRecord",
    "TrajectoryPoint",
    "TransferType",
    "TransferComputation",
    "WeatherConstraint",
    "RiskAssessment",
    "BodyParams",
    "VehicleParams",
    # Abbreviations
    "OE",
    # Functions
    "solve_lambert",
    "hohmann_transfer",
    "bi_elliptic_transfer",
    "earth_moon_transfer",
    "earth_moon_bi_elliptic_transfer",
    "optimize_fuel",
    "propagate_two_body",
    "assess_space_weather",
    "compute_transfer",
    "generate_earth_moon_trajectory",
    "build_trajectory_record",
    # Constants
    "EARTH",
    "MOON",
    "DEFAULT_VEHICLE",
    # Configuration and errors
    "config",
    "temp_config",
    "EngineError",
    "NumericalDriftWarning",
]
