"""
Mission Risk Rules
==================

Two independent assessments:

* assess_trajectory_risks: fixed rule table mapping a computed transfer to
  human-readable risk statements.
* assess_space_weather: scores the current space-weather constraints
  against the time of flight and grades the mission Low to Critical.
"""

from dataclasses import dataclass
from typing import List, Union

from .record import TransferType
from .units import validate_positive

HIGH_DELTA_V_KMS = 4.0
LONG_FLIGHT_HOURS = 120.0

HIGH_DELTA_V = "High delta-V requirement increases fuel load and complexity"
LONG_FLIGHT = "Extended flight time increases exposure to space weather"
LAMBERT_TIMING = "Lambert solution may require precise timing and navigation"
STANDING_ADVISORIES = (
    "Monitor solar activity during launch window",
    "Debris avoidance maneuvers may be required",
)


def assess_trajectory_risks(transfer_type: Union[TransferType, str],
                            delta_v: float, flight_time_hours: float) -> List[str]:
    """
    Risk statements for a computed transfer.

    Parameters
    ----------
    transfer_type : TransferType or str
    delta_v : float
        Total delta-V [km/s]
    flight_time_hours : float
        Flight time [h]

    Returns
    -------
    list of str
        Triggered rules in table order, followed by the standing advisories
    """
    transfer_type = TransferType.parse(transfer_type)
    risks = []
    if delta_v > HIGH_DELTA_V_KMS:
        risks.append(HIGH_DELTA_V)
    if flight_time_hours > LONG_FLIGHT_HOURS:
        risks.append(LONG_FLIGHT)
    if transfer_type is TransferType.LAMBERT:
        risks.append(LAMBERT_TIMING)
    risks.extend(STANDING_ADVISORIES)
    return risks


# ========== SPACE WEATHER ==========
@dataclass(frozen=True)
class WeatherConstraint:
    """Space-weather conditions at launch."""
    solar_flare: bool = False
    geomagnetic_storm: bool = False
    radiation_flux: float = 0.0


@dataclass(frozen=True)
class RiskAssessment:
    safe: bool
    level: str
    color: str
    message: str

    def to_dict(self):
        return {'safe': self.safe, 'riskLevel': self.level,
                'color': self.color, 'message': self.message}


RISK_COLORS = {
    'Low': '#4ade80',
    'Medium': '#facc15',
    'High': '#fb923c',
    'Critical': '#f87171',
}

_MESSAGES = {
    'Critical': "ABORT: Lethal radiation levels detected for this duration.",
    'High': "WARNING: High radiation dose expected. Shielding required.",
}
_NOMINAL = "Nominal mission parameters."


def space_weather_score(constraint: WeatherConstraint, time_of_flight_days: float) -> int:
    """Additive exposure score: flare 50, storm 30, TOF over 3 d 10, over 5 d 20."""
    score = 0
    if constraint.solar_flare:
        score += 50
    if constraint.geomagnetic_storm:
        score += 30
    if time_of_flight_days > 3:
        score += 10
    if time_of_flight_days > 5:
        score += 20
    return score


def assess_space_weather(constraint: WeatherConstraint,
                         time_of_flight_days: float) -> RiskAssessment:
    """
    Grade radiation exposure for a flight of the given duration.

    Longer exposure under high flux is more dangerous, so both the weather
    flags and the time of flight add to the score. Critical above 80,
    High above 50, Medium above 20. Only Low and Medium are safe.

    Examples
    --------
    >>> assess_space_weather(WeatherConstraint(solar_flare=True, geomagnetic_storm=True), 4.0).level
    'Critical'
    """
    time_of_flight_days = validate_positive(time_of_flight_days, "Time of flight")
    score = space_weather_score(constraint, time_of_flight_days)
    if score > 80:
        level = 'Critical'
    elif score > 50:
        level = 'High'
    elif score > 20:
        level = 'Medium'
    else:
        level = 'Low'
    return RiskAssessment(
        safe=level in ('Low', 'Medium'),
        level=level,
        color=RISK_COLORS[level],
        message=_MESSAGES.get(level, _NOMINAL),
    )
