'''Error taxonomy for the trajectory engine

Every failure aborts the current computation. Each exception carries a
``kind`` string so that a calling layer can map it onto its own error codes
without depending on the class hierarchy.'''


class EngineError(Exception):
    """Base class for all errors raised by the engine."""
    kind = "EngineError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __repr__(self):
        return f"{type(self).__name__}(kind={self.kind!r}, message={self.message!r})"


# ========== INPUT ERRORS ==========
class InvalidInputError(EngineError, ValueError):
    """Non-finite, negative or out-of-range scalar input."""
    kind = "InvalidInput"


class DegenerateGeometryError(EngineError, ValueError):
    """Near-zero chord or position magnitude in a Lambert problem."""
    kind = "DegenerateGeometry"


class ImpossibleGeometryError(EngineError, ValueError):
    """Lambert geometry parameter outside the open interval (-1, 1)."""
    kind = "ImpossibleGeometry"


class TimeTooShortError(EngineError, ValueError):
    """Time of flight below the single-revolution minimum-time bound."""
    kind = "TimeTooShort"


# ========== NUMERICAL ERRORS ==========
class ConvergenceError(EngineError, RuntimeError):
    """Iteration budget exhausted, or an advisory check escalated."""
    kind = "DidNotConverge"


class InvalidOrbitError(EngineError, RuntimeError):
    """Non-positive semi-major axis during Lagrange coefficient recovery."""
    kind = "InvalidOrbit"


class SingularSolutionError(EngineError, RuntimeError):
    """Lagrange g coefficient too small to recover velocities."""
    kind = "SingularSolution"


class UnsupportedTransferError(EngineError, NotImplementedError):
    """Requested transfer family has no implementation (multi-revolution)."""
    kind = "NotImplemented"


class InvalidMassRatioError(EngineError, RuntimeError):
    """Tsiolkovsky mass ratio non-finite or below one."""
    kind = "InvalidMassRatio"


class NegativePropellantError(EngineError, RuntimeError):
    """Propellant mass came out negative."""
    kind = "NegativePropellant"


# ========== WARNINGS ==========
class NumericalDriftWarning(UserWarning):
    """An advisory consistency check drifted beyond its tolerance."""
