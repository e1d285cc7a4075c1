"""
Two-Body Propagation
====================

Numerical propagation of point-mass two-body motion with heyoka's Taylor
integrator. Used to turn an analytic transfer arc (e.g. a Lambert
solution) into a dense trajectory that can be sampled at any time, and to
check that the arc actually reaches its target.

The gravitational parameter is a runtime parameter (hy.par[0]), so a single
compiled integrator serves every central body.

Examples
--------
>>> from metabasis.propagation import propagate_two_body
>>> traj = propagate_two_body([7000, 0, 0], [0, 7.546, 0], 3600.0, 398600.4418)
>>> traj.sample_raw(10).shape
(10, 6)
"""

import copy
import threading
import numpy as np
import pandas as pd
import heyoka as hy
from typing import Optional, Tuple, Union

from . import vector
from .errors import ConvergenceError, InvalidInputError
from .units import validate_positive


class TwoBodyPropagator:
    """
    Lazily compiled heyoka integrator for the two-body problem.

    Compilation (symbolic differentiation plus LLVM code generation) takes
    about a second and happens on the first call to propagate(). The
    compiled integrator is kept as a template; each propagation works on
    its own deep copy, so concurrent calls never share integrator state.
    """
    # ========== CONSTRUCTION ==========
    def __init__(self):
        self._cached_eom = self._build_eom()
        self._cached_integrator = None
        self._compile_lock = threading.Lock()

    @staticmethod
    def _build_eom():
        x, y, z, vx, vy, vz = hy.make_vars("x", "y", "z", "vx", "vy", "vz")
        mu = hy.par[0]
        r = hy.sqrt(x**2 + y**2 + z**2)
        return [
            (x, vx),
            (y, vy),
            (z, vz),
            (vx, -mu * x / r**3),
            (vy, -mu * y / r**3),
            (vz, -mu * z / r**3),
        ]

    @property
    def is_compiled(self) -> bool:
        return self._cached_integrator is not None

    def compile(self) -> "TwoBodyPropagator":
        """Compile the integrator if needed. Returns self for chaining."""
        with self._compile_lock:
            if self._cached_integrator is None:
                self._cached_integrator = hy.taylor_adaptive(
                    sys=self._cached_eom,
                    state=[0.0] * 6,  # Dummy state
                    pars=[1.0],
                )
        return self

    # ========== PROPAGATION ==========
    def propagate(self, r0, v0, t_end: float, mu: float) -> "Trajectory":
        """
        Propagate from t = 0 to t_end with dense output.

        Parameters
        ----------
        r0, v0 : array_like
            Initial position [km] and velocity [km/s]
        t_end : float
            Final time [s], positive
        mu : float
            Gravitational parameter [km^3/s^2]

        Returns
        -------
        Trajectory

        Raises
        ------
        InvalidInputError
            For a non-finite state or non-positive t_end or mu
        ConvergenceError
            If the state becomes non-finite or no dense output is produced
        """
        r0 = vector.vec3(r0)
        v0 = vector.vec3(v0)
        t_end = validate_positive(t_end, "Propagation time")
        mu = validate_positive(mu, "Gravitational parameter")
        if vector.magnitude(r0) == 0.0:
            raise InvalidInputError("Initial position cannot be at the central body")

        self.compile()
        ta = copy.deepcopy(self._cached_integrator)

        ta.time = 0.0
        ta.state[:] = np.concatenate([r0, v0])
        ta.pars[0] = mu
        output = ta.propagate_until(t_end, c_output=True)[4]

        if not np.all(np.isfinite(ta.state)):
            raise ConvergenceError(
                f"Integration failed: state became invalid during propagation "
                f"(final time {ta.time}, final state {ta.state})"
            )
        if output is None:
            raise ConvergenceError("Integration produced no continuous output")
        return Trajectory(output, 0.0, t_end)


class Trajectory:
    """
    A propagated arc with continuous-time state access.

    Attributes
    ----------
    t0, tf : float
        Time bounds [s]
    """
    def __init__(self, output, t0: float, tf: float):
        self._output = output  # heyoka continuous output
        self._t0 = t0
        self._tf = tf

    @property
    def t0(self) -> float:
        return self._t0

    @property
    def tf(self) -> float:
        return self._tf

    @property
    def duration(self) -> float:
        return self.tf - self.t0

    def state_at(self, t: float) -> Tuple[np.ndarray, np.ndarray]:
        """Position [km] and velocity [km/s] at time t."""
        self._validate_time(t)
        state = np.array(self._output(float(t)), dtype=np.float64)  # Heyoka needs float input
        return vector.vec3(state[:3]), vector.vec3(state[3:])

    def evaluate_raw(self, times: Union[float, np.ndarray, list]) -> np.ndarray:
        """States at one or more times, shape (6,) or (n_times, 6)."""
        if isinstance(times, (int, float)):
            self._validate_time(times)
            return np.array(self._output(float(times)))
        times = np.asarray(times, dtype=float)
        return np.array(self._output(times))

    def sample_raw(self, n_points: int = 100) -> np.ndarray:
        """
        Uniformly sample the arc in time.

        Returns
        -------
        np.ndarray
            Array of shape (n_points, 6)
        """
        if n_points < 2:
            raise InvalidInputError("n_points must be at least 2, use .state_at()")
        return self.evaluate_raw(self.get_times(n_points))

    def get_times(self, n_points: int = 100) -> np.ndarray:
        return np.linspace(self.t0, self.tf, n_points)

    def to_dataframe(self, times: Optional[np.ndarray] = None,
                     n_points: int = 1000) -> pd.DataFrame:
        """
        Export the arc to a pandas DataFrame.

        Parameters
        ----------
        times : array_like, optional
            Specific times to evaluate. If None, uses uniform sampling.
        n_points : int
            Number of uniform samples if times not provided (default: 1000)

        Returns
        -------
        pd.DataFrame
            Columns time, x, y, z, vx, vy, vz
        """
        if times is None:
            times = self.get_times(n_points)
        else:
            times = np.asarray(times, dtype=float)
        states = self.evaluate_raw(times)
        return pd.DataFrame({
            'time': times,
            'x': states[:, 0],
            'y': states[:, 1],
            'z': states[:, 2],
            'vx': states[:, 3],
            'vy': states[:, 4],
            'vz': states[:, 5],
        })

    def _validate_time(self, t: float):
        if not (self.t0 <= t <= self.tf):
            raise InvalidInputError(
                f"Time {t} outside trajectory bounds [{self.t0}, {self.tf}]")

    def __repr__(self):
        return f"Trajectory(t0={self.t0}, tf={self.tf}, duration={self.duration})"


_propagator: Optional[TwoBodyPropagator] = None
_propagator_lock = threading.Lock()


def get_propagator() -> TwoBodyPropagator:
    """Process-wide propagator, created on first use."""
    global _propagator
    with _propagator_lock:
        if _propagator is None:
            _propagator = TwoBodyPropagator()
    return _propagator


def propagate_two_body(r0, v0, t_end: float, mu: float) -> Trajectory:
    """Propagate a two-body state from t = 0 to t_end with the shared propagator."""
    return get_propagator().propagate(r0, v0, t_end, mu)
