'''Minimal 3D vector helpers

Vectors are plain numpy arrays of shape (3,) marked read-only, so they behave
as values: arithmetic always produces a new array and nothing downstream can
mutate a position or velocity in place.'''

import numpy as np

from .errors import InvalidInputError


def vec3(x, y=None, z=None) -> np.ndarray:
    """
    Build an immutable 3-vector.

    Accepts either three scalars or a single 3-element sequence.

    Raises
    ------
    InvalidInputError
        If the input does not have 3 components or is not finite
    """
    if y is None and z is None:
        arr = np.array(x, dtype=np.float64)
    else:
        arr = np.array([x, y, z], dtype=np.float64)
    if arr.shape != (3,):
        raise InvalidInputError(f"Vector must have 3 components, got shape {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInputError(f"Vector contains NaN or Inf: {arr}")
    arr.flags.writeable = False
    return arr


def _frozen(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


def add(a, b) -> np.ndarray:
    return _frozen(np.add(a, b, dtype=np.float64))


def subtract(a, b) -> np.ndarray:
    return _frozen(np.subtract(a, b, dtype=np.float64))


def scale(v, s: float) -> np.ndarray:
    return _frozen(np.multiply(v, s, dtype=np.float64))


def dot(a, b) -> float:
    return float(np.dot(a, b))


def cross(a, b) -> np.ndarray:
    return _frozen(np.cross(a, b).astype(np.float64))


def magnitude(v) -> float:
    return float(np.linalg.norm(v))


def normalize(v) -> np.ndarray:
    """Unit vector along v. Raises InvalidInputError for the zero vector."""
    mag = magnitude(v)
    if mag == 0.0:
        raise InvalidInputError("Cannot normalize a zero-length vector")
    return scale(v, 1.0 / mag)
