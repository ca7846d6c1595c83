# gltfdata/transforms.py

import logging
import numbers
from typing import Dict, Optional, Sequence

import numpy as np

logger = logging.getLogger(__name__)


def identity() -> np.ndarray:
    return np.identity(4, dtype=np.float64)


def translation_matrix(t: Sequence[float]) -> np.ndarray:
    m = identity()
    m[0:3, 3] = t[0:3]
    return m


def scale_matrix(s: Sequence[float]) -> np.ndarray:
    return np.diag([s[0], s[1], s[2], 1.0])


def rotation_matrix(q: Sequence[float]) -> np.ndarray:
    """Rotation matrix of a unit quaternion given as (x, y, z, w)"""
    x, y, z, w = q[0:4]
    m = identity()
    m[0:3, 0:3] = [
        [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
        [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
        [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
    ]
    return m


def from_column_major(values: Sequence[float]) -> np.ndarray:
    """4x4 matrix from 16 values in glTF (column-major) order"""
    return np.array(values, dtype=np.float64).reshape((4, 4), order='F')


def _valid_numbers(value, count: int) -> bool:
    return (isinstance(value, (list, tuple)) and len(value) == count
            and all(isinstance(v, numbers.Real) and not isinstance(v, bool)
                    for v in value))


def local_transform(node: Dict) -> np.ndarray:
    """Local transform of a node.

    An explicit matrix takes precedence. Otherwise the matrix is composed
    as T * R * S, so that points are scaled, then rotated, then translated.
    A malformed property is logged and replaced by the identity.
    """
    matrix = node.get('matrix')
    if matrix is not None:
        if _valid_numbers(matrix, 16):
            return from_column_major(matrix)
        logger.warning(f"Ignoring node matrix {matrix!r}: expected 16 numbers")
    result = identity()
    for name, count, create in (('translation', 3, translation_matrix),
                                ('rotation', 4, rotation_matrix),
                                ('scale', 3, scale_matrix)):
        value = node.get(name)
        if value is None:
            continue
        if not _valid_numbers(value, count):
            logger.warning(f"Ignoring node {name} {value!r}: expected {count} numbers")
            continue
        result = result @ create(value)
    return result


def transform_points(matrix: Optional[np.ndarray], points: np.ndarray) -> np.ndarray:
    """Apply a 4x4 transform to an (n, 3) array of points"""
    points = np.asarray(points, dtype=np.float64)
    if matrix is None:
        return points
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    transformed = homogeneous @ matrix.T
    return transformed[:, 0:3]
