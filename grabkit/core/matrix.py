import math
from typing import Tuple, Any, Optional
import numpy as np


class DegenerateTransformError(ValueError):
    """Raised when a singular matrix (e.g. a zero scale) is inverted."""

    pass


# Determinant magnitude below which a matrix is treated as singular.
SINGULAR_EPSILON = 1e-12


class Matrix:
    """
    A 3x3 affine transformation matrix for 2D scene geometry.

    Points are column vectors, so `(A @ B).transform_point(p)` applies B
    first and A second. Angles are in radians throughout, matching the
    `rotation_z` field of a TransformState.
    """

    def __init__(self, data: Any = None):
        """
        Args:
            data: Another Matrix, a 3x3 nested sequence or numpy array, or
                  None for the identity.
        """
        if data is None:
            self.m: np.ndarray = np.identity(3, dtype=float)
        elif isinstance(data, Matrix):
            self.m = data.m.copy()
        else:
            try:
                self.m = np.array(data, dtype=float)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Could not create Matrix from data: {e}")
            if self.m.shape != (3, 3):
                raise ValueError("Input data must be a 3x3 matrix.")

    def __matmul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return Matrix(self.m @ other.m)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return False
        return np.allclose(self.m, other.m)

    def __repr__(self) -> str:
        return f"Matrix({self.m.tolist()})"

    def __str__(self) -> str:
        return str(self.m)

    def __copy__(self) -> "Matrix":
        return Matrix(self)

    def __deepcopy__(self, memo: dict) -> "Matrix":
        return Matrix(self)

    def copy(self) -> "Matrix":
        return Matrix(self)

    @staticmethod
    def identity() -> "Matrix":
        return Matrix()

    def is_identity(self) -> bool:
        return np.allclose(self.m, np.identity(3))

    @staticmethod
    def translation(tx: float, ty: float) -> "Matrix":
        return Matrix([[1, 0, tx], [0, 1, ty], [0, 0, 1]])

    @staticmethod
    def scale(
        sx: float, sy: float, center: Optional[Tuple[float, float]] = None
    ) -> "Matrix":
        """
        Creates a scaling matrix, optionally around a center point instead
        of the origin.
        """
        m = Matrix([[sx, 0, 0], [0, sy, 0], [0, 0, 1]])
        if center is None:
            return m
        cx, cy = center
        return Matrix.translation(cx, cy) @ m @ Matrix.translation(-cx, -cy)

    @staticmethod
    def rotation(
        angle_rad: float, center: Optional[Tuple[float, float]] = None
    ) -> "Matrix":
        """
        Creates a counter-clockwise rotation matrix, optionally around a
        center point instead of the origin.
        """
        c = math.cos(angle_rad)
        s = math.sin(angle_rad)
        m = Matrix([[c, -s, 0], [s, c, 0], [0, 0, 1]])
        if center is None:
            return m
        cx, cy = center
        return Matrix.translation(cx, cy) @ m @ Matrix.translation(-cx, -cy)

    @staticmethod
    def compose(
        translation: Tuple[float, float],
        rotation: float,
        scale: Tuple[float, float],
    ) -> "Matrix":
        """
        Builds T @ R @ S: scale first, then rotate, then translate. This is
        the matrix of an object placed by a TransformState.
        """
        return (
            Matrix.translation(translation[0], translation[1])
            @ Matrix.rotation(rotation)
            @ Matrix.scale(scale[0], scale[1])
        )

    def determinant(self) -> float:
        return float(np.linalg.det(self.m))

    def invert(self) -> "Matrix":
        """
        Returns the inverse matrix.

        Raises:
            DegenerateTransformError: if the matrix is singular, for
                example when one of its scale factors is zero.
        """
        if abs(self.determinant()) < SINGULAR_EPSILON:
            raise DegenerateTransformError(
                f"Cannot invert singular matrix {self!r}"
            )
        return Matrix(np.linalg.inv(self.m))

    def get_translation(self) -> Tuple[float, float]:
        return float(self.m[0, 2]), float(self.m[1, 2])

    def get_scale(self) -> Tuple[float, float]:
        """
        Returns the signed scale factors. A reflection is reported on the
        y axis, as a negative sy.
        """
        sx = math.hypot(self.m[0, 0], self.m[1, 0])
        sy = math.hypot(self.m[0, 1], self.m[1, 1])
        if self.is_flipped():
            sy = -sy
        return sx, sy

    def get_rotation(self) -> float:
        """Angle of the transformed x axis, in radians."""
        return math.atan2(self.m[1, 0], self.m[0, 0])

    def is_flipped(self) -> bool:
        return self.determinant() < 0

    def transform_point(
        self, point: Tuple[float, float]
    ) -> Tuple[float, float]:
        x, y, _w = self.m @ np.array([point[0], point[1], 1.0])
        return float(x), float(y)

    def transform_vector(
        self, vector: Tuple[float, float]
    ) -> Tuple[float, float]:
        """Applies the linear part only, ignoring translation."""
        x, y, _w = self.m @ np.array([vector[0], vector[1], 0.0])
        return float(x), float(y)
