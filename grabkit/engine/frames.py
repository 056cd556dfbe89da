"""
Conversions between the reference frames used while dragging.

- screen: window pixels, y down.
- scene: the camera's world space, optionally relative to the scene root.
- object: the local space of an item, before its TransformState.
- corner: object space shifted and rescaled so that the corner opposite
  the picked one sits at the origin with unit pitch; a resize becomes a
  plain scale about the origin there.
"""
import math
from typing import Optional, Tuple
import numpy as np
from ..core.matrix import Matrix
from .camera import Camera

Point = Tuple[float, float]


def unproject(
    camera: Camera, screen_point: Point, modelview: Optional[Matrix] = None
) -> Point:
    return camera.unproject(screen_point, modelview)


def to_corner_frame(
    object_matrix: Matrix, corner: Point, aspect_ratio: float
) -> Matrix:
    """
    Scene-to-corner matrix: translate(corner) @ scale(1/aspect, 1) @
    inverse(object_matrix).
    """
    t = Matrix.translation(corner[0], corner[1]) @ Matrix.scale(
        1.0 / aspect_ratio, 1.0
    )
    return t @ object_matrix.invert()


def to_object_frame(object_matrix: Matrix, point: Point) -> Point:
    return object_matrix.invert().transform_point(point)


def to_center_frame(translation, point: Point) -> Point:
    """Relative to the object center, ignoring its rotation and scale."""
    return point[0] - translation[0], point[1] - translation[1]


def component_ratio(to: Point, origin: Point) -> Tuple[float, float]:
    """
    Per-axis ratio to/origin. An axis on which the origin lies gives a
    non-finite ratio and is left unscaled (1.0).
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.array(to[:2], dtype=float) / np.array(
            origin[:2], dtype=float
        )
    ratio[~np.isfinite(ratio)] = 1.0
    return float(ratio[0]), float(ratio[1])


def norm_ratio(to: Point, origin: Point) -> float:
    d = math.hypot(origin[0], origin[1])
    if d == 0.0:
        return 1.0
    return math.hypot(to[0], to[1]) / d


def oriented_angle(a: Point, b: Point) -> float:
    """Signed angle in radians turning direction a onto direction b."""
    cross = a[0] * b[1] - a[1] * b[0]
    dot = a[0] * b[0] + a[1] * b[1]
    return math.atan2(cross, dot)
