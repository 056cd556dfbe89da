from __future__ import annotations
import math
from typing import Any, Dict, Tuple
from .matrix import Matrix

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]

CROP_MIN = 0.1
CROP_MAX = 1.0
MIN_SCALE = 0.01


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _away_from_zero(value: float, minimum: float) -> float:
    if abs(value) >= minimum:
        return value
    return -minimum if value < 0 else minimum


class TransformState:
    """
    Placement of an object in scene space: translation, rotation about the
    z axis, non-uniform scale and the crop fraction of its content.

    The setters enforce the invariants, so they hold after every mutation:
    crop stays within [crop_min, crop_max] and no scale component is ever
    closer to zero than min_scale (sign is kept, mirroring stays possible).
    Rotation is not wrapped.
    """

    def __init__(
        self,
        translation: Vec3 = (0.0, 0.0, 0.0),
        rotation_z: float = 0.0,
        scale: Vec3 = (1.0, 1.0, 1.0),
        crop: Vec2 = (1.0, 1.0),
        crop_min: float = CROP_MIN,
        crop_max: float = CROP_MAX,
        min_scale: float = MIN_SCALE,
    ):
        self.crop_min = crop_min
        self.crop_max = crop_max
        self.min_scale = min_scale
        self.translation = translation
        self.rotation_z = rotation_z
        self.scale = scale
        self.crop = crop

    @property
    def translation(self) -> Vec3:
        return self._translation

    @translation.setter
    def translation(self, value):
        x, y, *rest = value
        z = rest[0] if rest else 0.0
        self._translation = (float(x), float(y), float(z))

    @property
    def rotation_z(self) -> float:
        return self._rotation_z

    @rotation_z.setter
    def rotation_z(self, value: float):
        self._rotation_z = float(value)

    @property
    def scale(self) -> Vec3:
        return self._scale

    @scale.setter
    def scale(self, value):
        x, y, *rest = value
        z = rest[0] if rest else 1.0
        self._scale = (
            _away_from_zero(float(x), self.min_scale),
            _away_from_zero(float(y), self.min_scale),
            float(z),
        )

    @property
    def crop(self) -> Vec2:
        return self._crop

    @crop.setter
    def crop(self, value):
        x, y = value[0], value[1]
        self._crop = (
            clamp(float(x), self.crop_min, self.crop_max),
            clamp(float(y), self.crop_min, self.crop_max),
        )

    def copy(self) -> "TransformState":
        return TransformState(
            self._translation,
            self._rotation_z,
            self._scale,
            self._crop,
            crop_min=self.crop_min,
            crop_max=self.crop_max,
            min_scale=self.min_scale,
        )

    def assign(self, other: "TransformState"):
        """Copies the fields of another state into this one, in place."""
        self.translation = other.translation
        self.rotation_z = other.rotation_z
        self.scale = other.scale
        self.crop = other.crop

    def reset(self):
        self.translation = (0.0, 0.0, 0.0)
        self.rotation_z = 0.0
        self.scale = (1.0, 1.0, 1.0)
        self.crop = (1.0, 1.0)

    def matrix(self) -> Matrix:
        """The object-to-scene matrix, T @ R @ S. Crop is not part of it."""
        return Matrix.compose(
            self._translation[:2], self._rotation_z, self._scale[:2]
        )

    def isclose(self, other: "TransformState", abs_tol: float = 1e-9) -> bool:
        pairs = zip(
            self._translation + self._scale + self._crop
            + (self._rotation_z,),
            other._translation + other._scale + other._crop
            + (other._rotation_z,),
        )
        return all(math.isclose(a, b, abs_tol=abs_tol) for a, b in pairs)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, TransformState):
            return False
        return self.isclose(other)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "translation": list(self._translation),
            "rotation_z": self._rotation_z,
            "scale": list(self._scale),
            "crop": list(self._crop),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **limits) -> "TransformState":
        return cls(
            translation=tuple(data.get("translation", (0.0, 0.0, 0.0))),
            rotation_z=data.get("rotation_z", 0.0),
            scale=tuple(data.get("scale", (1.0, 1.0, 1.0))),
            crop=tuple(data.get("crop", (1.0, 1.0))),
            **limits,
        )

    def __repr__(self) -> str:
        return (
            f"TransformState(translation={self._translation}, "
            f"rotation_z={self._rotation_z}, scale={self._scale}, "
            f"crop={self._crop})"
        )
