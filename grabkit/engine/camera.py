from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from typing import Optional, Tuple
from ..config import Config
from ..core.matrix import Matrix

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class Camera(ABC):
    """Converts between screen pixels and scene coordinates."""

    @abstractmethod
    def project(
        self,
        scene_point: Point,
        modelview: Optional[Matrix] = None,
        to_framebuffer: bool = True,
    ) -> Point:
        pass

    @abstractmethod
    def unproject(
        self, screen_point: Point, modelview: Optional[Matrix] = None
    ) -> Point:
        pass


class OrthoCamera(Camera):
    """
    Orthographic camera looking at a scene of half-extent `scene_unit`.

    Screen coordinates have their origin at the top left corner with y
    growing downwards; scene coordinates have y growing upwards. The
    projection is compensated by the window aspect ratio so that scene
    units are square on screen.

    The camera also carries the zoom and pan of the scene root; the
    resulting matrix is what callers pass as `modelview`.
    """

    def __init__(
        self,
        width: float,
        height: float,
        dpi_scale: float = 1.0,
        config: Optional[Config] = None,
    ):
        self.config = config or Config()
        self.scene_unit: float = float(self.config.scene_unit)
        self.dpi_scale: float = dpi_scale
        self.zoom: float = 1.0
        self.pan: Point = (0.0, 0.0)
        self.set_size(width, height)

    def set_size(self, width: float, height: float):
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid viewport size {width}x{height}")
        self.width = float(width)
        self.height = float(height)

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height

    def projection(self) -> Matrix:
        """ortho(-u, u, -u, u) @ scale(1, aspect), from scene to NDC."""
        u = self.scene_unit
        ortho = Matrix.scale(1.0 / u, 1.0 / u)
        return ortho @ Matrix.scale(1.0, self.aspect_ratio)

    def modelview(self) -> Matrix:
        """Transform of the scene root: zoom, then pan."""
        return Matrix.translation(*self.pan) @ Matrix.scale(
            self.zoom, self.zoom
        )

    def project(
        self,
        scene_point: Point,
        modelview: Optional[Matrix] = None,
        to_framebuffer: bool = True,
    ) -> Point:
        vp_w, vp_h = self.width, self.height
        if not to_framebuffer:
            vp_w, vp_h = vp_w / self.dpi_scale, vp_h / self.dpi_scale
        m = self.projection()
        if modelview is not None:
            m = m @ modelview
        nx, ny = m.transform_point(scene_point)
        wx = (nx + 1.0) / 2.0 * vp_w
        wy = (ny + 1.0) / 2.0 * vp_h
        return wx, vp_h - wy

    def unproject(
        self, screen_point: Point, modelview: Optional[Matrix] = None
    ) -> Point:
        nx = screen_point[0] / self.width * 2.0 - 1.0
        ny = (self.height - screen_point[1]) / self.height * 2.0 - 1.0
        m = self.projection()
        if modelview is not None:
            m = m @ modelview
        return m.invert().transform_point((nx, ny))

    def set_zoom_percent(self, percent: float):
        """
        Maps a 0..100 slider value quadratically onto the configured zoom
        range, then keeps the pan within 1.5 times the zoom.
        """
        lo, hi = self.config.zoom_min, self.config.zoom_max
        z = max(0.0, min(1.0, 0.01 * percent))
        self.zoom = z * z * (hi - lo) + lo
        border = self.zoom * 1.5
        self.pan = (
            max(-border, min(border, self.pan[0])),
            max(-border, min(border, self.pan[1])),
        )
        logger.debug(f"Zoom set to {self.zoom:.3f} ({percent}%)")

    def zoom_percent(self) -> int:
        lo, hi = self.config.zoom_min, self.config.zoom_max
        z = (self.zoom - lo) / (hi - lo)
        return int(math.sqrt(max(0.0, z)) * 100.0)
