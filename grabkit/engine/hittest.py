from __future__ import annotations
import logging
import math
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Tuple
from ..config import Config
from ..core.handles import HANDLE_ANCHORS, LOCK_ANCHOR, NodeRef
from ..core.item import SceneItem
from ..core.matrix import DegenerateTransformError, Matrix
from ..core.scene import Scene
from .camera import Camera

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
Hit = Tuple[NodeRef, Point]


class HitTester(ABC):
    @abstractmethod
    def query(self, screen_point: Point) -> List[Hit]:
        """
        Returns the nodes under the screen point, nearest first, each with
        the point in the normalized frame of its item.
        """
        pass


class SceneHitTester(HitTester):
    """
    Geometric hit testing of the items of a scene.

    Items are flat quads spanning [-aspect, aspect] x [-1, 1] in object
    space. Normalized coordinates divide x by the aspect ratio, so the
    body is the unit square in that frame. Later items lie in front.
    """

    def __init__(
        self,
        scene: Scene,
        camera: Camera,
        view: str = "geometry",
        config: Optional[Config] = None,
        modelview_fn: Optional[Callable[[], Optional[Matrix]]] = None,
    ):
        self.scene = scene
        self.camera = camera
        self.view = view
        self.config = config or Config()
        self.modelview_fn = modelview_fn

    def query(self, screen_point: Point) -> List[Hit]:
        modelview = self.modelview_fn() if self.modelview_fn else None
        point = self.camera.unproject(screen_point, modelview)
        hits: List[Hit] = []
        for item in reversed(self.scene.items):
            if not item.active:
                continue
            try:
                hits.extend(self._query_item(item, point))
            except DegenerateTransformError:
                logger.debug(f"Skipping degenerate item {item!r}")
        return hits

    def _query_item(self, item: SceneItem, point: Point) -> List[Hit]:
        matrix = item.transform.matrix()
        ar = item.aspect_ratio
        lx, ly = matrix.invert().transform_point(point)
        local = (lx / ar, ly)
        hits: List[Hit] = []

        def near(anchor: Point) -> bool:
            ax, ay = matrix.transform_point((anchor[0] * ar, anchor[1]))
            return math.hypot(point[0] - ax, point[1] - ay) \
                < self.config.handle_radius

        if item is self.scene.current:
            for handle in item.handles_for(self.view).visible_handles():
                for anchor in HANDLE_ANCHORS[handle.kind]:
                    if near(anchor):
                        hits.append((handle.ref, anchor))
                        break

        if near(LOCK_ANCHOR):
            hits.append((item.lock_node(), LOCK_ANCHOR))

        if abs(local[0]) <= 1.0 and abs(local[1]) <= 1.0:
            hits.append((item.surface, local))
        return hits
