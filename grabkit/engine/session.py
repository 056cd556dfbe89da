from __future__ import annotations
import logging
import math
from typing import Callable, Dict, Optional, Tuple
from ..config import Config
from ..core.handles import RESIZE_HANDLES, HandleKind
from ..core.item import ItemMode, SceneItem
from ..core.matrix import DegenerateTransformError, Matrix
from ..core.scene import Scene
from ..core.transform import TransformState
from . import frames
from .camera import Camera
from .cursor import Cursor, GrabResult
from .modifiers import NO_MODIFIERS, Modifiers, snap, snap_degrees
from .outcome import Outcome
from .picking import PickResult

logger = logging.getLogger(__name__)

Point = Tuple[float, float]
RuleResult = Tuple[TransformState, Cursor, str]


def _round_half_away(value: float) -> float:
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _sign(value: float) -> float:
    return math.copysign(1.0, value)


def _size_info(state: TransformState) -> str:
    return _("Size {x:.3f} x {y:.3f}").format(
        x=state.scale[0], y=state.scale[1]
    )


class ManipulationSession:
    """
    One drag of one item, from pointer press to release.

    Every update recomputes the item's transform from the snapshot taken
    when the session began and from the pointer position, never from the
    previous frame, so the result only depends on where the pointer is now.
    """

    def __init__(
        self,
        item: Optional[SceneItem],
        camera: Optional[Camera],
        origin_screen_point: Point,
        view: str,
        config: Optional[Config] = None,
        active_handle: Optional[HandleKind] = None,
        corner: Point = (0.0, 0.0),
        modelview: Optional[Matrix] = None,
        suppressed: bool = False,
        outcome: Outcome = Outcome.OK,
    ):
        self.item = item
        self.camera = camera
        self.origin_screen_point: Point = (
            float(origin_screen_point[0]),
            float(origin_screen_point[1]),
        )
        self.view = view
        self.config = config or Config()
        self.active_handle = active_handle
        self.corner = corner
        self.modelview = modelview
        self.suppressed = suppressed
        self.outcome = outcome
        self.ended = item is None
        self.mutated = False
        self.last_info = ""
        # Mode to give back to the item when a suppressed drag ends.
        self.restore_mode: Optional[ItemMode] = None
        self._snapshot: Optional[TransformState] = (
            item.transform.copy() if item is not None else None
        )

    @property
    def snapshot(self) -> Optional[TransformState]:
        """A copy of the transform the item had when the drag began."""
        return self._snapshot.copy() if self._snapshot else None

    @property
    def active(self) -> bool:
        return not self.ended and not self.suppressed

    @property
    def action(self) -> Optional[str]:
        if self.item is None or not self.mutated:
            return None
        return f"{self.item.name}: {self.last_info}"

    def update(
        self, screen_point: Point, modifiers: Modifiers = NO_MODIFIERS
    ) -> GrabResult:
        if not self.active:
            return GrabResult.neutral(self.outcome)
        assert self.item is not None and self._snapshot is not None
        assert self.camera is not None

        try:
            scene_from = self.camera.unproject(
                self.origin_screen_point, self.modelview
            )
            scene_to = self.camera.unproject(screen_point, self.modelview)
            rule = self._RULES.get(
                self.active_handle, ManipulationSession._translate
            )
            state, cursor, info = rule(
                self, self._snapshot.copy(), scene_from, scene_to, modifiers
            )
        except DegenerateTransformError as e:
            logger.warning(
                f"Cannot manipulate '{self.item.name}', its transform "
                f"is degenerate: {e}"
            )
            return GrabResult.neutral(Outcome.DEGENERATE_TRANSFORM)

        self.item.transform.assign(state)
        self.item.touch()
        self.mutated = True
        self.last_info = info
        logger.debug(f"{self.item.name}: {info}")
        return GrabResult(cursor, info, Outcome.OK)

    def end(self) -> Optional[str]:
        """
        Finishes the drag and brings all handles of the item back.
        Returns the description of the last change, if any. Safe to call
        more than once.
        """
        if self.ended:
            return None
        self.ended = True
        if self.item is not None:
            self.item.restore_handles(self.view)
            if self.restore_mode is not None:
                self.item.mode = self.restore_mode
            logger.info(f"Ended manipulation of '{self.item.name}'")
        return self.action

    # -- corner frame helpers ---------------------------------------------

    def _corner_frame(
        self, snapshot: TransformState, scene_from: Point, scene_to: Point
    ):
        assert self.item is not None
        to_corner = frames.to_corner_frame(
            snapshot.matrix(), self.corner, self.item.aspect_ratio
        )
        corner_from = to_corner.transform_point(scene_from)
        corner_to = to_corner.transform_point(scene_to)
        center = to_corner.transform_point(snapshot.translation[:2])
        return to_corner, corner_from, corner_to, center

    @staticmethod
    def _apply_corner_scaling(
        state: TransformState,
        snapshot: TransformState,
        to_corner: Matrix,
        center: Point,
        factors: Point,
    ):
        """
        Scales the snapshot by `factors` and moves the center so that the
        origin of the corner frame, the opposite corner, stays in place.
        """
        s0 = snapshot.scale
        state.scale = (s0[0] * factors[0], s0[1] * factors[1], s0[2])
        # The scale setter may have pushed a component away from zero.
        kx = state.scale[0] / s0[0]
        ky = state.scale[1] / s0[1]
        cx, cy = to_corner.invert().transform_point(
            (center[0] * kx, center[1] * ky)
        )
        state.translation = (cx, cy, snapshot.translation[2])

    # -- handle rules -----------------------------------------------------

    def _resize(self, state, scene_from, scene_to, modifiers) -> RuleResult:
        snapshot = self._snapshot
        to_corner, c_from, c_to, center = self._corner_frame(
            snapshot, scene_from, scene_to
        )
        kx, ky = frames.component_ratio(c_to, c_from)
        if modifiers.proportional:
            kx = ky = frames.norm_ratio(c_to, c_from)
        if modifiers.discretize:
            sx = snap(snapshot.scale[0] * kx, self.config.scale_step)
            new_kx = sx / snapshot.scale[0]
            ky = ky * new_kx / kx if kx else ky
            kx = new_kx
        self._apply_corner_scaling(
            state, snapshot, to_corner, center, (kx, ky)
        )

        # Diagonal of the picked corner as it appears on screen.
        vx, vy = Matrix.compose(
            (0.0, 0.0), snapshot.rotation_z, snapshot.scale[:2]
        ).transform_vector(self.corner)
        cursor = Cursor.RESIZE_NESW if vx * vy > 0 else Cursor.RESIZE_NWSE
        return state, cursor, _size_info(state)

    def _resize_axis(
        self, state, scene_from, scene_to, modifiers, axis: int
    ) -> RuleResult:
        snapshot = self._snapshot
        s0 = snapshot.scale
        other = 1 - axis
        to_corner, c_from, c_to, center = self._corner_frame(
            snapshot, scene_from, scene_to
        )
        factors = [1.0, 1.0]
        if modifiers.proportional:
            # Restore the aspect ratio rather than scaling freely.
            target = abs(s0[other]) * _sign(s0[axis])
            factors[axis] = target / s0[axis]
        else:
            factors[axis] = frames.component_ratio(c_to, c_from)[axis]
            if modifiers.discretize:
                value = snap(s0[axis] * factors[axis], self.config.scale_step)
                factors[axis] = value / s0[axis]
        self._apply_corner_scaling(
            state, snapshot, to_corner, center, (factors[0], factors[1])
        )

        steep = abs(math.tan(state.rotation_z)) > 1.0
        if axis == 0:
            cursor = Cursor.RESIZE_NS if steep else Cursor.RESIZE_EW
        else:
            cursor = Cursor.RESIZE_EW if steep else Cursor.RESIZE_NS
        return state, cursor, _size_info(state)

    def _resize_h(self, state, scene_from, scene_to, modifiers):
        return self._resize_axis(state, scene_from, scene_to, modifiers, 0)

    def _resize_v(self, state, scene_from, scene_to, modifiers):
        return self._resize_axis(state, scene_from, scene_to, modifiers, 1)

    def _object_scaling(
        self, scene_from: Point, scene_to: Point, modifiers: Modifiers
    ) -> Point:
        to_object = self._snapshot.matrix().invert()
        o_from = to_object.transform_point(scene_from)
        o_to = to_object.transform_point(scene_to)
        if modifiers.proportional:
            f = frames.norm_ratio(o_to, o_from)
            return f, f
        return frames.component_ratio(o_to, o_from)

    def _scale(self, state, scene_from, scene_to, modifiers) -> RuleResult:
        s0 = self._snapshot.scale
        kx, ky = self._object_scaling(scene_from, scene_to, modifiers)
        sx, sy = s0[0] * kx, s0[1] * ky
        if modifiers.discretize:
            step = self.config.scale_step
            sx, sy = snap(sx, step), snap(sy, step)
        state.scale = (sx, sy, s0[2])

        flip = _sign(state.scale[0]) * _sign(state.scale[1])
        cursor = Cursor.RESIZE_NWSE if flip > 0 else Cursor.RESIZE_NESW
        return state, cursor, _size_info(state)

    def _crop(self, state, scene_from, scene_to, modifiers) -> RuleResult:
        snapshot = self._snapshot
        c0, s0 = snapshot.crop, snapshot.scale
        kx, ky = self._object_scaling(scene_from, scene_to, modifiers)
        cx, cy = c0[0] * kx, c0[1] * ky
        if modifiers.discretize:
            step = self.config.scale_step
            cx, cy = snap(cx, step), snap(cy, step)
        state.crop = (cx, cy)
        # The visible part keeps its on-screen size as the crop changes.
        state.scale = (
            s0[0] * state.crop[0] / c0[0],
            s0[1] * state.crop[1] / c0[1],
            s0[2],
        )

        flip = _sign(state.scale[0]) * _sign(state.scale[1])
        cursor = Cursor.RESIZE_NWSE if flip < 0 else Cursor.RESIZE_NESW
        info = _("Crop {x:.3f} x {y:.3f}").format(
            x=state.crop[0], y=state.crop[1]
        )
        return state, cursor, info

    def _rotate(self, state, scene_from, scene_to, modifiers) -> RuleResult:
        snapshot = self._snapshot
        c_from = frames.to_center_frame(snapshot.translation, scene_from)
        c_to = frames.to_center_frame(snapshot.translation, scene_to)
        angle = snapshot.rotation_z + frames.oriented_angle(c_from, c_to)

        if modifiers.discretize:
            angle = snap_degrees(angle, self.config.rotation_step_deg)
            info = _("Angle {deg}°").format(
                deg=int(round(math.degrees(angle)))
            )
        else:
            info = _("Angle {deg:.1f}°").format(deg=math.degrees(angle))
        state.rotation_z = angle

        # Without the proportional modifier, the radius scales as well.
        if not modifiers.proportional:
            f = frames.norm_ratio(c_to, c_from)
            s0 = snapshot.scale
            state.scale = (s0[0] * f, s0[1] * f, s0[2])
            info += "\n   " + _size_info(state)
        return state, Cursor.HAND, info

    def _translate(
        self, state, scene_from, scene_to, modifiers
    ) -> RuleResult:
        t0 = self._snapshot.translation
        x = t0[0] + scene_to[0] - scene_from[0]
        y = t0[1] + scene_to[1] - scene_from[1]
        cursor = Cursor.RESIZE_ALL
        if modifiers.discretize:
            step = self.config.translation_step
            x, y = snap(x, step), snap(y, step)
        if modifiers.proportional:
            if abs(x - t0[0]) > abs(y - t0[1]):
                y = t0[1]
                cursor = Cursor.RESIZE_EW
            else:
                x = t0[0]
                cursor = Cursor.RESIZE_NS
        state.translation = (x, y, t0[2])
        info = _("Position {x:.3f}, {y:.3f}").format(x=x, y=y)
        return state, cursor, info

    _RULES: Dict[Optional[HandleKind], Callable[..., RuleResult]] = {
        HandleKind.RESIZE: _resize,
        HandleKind.RESIZE_H: _resize_h,
        HandleKind.RESIZE_V: _resize_v,
        HandleKind.SCALE: _scale,
        HandleKind.CROP: _crop,
        HandleKind.ROTATE: _rotate,
    }


def begin(
    pick_result: PickResult,
    screen_point: Point,
    camera: Camera,
    view: str = "geometry",
    selection_size: int = 1,
    config: Optional[Config] = None,
    modelview: Optional[Matrix] = None,
) -> ManipulationSession:
    """
    Starts dragging the picked item from `screen_point`.

    An empty pick gives an ended session. With several items selected the
    session is suppressed: it exists but never changes anything.
    """
    item = pick_result.item
    if item is None or not pick_result:
        return ManipulationSession(
            None, camera, screen_point, view, config,
            outcome=pick_result.outcome
            if pick_result.outcome is not Outcome.OK
            else Outcome.NO_TARGET,
        )

    handle_set = item.handles_for(view)
    handle = handle_set.find(pick_result.node)
    kind = handle.kind if handle is not None else None
    local = pick_result.local_coordinate
    corner = (_round_half_away(local[0]), _round_half_away(local[1]))

    if selection_size > 1:
        logger.info(
            f"{selection_size} items selected, not manipulating "
            f"'{item.name}'"
        )
        session = ManipulationSession(
            item, camera, screen_point, view, config, kind, corner,
            modelview, suppressed=True,
            outcome=Outcome.MULTI_SELECTION_SUPPRESSED,
        )
        session.restore_mode = item.mode
        item.mode = ItemMode.SELECTED
        return session

    if handle is not None:
        handle_set.hide_all_but(handle.kind)
        if handle.kind in RESIZE_HANDLES:
            handle.overlay_active_corner((-corner[0], -corner[1]))

    logger.info(
        f"Began manipulating '{item.name}' with "
        f"{kind.name if kind else 'move'}"
    )
    return ManipulationSession(
        item, camera, screen_point, view, config, kind, corner, modelview
    )


def restore_all_handles(scene: Scene, view: str):
    for item in scene.items:
        item.restore_handles(view)
