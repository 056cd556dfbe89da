from __future__ import annotations
import logging
from typing import Optional, Tuple
from blinker import Signal
from ..config import Config
from ..core.item import SceneItem
from ..core.matrix import DegenerateTransformError, Matrix
from ..core.scene import Scene
from .actions import MENU_ACTIONS, fit, labels
from .camera import Camera
from .cursor import Cursor, GrabResult
from .hittest import HitTester, SceneHitTester
from .modifiers import NO_MODIFIERS, Modifiers, snap
from .outcome import Outcome
from .picking import PickResult, pick
from .session import ManipulationSession, begin, restore_all_handles

logger = logging.getLogger(__name__)

Point = Tuple[float, float]


class GeometryView:
    """
    Drives manipulation sessions from pointer and keyboard events.

    At most one session is active. Pressing starts a new one, ending the
    previous one first; releasing ends it and restores the handles of
    every item.
    """

    def __init__(
        self,
        scene: Scene,
        camera: Camera,
        hit_tester: Optional[HitTester] = None,
        config: Optional[Config] = None,
        name: str = "geometry",
        output_aspect: Optional[float] = None,
    ):
        self.scene = scene
        self.camera = camera
        self.config = config or Config()
        self.name = name
        self.output_aspect = output_aspect
        self.hit_tester = hit_tester or SceneHitTester(
            scene, camera, name, self.config, self.modelview
        )
        self.session: Optional[ManipulationSession] = None

        self.context_menu_requested = Signal()
        self.action_performed = Signal()

    def modelview(self) -> Optional[Matrix]:
        modelview = getattr(self.camera, "modelview", None)
        return modelview() if modelview else None

    def press(
        self, screen_point: Point, modifiers: Modifiers = NO_MODIFIERS
    ) -> PickResult:
        self._finish_session()
        hits = self.hit_tester.query(screen_point)
        result = pick(hits, self.scene, modifiers, self._on_context_menu)
        if not result:
            logger.debug(f"Nothing to grab at {screen_point}: "
                         f"{result.outcome.name}")
            return result

        self.scene.set_current(result.item)
        self.session = begin(
            result,
            screen_point,
            self.camera,
            self.name,
            len(self.scene.selection),
            self.config,
            self.modelview(),
        )
        return result

    def move(
        self, screen_point: Point, modifiers: Modifiers = NO_MODIFIERS
    ) -> GrabResult:
        if self.session is None:
            return GrabResult.neutral(Outcome.NO_TARGET)
        return self.session.update(screen_point, modifiers)

    def release(self) -> Optional[str]:
        action = self._finish_session()
        restore_all_handles(self.scene, self.name)
        return action

    def arrow(
        self, movement: Point, modifiers: Modifiers = NO_MODIFIERS
    ) -> GrabResult:
        """
        Nudges the current item. `movement` is in screen direction, y
        down; with discretize each unit is one translation step.
        """
        if self._drag_in_progress():
            return GrabResult.neutral(Outcome.SESSION_ACTIVE)
        item = self.scene.current
        if item is None:
            return GrabResult.neutral(Outcome.NO_TARGET)
        if item.locked and not modifiers.override:
            return GrabResult.neutral(Outcome.LOCKED_TARGET)

        factor = self.config.arrows_movement_factor
        tx, ty, tz = item.transform.translation
        if modifiers.discretize:
            step = self.config.translation_step
            x = snap(tx + movement[0] * factor, step)
            y = snap(ty - movement[1] * factor, step)
        else:
            try:
                modelview = self.modelview()
                ox, oy = self.camera.unproject((0.0, 0.0), modelview)
                mx, my = self.camera.unproject(movement, modelview)
            except DegenerateTransformError as e:
                logger.warning(f"Cannot nudge '{item.name}': {e}")
                return GrabResult.neutral(Outcome.DEGENERATE_TRANSFORM)
            x = tx + (mx - ox) * factor
            y = ty + (my - oy) * factor

        item.transform.translation = (x, y, tz)
        item.touch()
        info = _("Position {x:.3f}, {y:.3f}").format(x=x, y=y)
        self._notify(item, info)
        return GrabResult(Cursor.RESIZE_ALL, info, Outcome.OK)

    def apply_menu_action(self, name: str) -> Optional[str]:
        """Applies one of the context menu actions to the current item."""
        if self._drag_in_progress():
            return None
        item = self.scene.current
        if item is None:
            return None
        action = MENU_ACTIONS.get(name)
        if action is None:
            raise ValueError(f"Unknown menu action '{name}'")

        if action is fit:
            new_state = fit(
                item.transform, item.aspect_ratio, self.output_aspect
            )
        else:
            new_state = action(item.transform, item.aspect_ratio)
        item.transform.assign(new_state)
        item.touch()
        return self._notify(item, labels()[name])

    def _drag_in_progress(self) -> bool:
        # The live transform belongs to the session until it ends.
        return self.session is not None and self.session.active

    def _notify(self, item: SceneItem, info: str) -> str:
        action = f"{item.name}: {info}"
        logger.info(action)
        self.action_performed.send(self, item=item, action=action)
        return action

    def _finish_session(self) -> Optional[str]:
        if self.session is None:
            return None
        session, self.session = self.session, None
        action = session.end()
        if action is not None:
            self.action_performed.send(
                self, item=session.item, action=action
            )
        return action

    def _on_context_menu(self, item: SceneItem):
        self.context_menu_requested.send(self, item=item)
