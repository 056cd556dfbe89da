from __future__ import annotations
import logging
import uuid
from enum import Enum, auto
from typing import Dict, Optional
from blinker import Signal
from .handles import HandleSet, NodeRef, NodeRole
from .transform import TransformState

logger = logging.getLogger(__name__)


class ItemMode(Enum):
    NORMAL = auto()
    SELECTED = auto()
    CURRENT = auto()


class SceneItem:
    """
    An object that can be placed, rotated, scaled and cropped by direct
    manipulation.

    The item owns its transform and, for every view it appears in, one set
    of handles. Pickable parts of the item (its surface, the lock icons and
    the handles) are identified by NodeRef values.
    """

    def __init__(
        self,
        name: str = "",
        workspace: str = "background",
        aspect_ratio: float = 1.0,
        transform: Optional[TransformState] = None,
    ):
        if aspect_ratio <= 0:
            raise ValueError(
                f"Aspect ratio must be positive, got {aspect_ratio}"
            )
        self.uid: str = str(uuid.uuid4())
        self.name: str = name
        self.workspace: str = workspace
        self.aspect_ratio: float = aspect_ratio
        self.active: bool = True
        self.mode: ItemMode = ItemMode.NORMAL
        self._transform: TransformState = transform or TransformState()
        self._locked: bool = False
        self._handles: Dict[str, HandleSet] = {}

        self.surface = NodeRef(self.uid, NodeRole.SURFACE)
        self.locker = NodeRef(self.uid, NodeRole.LOCKER)
        self.lock_icon = NodeRef(self.uid, NodeRole.LOCK)
        self.unlock_icon = NodeRef(self.uid, NodeRole.UNLOCK)

        # Fired whenever a new transform is assigned.
        self.transform_changed = Signal()
        # Fired when the lock state flips.
        self.locked_changed = Signal()

    @property
    def transform(self) -> TransformState:
        return self._transform

    @transform.setter
    def transform(self, value: TransformState):
        self._transform = value
        self.transform_changed.send(self)

    def touch(self):
        """Notifies listeners after an in-place change of the transform."""
        self.transform_changed.send(self)

    @property
    def locked(self) -> bool:
        return self._locked

    def set_locked(self, locked: bool):
        if self._locked == locked:
            return
        self._locked = locked
        logger.info(f"{'Locked' if locked else 'Unlocked'} '{self.name}'")
        self.locked_changed.send(self, locked=locked)

    @property
    def handles(self) -> Dict[str, HandleSet]:
        return self._handles

    def handles_for(self, view: str) -> HandleSet:
        """Returns the handle set of a view, creating it on first use."""
        handle_set = self._handles.get(view)
        if handle_set is None:
            handle_set = HandleSet(self.uid, view)
            self._handles[view] = handle_set
        return handle_set

    def lock_node(self) -> NodeRef:
        """The lock icon node currently shown, depending on the state."""
        return self.lock_icon if self._locked else self.unlock_icon

    def owns(self, node: Optional[NodeRef]) -> bool:
        return node is not None and node.owner == self.uid

    def restore_handles(self, view: str):
        if view in self._handles:
            self._handles[view].restore()

    def __repr__(self) -> str:
        return f"SceneItem(name={self.name!r}, workspace={self.workspace!r})"
