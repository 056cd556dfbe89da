from __future__ import annotations
import logging
from typing import List, Optional
from blinker import Signal
from .handles import NodeRef
from .item import ItemMode, SceneItem
from .selection import Selection

logger = logging.getLogger(__name__)


class Scene:
    """
    The items being manipulated, in back-to-front order, together with the
    current item, the selection and the active workspace.
    """

    def __init__(self, current_workspace: str = "background"):
        self._items: List[SceneItem] = []
        self._current: Optional[SceneItem] = None
        self.current_workspace: str = current_workspace
        self.selection = Selection()
        self.current_changed = Signal()

    @property
    def items(self) -> List[SceneItem]:
        return list(self._items)

    def add(self, item: SceneItem) -> SceneItem:
        if item not in self._items:
            self._items.append(item)
        return item

    def remove(self, item: SceneItem):
        if item not in self._items:
            return
        self._items.remove(item)
        self.selection.remove(item)
        if self._current is item:
            self.set_current(None)

    def find_owner(self, node: Optional[NodeRef]) -> Optional[SceneItem]:
        if node is None:
            return None
        for item in self._items:
            if item.owns(node):
                return item
        return None

    def items_in_workspace(self, workspace: str) -> List[SceneItem]:
        return [i for i in self._items if i.workspace == workspace]

    @property
    def current(self) -> Optional[SceneItem]:
        return self._current

    def set_current(self, item: Optional[SceneItem]):
        if item is self._current:
            return
        if self._current is not None:
            self._current.mode = ItemMode.NORMAL
        self._current = item
        if item is not None:
            item.mode = ItemMode.CURRENT
        logger.debug(f"Current item is now {item!r}")
        self.current_changed.send(self, item=item)

    def can_select(self, item: Optional[SceneItem]) -> bool:
        return (
            item is not None
            and item.active
            and item.workspace == self.current_workspace
        )
