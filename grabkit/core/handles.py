from __future__ import annotations
from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterator, Optional, Set, Tuple


class HandleKind(Enum):
    """The seven manipulation handles an object carries in every view."""

    RESIZE = auto()
    RESIZE_H = auto()
    RESIZE_V = auto()
    SCALE = auto()
    CROP = auto()
    ROTATE = auto()
    MENU = auto()


RESIZE_HANDLES: Set[HandleKind] = {
    HandleKind.RESIZE,
    HandleKind.RESIZE_H,
    HandleKind.RESIZE_V,
}

NEUTRAL_CORNER: Tuple[float, float] = (0.0, 0.0)


class NodeRole(Enum):
    """What a pickable node is, from the point of view of picking."""

    SURFACE = auto()
    LOCKER = auto()
    LOCK = auto()
    UNLOCK = auto()
    HANDLE = auto()


@dataclass(frozen=True)
class NodeRef:
    """
    Stable identifier of a pickable node. Two references to the same node
    compare equal, whichever object produced them.
    """

    owner: str
    role: NodeRole
    view: Optional[str] = None
    handle: Optional[HandleKind] = None

    @property
    def is_handle(self) -> bool:
        return self.role is NodeRole.HANDLE


# Where each handle sits in the normalized object square, with x already
# divided by the aspect ratio. Resize handles are present on every corner
# or edge midpoint; the others sit just outside the square.
HANDLE_ANCHORS: Dict[HandleKind, Tuple[Tuple[float, float], ...]] = {
    HandleKind.RESIZE: ((1, 1), (-1, 1), (1, -1), (-1, -1)),
    HandleKind.RESIZE_H: ((1, 0), (-1, 0)),
    HandleKind.RESIZE_V: ((0, 1), (0, -1)),
    HandleKind.ROTATE: ((1.2, 1.2),),
    HandleKind.SCALE: ((1.2, -1.2),),
    HandleKind.CROP: ((-1.2, -1.2),),
    HandleKind.MENU: ((-1.2, 1.2),),
}

LOCK_ANCHOR: Tuple[float, float] = (0.0, 1.25)


class Handle:
    def __init__(self, owner: str, view: str, kind: HandleKind):
        self.owner = owner
        self.view = view
        self.kind = kind
        self.visible: bool = True
        # Only meaningful for the resize kinds, used by overlays to mark
        # the anchored corner during a drag.
        self.active_corner: Tuple[float, float] = NEUTRAL_CORNER
        self.ref = NodeRef(owner, NodeRole.HANDLE, view, kind)

    def overlay_active_corner(self, corner: Tuple[float, float]):
        if self.kind in RESIZE_HANDLES:
            self.active_corner = (float(corner[0]), float(corner[1]))

    def restore(self):
        self.visible = True
        self.active_corner = NEUTRAL_CORNER

    def __repr__(self) -> str:
        return (
            f"Handle({self.kind.name}, view={self.view!r}, "
            f"visible={self.visible})"
        )


class HandleSet:
    """The handles of one object in one view."""

    def __init__(self, owner: str, view: str):
        self.owner = owner
        self.view = view
        self._handles: Dict[HandleKind, Handle] = {
            kind: Handle(owner, view, kind) for kind in HandleKind
        }

    def __getitem__(self, kind: HandleKind) -> Handle:
        return self._handles[kind]

    def __iter__(self) -> Iterator[Handle]:
        return iter(self._handles.values())

    def __len__(self) -> int:
        return len(self._handles)

    def find(self, node: Optional[NodeRef]) -> Optional[Handle]:
        """Returns the handle the node refers to, if it is one of ours."""
        if node is None or not node.is_handle:
            return None
        if node.owner != self.owner or node.view != self.view:
            return None
        return self._handles.get(node.handle)  # type: ignore[arg-type]

    def hide_all_but(self, kind: HandleKind):
        for handle in self._handles.values():
            handle.visible = handle.kind is kind

    def restore(self):
        for handle in self._handles.values():
            handle.restore()

    def visible_handles(self) -> Iterator[Handle]:
        return (h for h in self._handles.values() if h.visible)
