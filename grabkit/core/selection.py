from __future__ import annotations
from collections.abc import Iterable
from typing import Iterator, List, Optional
from blinker import Signal
from .item import SceneItem


class Selection:
    """An ordered set of selected items."""

    def __init__(self):
        self._items: List[SceneItem] = []
        self.changed = Signal()

    def add(self, items):
        added = False
        for item in _as_list(items):
            if item not in self._items:
                self._items.append(item)
                added = True
        if added:
            self.changed.send(self)

    def remove(self, items):
        removed = False
        for item in _as_list(items):
            if item in self._items:
                self._items.remove(item)
                removed = True
        if removed:
            self.changed.send(self)

    def set(self, items):
        new_items = []
        for item in _as_list(items):
            if item not in new_items:
                new_items.append(item)
        if new_items == self._items:
            return
        self._items = new_items
        self.changed.send(self)

    def toggle(self, item: SceneItem):
        if item in self._items:
            self.remove(item)
        else:
            self.add(item)

    def clear(self):
        if not self._items:
            return
        self._items.clear()
        self.changed.send(self)

    def pop_front(self):
        if self._items:
            self._items.pop(0)
            self.changed.send(self)

    def front(self) -> Optional[SceneItem]:
        return self._items[0] if self._items else None

    def back(self) -> Optional[SceneItem]:
        return self._items[-1] if self._items else None

    def contains(self, item: SceneItem) -> bool:
        return item in self._items

    def empty(self) -> bool:
        return not self._items

    def size(self) -> int:
        return len(self._items)

    def __contains__(self, item) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[SceneItem]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


def _as_list(items) -> List[SceneItem]:
    if isinstance(items, SceneItem):
        return [items]
    if isinstance(items, Iterable):
        return list(items)
    raise TypeError(f"Expected a SceneItem or an iterable, got {items!r}")
