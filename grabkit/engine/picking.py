from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
from ..core.handles import HandleKind, NodeRef, NodeRole
from ..core.item import SceneItem
from ..core.scene import Scene
from .modifiers import NO_MODIFIERS, Modifiers
from .outcome import Outcome

logger = logging.getLogger(__name__)

Hit = Tuple[NodeRef, Tuple[float, float]]
ContextMenuCallback = Callable[[SceneItem], None]


@dataclass(frozen=True)
class PickResult:
    """
    Outcome of resolving a pointer press. `node` is the picked handle, or
    the item's locker node when the item itself is to be dragged.
    """

    item: Optional[SceneItem] = None
    node: Optional[NodeRef] = None
    local_coordinate: Tuple[float, float] = (0.0, 0.0)
    outcome: Outcome = Outcome.NO_TARGET

    @classmethod
    def empty(cls, outcome: Outcome = Outcome.NO_TARGET) -> "PickResult":
        return cls(outcome=outcome)

    def __bool__(self) -> bool:
        return self.item is not None and self.node is not None


@dataclass
class PickContext:
    item: SceneItem
    node: NodeRef
    local: Tuple[float, float]
    modifiers: Modifiers
    on_context_menu: Optional[ContextMenuCallback] = None
    skipped_locked: List[SceneItem] = field(default_factory=list)


@dataclass(frozen=True)
class PickRule:
    """
    One row of a resolution table. The action returns the final result,
    or None to let the scan continue with the next hit.
    """

    name: str
    predicate: Callable[[PickContext], bool]
    action: Callable[[PickContext], Optional[PickResult]]


def _is_menu(ctx: PickContext) -> bool:
    return ctx.node.is_handle and ctx.node.handle is HandleKind.MENU


def _open_menu(ctx: PickContext) -> PickResult:
    logger.debug(f"Context menu requested on {ctx.item!r}")
    if ctx.on_context_menu is not None:
        ctx.on_context_menu(ctx.item)
    return PickResult.empty()


def _unlock(ctx: PickContext) -> PickResult:
    ctx.item.set_locked(False)
    return PickResult.empty()


def _lock(ctx: PickContext) -> PickResult:
    ctx.item.set_locked(True)
    return PickResult.empty()


def _is_locked_without_override(ctx: PickContext) -> bool:
    return ctx.item.locked and not ctx.modifiers.override


def _grab_node(ctx: PickContext) -> PickResult:
    return PickResult(ctx.item, ctx.node, ctx.local, Outcome.OK)


def _grab_locker(ctx: PickContext) -> PickResult:
    return PickResult(ctx.item, ctx.item.locker, ctx.local, Outcome.OK)


def _unlock_and_grab(ctx: PickContext) -> PickResult:
    ctx.item.set_locked(False)
    return _grab_locker(ctx)


def _skip_locked(ctx: PickContext) -> None:
    ctx.skipped_locked.append(ctx.item)
    return None


# Rules applied to the first hit on the current item.
CURRENT_ITEM_RULES: Sequence[PickRule] = (
    PickRule("context menu", _is_menu, _open_menu),
    PickRule("unlock", lambda c: c.node.role is NodeRole.LOCK, _unlock),
    PickRule("lock", lambda c: c.node.role is NodeRole.UNLOCK, _lock),
    PickRule(
        "locked",
        _is_locked_without_override,
        lambda c: PickResult.empty(Outcome.LOCKED_TARGET),
    ),
    PickRule("grab", lambda c: True, _grab_node),
)

# Rules applied, in hit order, to items of the workspace when the current
# item was not hit.
OTHER_ITEM_RULES: Sequence[PickRule] = (
    PickRule(
        "unlock", lambda c: c.node.role is NodeRole.LOCK, _unlock_and_grab
    ),
    PickRule(
        "grab",
        lambda c: not _is_locked_without_override(c),
        _grab_locker,
    ),
    PickRule("locked", lambda c: True, _skip_locked),
)


def apply_rules(
    rules: Sequence[PickRule], ctx: PickContext
) -> Optional[PickResult]:
    for rule in rules:
        if rule.predicate(ctx):
            logger.debug(f"Pick rule '{rule.name}' matched {ctx.node}")
            return rule.action(ctx)
    return None


def pick(
    hits: Sequence[Hit],
    scene: Scene,
    modifiers: Modifiers = NO_MODIFIERS,
    on_context_menu: Optional[ContextMenuCallback] = None,
) -> PickResult:
    """
    Resolves an ordered, front-to-back list of hits to at most one item
    and node.

    The current item is sticky: if any of its nodes was hit, it wins even
    when another item is nearer to the viewer. Otherwise the front-most
    hit item of the current workspace that may be manipulated is picked.
    """
    if not hits:
        return PickResult.empty()

    workspace = scene.current_workspace
    current = scene.current
    if current is not None and current.workspace == workspace:
        for node, local in hits:
            if current.owns(node):
                ctx = PickContext(
                    current, node, local, modifiers, on_context_menu
                )
                return apply_rules(CURRENT_ITEM_RULES, ctx)  # type: ignore

    skipped: List[SceneItem] = []
    for node, local in hits:
        item = scene.find_owner(node)
        if not scene.can_select(item):
            continue
        ctx = PickContext(item, node, local, modifiers, on_context_menu,
                          skipped)
        result = apply_rules(OTHER_ITEM_RULES, ctx)
        if result is not None:
            return result

    return PickResult.empty(
        Outcome.LOCKED_TARGET if skipped else Outcome.NO_TARGET
    )
