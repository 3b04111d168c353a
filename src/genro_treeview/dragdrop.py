# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Drag and drop gesture resolution.

The resolver never mutates the forest. It turns pointer positions into drop
positions, vetoes drops onto the dragged subtree and reports the outcome
(a DropResult) to whoever owns the data.

Drop bands within a hovered row of height ``h``::

    0 ........ band          ABOVE
    band ..... h - band      INSIDE
    h - band . h             BELOW

with ``band = max(h * side_range, min_gap)``, capped at ``h / 2`` so short
rows keep the two outer bands symmetric.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Callable, TYPE_CHECKING

from .keys import Key

if TYPE_CHECKING:
    from .diagnostics import Diagnostics
    from .entities import EntityMaps
    from .node import TreeNode
    from .protocols import CancelHandle, Scheduler

logger = logging.getLogger(__name__)

DRAG_SIDE_RANGE = 0.25
DRAG_MIN_GAP = 2.0
HOVER_EXPAND_DELAY = 0.4


class DropPosition(IntEnum):
    """Where a dragged node lands relative to the hovered row."""

    ABOVE = -1
    INSIDE = 0
    BELOW = 1


def resolve_drop_position(
    offset: float,
    height: float,
    side_range: float = DRAG_SIDE_RANGE,
    min_gap: float = DRAG_MIN_GAP,
) -> DropPosition:
    """Map a vertical pointer offset within a row to a DropPosition.

    Args:
        offset: Pointer distance from the top edge of the row.
        height: Row height.
        side_range: Fraction of the height taken by each outer band.
        min_gap: Minimum size of each outer band.

    Example:
        >>> resolve_drop_position(2, 20)
        <DropPosition.ABOVE: -1>
        >>> resolve_drop_position(10, 20)
        <DropPosition.INSIDE: 0>
        >>> resolve_drop_position(19, 20)
        <DropPosition.BELOW: 1>
    """
    band = min(max(height * side_range, min_gap), height / 2)
    if offset <= band:
        return DropPosition.ABOVE
    if offset >= height - band:
        return DropPosition.BELOW
    return DropPosition.INSIDE


def collect_descendant_keys(key: Key, entities: EntityMaps) -> frozenset[Key]:
    """Return ``key`` together with the keys of all its descendants."""
    keys = {key}
    if key in entities:
        keys.update(entity.key for entity in entities.iter_descendants(key))
    return frozenset(keys)


@dataclass(slots=True)
class DragState:
    """Transient state of a drag gesture.

    Attributes:
        dragged_key: Key of the node being dragged, None when idle.
        dragged_keys: The dragged key and all its descendant keys.
        hover_key: Key of the row under the pointer, None when none.
        drop_position: Resolved position within the hovered row.
    """

    dragged_key: Key | None = None
    dragged_keys: frozenset[Key] = field(default_factory=frozenset)
    hover_key: Key | None = None
    drop_position: DropPosition | None = None

    @property
    def active(self) -> bool:
        return self.dragged_key is not None

    def clear_hover(self) -> None:
        self.hover_key = None
        self.drop_position = None


@dataclass(frozen=True, slots=True)
class DropResult:
    """Outcome of a completed drop, for the layer that mutates the data.

    Attributes:
        node: The node dropped upon.
        dragged_node: The node being moved.
        dragged_keys: Keys of the dragged subtree.
        drop_position: Position relative to ``node``.
        drop_to_gap: True when dropped between rows (ABOVE or BELOW).
        insertion_index: Where to insert the dragged node. Among the
            siblings of ``node`` for ABOVE / BELOW, among the children of
            ``node`` (appended last) for INSIDE.
        legacy_position: Relative offset (-1, 0, 1) plus the sibling index
            of ``node``.
        pos: Position path of ``node``.
    """

    node: TreeNode
    dragged_node: TreeNode | None
    dragged_keys: frozenset[Key]
    drop_position: DropPosition
    drop_to_gap: bool
    insertion_index: int
    legacy_position: int
    pos: str


def finalize_drop(
    target_key: Key,
    drag: DragState,
    entities: EntityMaps,
    diagnostics: Diagnostics | None = None,
) -> DropResult | None:
    """Combine the hovered target and the drop position into a DropResult.

    Returns:
        The DropResult, or None when the target is the dragged node or one
        of its descendants ('invalid-drop'), or when nothing is dragged.
    """
    if not drag.active:
        return None
    if target_key in drag.dragged_keys:
        if diagnostics is not None:
            diagnostics.report(
                'invalid-drop',
                f"Can not drop {drag.dragged_key!r} onto {target_key!r}: "
                f"it is the dragged node or one of its descendants",
                key=target_key,
            )
        return None
    target = entities[target_key]
    position = drag.drop_position if drag.drop_position is not None else DropPosition.INSIDE
    if position is DropPosition.INSIDE:
        insertion_index = len(target.children)
    elif position is DropPosition.ABOVE:
        insertion_index = target.index
    else:
        insertion_index = target.index + 1
    dragged = entities.get(drag.dragged_key)
    return DropResult(
        node=target.node,
        dragged_node=dragged.node if dragged is not None else None,
        dragged_keys=drag.dragged_keys,
        drop_position=position,
        drop_to_gap=position is not DropPosition.INSIDE,
        insertion_index=insertion_index,
        legacy_position=int(position) + target.index,
        pos=target.pos,
    )


class HoverExpansionTimer:
    """Deferred expansion of hovered drop targets.

    At most one timer is pending. Scheduling for a position cancels every
    other pending timer; leaving the target cancels its timer before it fires.

    Args:
        scheduler: Object providing call_later(delay, callback).
        delay: Seconds before the hovered node expands.
    """

    __slots__ = ('scheduler', 'delay', '_pending')

    def __init__(self, scheduler: Scheduler, delay: float = HOVER_EXPAND_DELAY) -> None:
        self.scheduler = scheduler
        self.delay = delay
        self._pending: dict[str, CancelHandle] = {}

    def __contains__(self, pos: str) -> bool:
        return pos in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def schedule(self, pos: str, callback: Callable[[], Any]) -> None:
        """Run ``callback`` after the delay unless superseded or cancelled."""

        def _fire() -> None:
            if self._pending.pop(pos, None) is not None:
                logger.debug("Hover expansion fired for '%s'", pos)
                callback()

        handle = self.scheduler.call_later(self.delay, _fire)
        self.cancel()
        self._pending[pos] = handle

    def cancel(self, pos: str | None = None) -> None:
        """Cancel the timer of ``pos``, or every pending timer if None."""
        if pos is None:
            positions = list(self._pending)
        else:
            positions = [pos] if pos in self._pending else []
        for p in positions:
            self._pending.pop(p).cancel()
