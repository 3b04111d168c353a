# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeConfig - tree-wide behaviour flags and tunables.

TreeConfig is a frozen (immutable) dataclass; derive a modified copy with
``dataclasses.replace``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class TreeConfig:
    """Immutable configuration for a TreeState.

    Attributes:
        selectable: Whether nodes can be selected at all.
        multiple: Allow more than one selected key.
        checkable: Whether nodes carry a checkbox.
        check_strictly: Disable conduction; each checkbox is independent.
        draggable: Whether drag gestures are processed.
        default_expand_parent: On first sync, close the initial expanded keys
            over their ancestors.
        auto_expand_parent: Always close supplied expanded keys over their
            ancestors.
        default_expand_all: On first sync, expand every node (used only when
            no expanded keys are supplied).
        hover_expand_delay: Seconds a dragged pointer must rest on a node
            before the node is expanded.
        drag_side_range: Fraction of the row height used by the above/below
            bands. Must be in (0, 0.5) so that the inside band exists.
        drag_min_gap: Minimum band size, in the same unit as row heights.
        item_min_height: Row height hint passed to the windowed renderer.
        inline_indent: Indentation per level passed along with each row.
        raise_on_error: Raise diagnostics as exceptions instead of
            collecting them.
    """

    selectable: bool = True
    multiple: bool = False
    checkable: bool = False
    check_strictly: bool = False
    draggable: bool = False
    default_expand_parent: bool = True
    auto_expand_parent: bool = False
    default_expand_all: bool = False
    hover_expand_delay: float = 0.4
    drag_side_range: float = 0.25
    drag_min_gap: float = 2.0
    item_min_height: int = 20
    inline_indent: int = 18
    raise_on_error: bool = False

    def __post_init__(self) -> None:
        if not 0.0 < self.drag_side_range < 0.5:
            msg = f"drag_side_range must be in (0, 0.5), got {self.drag_side_range}"
            raise ValueError(msg)
        if self.drag_min_gap < 0.0:
            msg = f"drag_min_gap must be >= 0, got {self.drag_min_gap}"
            raise ValueError(msg)
        if self.hover_expand_delay < 0.0:
            msg = f"hover_expand_delay must be >= 0, got {self.hover_expand_delay}"
            raise ValueError(msg)
        if self.item_min_height <= 0:
            msg = f"item_min_height must be > 0, got {self.item_min_height}"
            raise ValueError(msg)
        if self.inline_indent < 0:
            msg = f"inline_indent must be >= 0, got {self.inline_indent}"
            raise ValueError(msg)
