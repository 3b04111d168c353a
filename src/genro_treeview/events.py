# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Payloads delivered to event subscribers.

Subscribers receive ``(value, info)``: ``value`` is the next value of the
state slice (expanded keys, selected keys...), ``info`` one of the classes
below describing what happened.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .keys import Key

if TYPE_CHECKING:
    from .node import TreeNode

EVENT_NAMES = (
    'expand',
    'select',
    'check',
    'load',
    'load_error',
    'drag_start',
    'drag_enter',
    'drag_over',
    'drag_leave',
    'drag_end',
    'drop',
)


@dataclass(frozen=True, slots=True)
class ExpandInfo:
    node: TreeNode
    expanded: bool


@dataclass(frozen=True, slots=True)
class SelectInfo:
    node: TreeNode
    selected: bool
    selected_nodes: list[TreeNode] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class CheckInfo:
    """Details of a checkbox toggle.

    Attributes:
        node: The toggled node.
        checked: Its new state.
        checked_nodes: Nodes of every checked key, in tree order.
        half_checked_keys: Half-checked keys after conduction, in tree order.
        checked_positions: (node, position path) of every checked key.
    """

    node: TreeNode
    checked: bool
    checked_nodes: list[TreeNode] = field(default_factory=list)
    half_checked_keys: list[Key] = field(default_factory=list)
    checked_positions: list[tuple[TreeNode, str]] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class LoadInfo:
    node: TreeNode


@dataclass(frozen=True, slots=True)
class LoadErrorInfo:
    node: TreeNode
    error: BaseException


@dataclass(frozen=True, slots=True)
class DragInfo:
    """Details of a drag gesture event.

    ``expanded_keys`` is set only on drag_enter, which fires once the
    hovered node has been expanded by the deferred hover expansion.
    """

    node: TreeNode
    expanded_keys: list[Key] | None = None
