# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-TreeView - State engine for windowed hierarchical tree views.

A lightweight, zero-dependency library that keeps the derived state of a
tree widget consistent: entity index, expansion, selection, tri-state
checkboxes, drag and drop and asynchronous loading. Rendering is left to
a pluggable windowed renderer.
"""

__version__ = "0.1.0"

from .conduction import CheckState, conduct_check, conduct_strict, parse_checked_keys
from .config import TreeConfig
from .diagnostics import Diagnostic, Diagnostics
from .dragdrop import (
    DragState,
    DropPosition,
    DropResult,
    HoverExpansionTimer,
    collect_descendant_keys,
    finalize_drop,
    resolve_drop_position,
)
from .entities import Entity, EntityMaps, convert_tree_to_entities
from .events import (
    EVENT_NAMES,
    CheckInfo,
    DragInfo,
    ExpandInfo,
    LoadErrorInfo,
    LoadInfo,
    SelectInfo,
)
from .exceptions import (
    CheckedKeysError,
    DuplicateKeyError,
    InvalidDropError,
    InvalidNodeError,
    LoadError,
    SelectionError,
    TreeViewError,
    UnknownKeyError,
)
from .expansion import VisibleRow, close_over_ancestors, flatten_visible, iter_visible
from .keys import get_position, parse_position
from .node import TreeNode, nodes_from_data
from .protocols import CancelHandle, EntityProcessor, Scheduler, WindowedRenderer
from .scheduler import AsyncioScheduler, ManualScheduler
from .selection import calc_selected_keys, toggle_selection
from .state import Ownership, RowState, TreeState

__all__ = [
    # Core classes
    "TreeState",
    "TreeNode",
    "TreeConfig",
    "RowState",
    "Ownership",
    "nodes_from_data",
    # Entities
    "Entity",
    "EntityMaps",
    "convert_tree_to_entities",
    "get_position",
    "parse_position",
    # Expansion and selection
    "VisibleRow",
    "close_over_ancestors",
    "flatten_visible",
    "iter_visible",
    "toggle_selection",
    "calc_selected_keys",
    # Checkboxes
    "CheckState",
    "conduct_check",
    "conduct_strict",
    "parse_checked_keys",
    # Drag and drop
    "DropPosition",
    "DropResult",
    "DragState",
    "HoverExpansionTimer",
    "collect_descendant_keys",
    "finalize_drop",
    "resolve_drop_position",
    # Events
    "EVENT_NAMES",
    "ExpandInfo",
    "SelectInfo",
    "CheckInfo",
    "LoadInfo",
    "LoadErrorInfo",
    "DragInfo",
    # Collaborators
    "EntityProcessor",
    "Scheduler",
    "CancelHandle",
    "WindowedRenderer",
    "AsyncioScheduler",
    "ManualScheduler",
    # Diagnostics
    "Diagnostic",
    "Diagnostics",
    # Exceptions
    "TreeViewError",
    "InvalidNodeError",
    "DuplicateKeyError",
    "UnknownKeyError",
    "InvalidDropError",
    "SelectionError",
    "CheckedKeysError",
    "LoadError",
]
