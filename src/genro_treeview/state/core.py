# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeState - state controller for a windowed tree view.

This module provides the TreeState class, which owns every piece of state
derived from a node forest and keeps it consistent while inputs change and
user gestures arrive.

Key Features:
    - **Entity index**: O(1) lookup of nodes by key and by position path
    - **Tri-state checkboxes**: conduction of checks through the hierarchy
    - **Visible rows**: pre-order flattening restricted to expanded nodes
    - **Selection**: single or multiple, with owned or mirrored state
    - **Drag and drop**: drop position resolution with deferred hover expansion
    - **Async loading**: per-node loaders, triggered on first expansion
    - **Reactive subscriptions**: event notifications on every change

Every write is followed by a full recomputation of the dependent state
before control returns to the caller (entities, then expanded keys and
visible rows, then selection, then checked keys). No intermediate state
is ever observable.

Ownership:
    Each of expanded_keys, selected_keys, checked_keys and loaded_keys is
    OWNED unless a value is supplied for it (at construction or through
    update()), which makes it MIRRORED: the caller is then the source of
    truth and the TreeState only emits the next value to subscribers.

Example:
    Basic usage::

        state = TreeState(
            [{'key': 'a', 'children': [{'key': 'b'}, {'key': 'c'}]}],
            TreeConfig(checkable=True),
        )
        state.subscribe('ui', expand=lambda keys, info: print(keys))

        state.expand('a')         # prints ['a']
        state.visible             # [VisibleRow('a', 0), VisibleRow('b', 1), ...]
        state.check('b')
        state.half_checked_keys   # ['a']

    Mirrored selection::

        state = TreeState(data, selected_keys=['a'])
        state.select('b')         # emits ['b'], state.selected_keys stays ['a']
        state.update(selected_keys=['b'])
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, TYPE_CHECKING

from ..conduction import CheckState, conduct_check, conduct_strict, parse_checked_keys
from ..config import TreeConfig
from ..diagnostics import Diagnostics
from ..dragdrop import (
    DragState,
    DropPosition,
    DropResult,
    HoverExpansionTimer,
    collect_descendant_keys,
    finalize_drop,
    resolve_drop_position,
)
from ..entities import Entity, EntityMaps, convert_tree_to_entities
from ..events import (
    CheckInfo,
    DragInfo,
    ExpandInfo,
    LoadErrorInfo,
    LoadInfo,
    SelectInfo,
)
from ..exceptions import LoadError, UnknownKeyError
from ..expansion import VisibleRow, close_over_ancestors, expand_all_keys, flatten_visible
from ..keys import Key, add_key, remove_key
from ..node import TreeNode, nodes_from_data
from ..scheduler import AsyncioScheduler
from ..selection import calc_selected_keys, toggle_selection
from .loading import LoadTracker
from .ownership import StateSlice
from .subscription import SubscriptionMixin

if TYPE_CHECKING:
    from ..protocols import EntityProcessor, LoadData, Scheduler, WindowedRenderer

logger = logging.getLogger(__name__)

_SYNCED = ('tree_data', 'expanded_keys', 'selected_keys', 'checked_keys', 'loaded_keys')


@dataclass(frozen=True, slots=True)
class RowState:
    """Everything a row renderer needs to draw one visible node."""

    key: Key
    level: int
    pos: str
    node: TreeNode
    expanded: bool
    selected: bool
    checked: bool
    half_checked: bool
    loaded: bool
    loading: bool
    drag_over: bool
    drag_over_gap_top: bool
    drag_over_gap_bottom: bool
    indent: int


def row_key(row: VisibleRow) -> Key:
    """Key accessor handed to windowed renderers."""
    return row.key


class TreeState(SubscriptionMixin):
    """Owner of the derived state of a tree view.

    Args:
        tree_data: Forest of TreeNode instances or nested dicts.
        config: Tree-wide behaviour flags (TreeConfig() if None).
        expanded_keys: Mirrored expanded keys.
        selected_keys: Mirrored selection.
        checked_keys: Mirrored checked keys (list, or mapping with
            'checked' / 'half_checked').
        loaded_keys: Mirrored loaded keys.
        default_expanded_keys: Initial expanded keys when owned.
        default_selected_keys: Initial selection when owned.
        default_checked_keys: Initial checked keys when owned.
        processor: EntityProcessor attaching extra data to entities.
        load_data: Async callable loading the children of a node.
        scheduler: Scheduler for hover expansion (AsyncioScheduler if None).
    """

    def __init__(
        self,
        tree_data: Iterable[Any] | None = None,
        config: TreeConfig | None = None,
        *,
        expanded_keys: Iterable[Key] | None = None,
        selected_keys: Iterable[Key] | None = None,
        checked_keys: Any = None,
        loaded_keys: Iterable[Key] | None = None,
        default_expanded_keys: Iterable[Key] = (),
        default_selected_keys: Iterable[Key] = (),
        default_checked_keys: Any = (),
        processor: EntityProcessor | None = None,
        load_data: LoadData | None = None,
        scheduler: Scheduler | None = None,
    ) -> None:
        self.config = config or TreeConfig()
        self.diagnostics = Diagnostics(raise_on_error=self.config.raise_on_error)
        self.processor = processor
        self.load_data = load_data
        self._init_subscriptions()

        self._forest: list[Any] = []
        self._entities = EntityMaps()
        self._visible: list[VisibleRow] = []
        self._expanded = StateSlice('expanded_keys', [])
        self._selected = StateSlice('selected_keys', [])
        self._checked = StateSlice('checked_keys', CheckState())
        self._loaded = StateSlice('loaded_keys', [])
        self._loads = LoadTracker()
        self._drag = DragState()
        self._hover = HoverExpansionTimer(
            scheduler if scheduler is not None else AsyncioScheduler(),
            self.config.hover_expand_delay,
        )

        changes = {
            'tree_data': tree_data if tree_data is not None else [],
            'expanded_keys': expanded_keys,
            'selected_keys': selected_keys,
            'checked_keys': checked_keys,
            'loaded_keys': loaded_keys,
        }
        self._sync(
            {name: value for name, value in changes.items() if value is not None},
            defaults={
                'expanded_keys': default_expanded_keys,
                'selected_keys': default_selected_keys,
                'checked_keys': default_checked_keys,
            },
        )

    def __repr__(self) -> str:
        return f"TreeState({len(self._entities)} nodes, {len(self._visible)} visible)"

    # ==================== Synchronisation ====================

    def update(self, **changes: Any) -> None:
        """Synchronise inputs supplied by the caller.

        Accepted keywords: tree_data, expanded_keys, selected_keys,
        checked_keys, loaded_keys. None values are ignored. A supplied
        key slice becomes MIRRORED.

        Raises:
            TypeError: If an unknown keyword is given.
        """
        unknown = set(changes) - set(_SYNCED)
        if unknown:
            raise TypeError(f"update() got unexpected keyword(s): {sorted(unknown)}")
        self._sync({name: value for name, value in changes.items() if value is not None})

    def _sync(self, changes: dict[str, Any], defaults: dict[str, Any] | None = None) -> None:
        """Recompute derived state from changed inputs.

        ``defaults`` is given only on the first synchronisation.
        """
        config = self.config
        initial = defaults is not None
        tree_changed = 'tree_data' in changes

        if tree_changed:
            self._forest = nodes_from_data(changes['tree_data'])
            self._entities = convert_tree_to_entities(
                self._forest, self.processor, self.diagnostics
            )
        entities = self._entities

        # Expanded keys
        expanded_changed = True
        if 'expanded_keys' in changes:
            keys = list(changes['expanded_keys'])
            if config.auto_expand_parent or (initial and config.default_expand_parent):
                keys = close_over_ancestors(keys, entities)
            self._expanded.mirror(keys)
        elif initial and config.default_expand_all:
            self._expanded.value = expand_all_keys(entities)
        elif initial:
            keys = list(defaults['expanded_keys'])
            if config.auto_expand_parent or config.default_expand_parent:
                keys = close_over_ancestors(keys, entities)
            self._expanded.value = keys
        else:
            expanded_changed = False

        if tree_changed or expanded_changed:
            self._refresh_visible()

        # Selected keys
        if config.selectable:
            if 'selected_keys' in changes:
                self._selected.mirror(
                    calc_selected_keys(changes['selected_keys'], config.multiple, self.diagnostics)
                )
            elif initial:
                self._selected.value = calc_selected_keys(
                    defaults['selected_keys'], config.multiple, self.diagnostics
                )

        # Checked keys
        if config.checkable:
            supplied = 'checked_keys' in changes
            state: CheckState | None = None
            if supplied:
                state = parse_checked_keys(changes['checked_keys'], self.diagnostics) or CheckState()
            elif initial:
                state = parse_checked_keys(defaults['checked_keys'], self.diagnostics)
            elif tree_changed:
                previous = self._checked.value
                state = CheckState(
                    frozenset(k for k in previous.checked_keys if k in entities),
                    frozenset(k for k in previous.half_checked_keys if k in entities),
                )

            if state is not None:
                if not config.check_strictly:
                    state = conduct_check(
                        state.checked_keys, True, entities,
                        diagnostics=self.diagnostics if (supplied or initial) else None,
                    )
                if supplied:
                    self._checked.mirror(state)
                else:
                    self._checked.value = state

        # Loaded keys
        if 'loaded_keys' in changes:
            self._loaded.mirror(list(changes['loaded_keys']))

        logger.debug("Synchronised %s", sorted(changes))

    def _refresh_visible(self) -> None:
        self._visible = flatten_visible(self._forest, self._expanded.value, self._entities)

    def _set_expanded(self, keys: list[Key]) -> list[Key]:
        if self._expanded.is_owned:
            self._expanded.value = keys
            self._refresh_visible()
        return keys

    def _require(self, key: Key) -> Entity:
        entity = self._entities.get(key)
        if entity is None:
            raise UnknownKeyError(f"Key {key!r} does not exist in the tree")
        return entity

    # ==================== Read Side ====================

    @property
    def tree(self) -> list[Any]:
        """The current forest (as converted from tree_data)."""
        return self._forest

    @property
    def entities(self) -> EntityMaps:
        return self._entities

    @property
    def expanded_keys(self) -> list[Key]:
        return list(self._expanded.value)

    @property
    def selected_keys(self) -> list[Key]:
        return list(self._selected.value)

    @property
    def check_state(self) -> CheckState:
        return self._checked.value

    @property
    def checked_keys(self) -> list[Key]:
        """Checked keys in tree order."""
        return self._entities.sort_keys(self._checked.value.checked_keys)

    @property
    def half_checked_keys(self) -> list[Key]:
        """Half-checked keys in tree order."""
        return self._entities.sort_keys(self._checked.value.half_checked_keys)

    @property
    def loaded_keys(self) -> list[Key]:
        return list(self._loaded.value)

    @property
    def loading_keys(self) -> list[Key]:
        return self._loads.loading_keys

    @property
    def visible(self) -> list[VisibleRow]:
        """Visible rows in display order."""
        return list(self._visible)

    @property
    def drag_state(self) -> DragState:
        return self._drag

    def is_key_checked(self, key: Key) -> bool:
        return self._checked.value.is_checked(key)

    def row(self, visible_row: VisibleRow) -> RowState:
        """Build the render data of one visible row."""
        key, level = visible_row
        entity = self._require(key)
        hovered = self._drag.hover_key == key
        position = self._drag.drop_position
        return RowState(
            key=key,
            level=level,
            pos=entity.pos,
            node=entity.node,
            expanded=key in self._expanded.value,
            selected=key in self._selected.value,
            checked=self._checked.value.is_checked(key),
            half_checked=self._checked.value.is_half_checked(key),
            loaded=key in self._loaded.value,
            loading=key in self._loads,
            drag_over=hovered and position is DropPosition.INSIDE,
            drag_over_gap_top=hovered and position is DropPosition.ABOVE,
            drag_over_gap_bottom=hovered and position is DropPosition.BELOW,
            indent=level * self.config.inline_indent,
        )

    def rows(self) -> list[RowState]:
        """Render data of every visible row."""
        return [self.row(visible_row) for visible_row in self._visible]

    def render(self, renderer: WindowedRenderer) -> Any:
        """Hand the visible rows to a windowed renderer."""
        return renderer.render(self.visible, self.config.item_min_height, row_key, self.row)

    # ==================== Expansion ====================

    def expand(self, key: Key, expanded: bool | None = None) -> asyncio.Task | None:
        """Expand, collapse or toggle (expanded=None) a node.

        Expanding a node that has not been loaded yet, when a load_data
        callable is set, starts its load on the running event loop.

        Returns:
            The Task running the load, or None when no load was started.

        Raises:
            UnknownKeyError: If the key is not in the tree.
            RuntimeError: If a load must start and no event loop is running.
        """
        entity = self._require(key)
        target = key not in self._expanded.value if expanded is None else expanded
        if target:
            keys = add_key(self._expanded.value, key)
        else:
            keys = remove_key(self._expanded.value, key)
        self._set_expanded(keys)
        self._notify('expand', keys, ExpandInfo(entity.node, target))

        if target and self.load_data is not None:
            return self._spawn_load(entity)
        return None

    # ==================== Selection ====================

    def select(self, key: Key, selected: bool | None = None) -> list[Key] | None:
        """Select, deselect or toggle (selected=None) a node.

        Returns:
            The next selection, or None if the node cannot be selected.
        """
        entity = self._require(key)
        node = entity.node
        if not self.config.selectable or not node.selectable or node.disabled:
            return None
        target = key not in self._selected.value if selected is None else selected
        keys = toggle_selection(self._selected.value, key, target, self.config.multiple)
        self._selected.commit(keys)
        self._notify(
            'select', keys,
            SelectInfo(node, target, self._entities.nodes_for(keys)),
        )
        return keys

    # ==================== Checkboxes ====================

    def check(self, key: Key, checked: bool | None = None) -> CheckState | None:
        """Check, uncheck or toggle (checked=None) a node.

        In strict mode only the node itself changes and subscribers receive
        the CheckState; otherwise the toggle is conducted and subscribers
        receive the checked keys in tree order.

        Returns:
            The next CheckState, or None if the node cannot be checked.
        """
        entity = self._require(key)
        node = entity.node
        if not self.config.checkable or node.check_disabled:
            return None
        previous = self._checked.value
        target = not previous.is_checked(key) if checked is None else checked

        if self.config.check_strictly:
            state = conduct_strict(key, target, previous)
            value: Any = state
            info = CheckInfo(
                node, target,
                checked_nodes=self._entities.nodes_for(self._entities.sort_keys(state.checked_keys)),
            )
        else:
            state = conduct_check([key], target, self._entities, previous, self.diagnostics)
            value = self._entities.sort_keys(state.checked_keys)
            known = [k for k in value if k in self._entities]
            info = CheckInfo(
                node, target,
                checked_nodes=self._entities.nodes_for(known),
                half_checked_keys=self._entities.sort_keys(state.half_checked_keys),
                checked_positions=[(self._entities[k].node, self._entities[k].pos) for k in known],
            )

        self._checked.commit(state)
        self._notify('check', value, info)
        return state

    # ==================== Loading ====================

    def _needs_load(self, entity: Entity) -> bool:
        if self.load_data is None or entity.node.is_leaf:
            return False
        return self._loads.can_load(entity.key, self._loaded.value)

    def _spawn_load(self, entity: Entity) -> asyncio.Task | None:
        if not self._needs_load(entity):
            return None
        loop = asyncio.get_running_loop()
        self._loads.begin(entity.key)
        return self._loads.track(entity.key, loop.create_task(self._run_load(entity)))

    async def _run_load(self, entity: Entity) -> bool:
        key = entity.key
        logger.debug("Loading %r", key)
        error: Exception | None = None
        try:
            await self.load_data(entity.node)
        except Exception as exc:
            error = exc
        finally:
            self._loads.end(key)

        if error is not None:
            message = f"Loading {key!r} failed: {error}"
            self._notify('load_error', list(self._loaded.value), LoadErrorInfo(entity.node, error))
            if not self.config.raise_on_error:
                self.diagnostics.report('load-failed', message, key=key)
            raise LoadError(message) from error

        loaded = self._loaded.commit(add_key(self._loaded.value, key))
        # Loaders may attach children to the node in place
        self._sync({'tree_data': self._forest})
        self._notify('load', loaded, LoadInfo(entity.node))
        return True

    async def load(self, key: Key) -> bool:
        """Load the children of a node through load_data.

        Returns:
            True if a load ran, False if it was skipped (no loader, leaf
            node, already loading or already loaded).

        Raises:
            UnknownKeyError: If the key is not in the tree.
            LoadError: If the loader fails. The node is no longer loading
                and a load_error event has been emitted.
        """
        entity = self._require(key)
        if not self._needs_load(entity):
            return False
        self._loads.begin(key)
        return await self._run_load(entity)

    async def wait_loads(self) -> None:
        """Wait until every load started by expand() has settled."""
        await self._loads.join()

    # ==================== Drag and Drop ====================

    def drag_start(self, key: Key) -> None:
        """Begin dragging a node; the node collapses while dragged."""
        if not self.config.draggable:
            return
        entity = self._require(key)
        self._hover.cancel()
        self._drag = DragState(key, collect_descendant_keys(key, self._entities))
        self._set_expanded(remove_key(self._expanded.value, key))
        self._notify('drag_start', key, DragInfo(entity.node))

    def _resolve(self, offset: float, height: float) -> DropPosition:
        return resolve_drop_position(
            offset, height, self.config.drag_side_range, self.config.drag_min_gap
        )

    def _is_self_drop(self, key: Key, position: DropPosition) -> bool:
        return key == self._drag.dragged_key and position is DropPosition.INSIDE

    def drag_enter(self, key: Key, offset: float, height: float) -> DropPosition | None:
        """The pointer entered a row while dragging.

        The hovered node is expanded only after hover_expand_delay seconds,
        unless the pointer moves to another row or leaves first.

        Returns:
            The resolved drop position, or None when nothing is dragged or
            the node is entered onto itself.

        Raises:
            UnknownKeyError: If the key is not in the tree.
            RuntimeError: If the default AsyncioScheduler is used and no event
                loop is running. The drag state is left unchanged.
        """
        if not self._drag.active:
            return None
        entity = self._require(key)
        position = self._resolve(offset, height)
        if self._is_self_drop(key, position):
            self._hover.cancel()
            self._drag.clear_hover()
            return None
        self._hover.schedule(entity.pos, lambda: self._expand_hovered(key))
        self._drag.hover_key = key
        self._drag.drop_position = position
        return position

    def _expand_hovered(self, key: Key) -> None:
        entity = self._entities.get(key)
        if entity is None or not self._drag.active:
            return
        keys = self._set_expanded(add_key(self._expanded.value, key))
        self._notify('drag_enter', key, DragInfo(entity.node, list(keys)))

    def drag_over(self, key: Key, offset: float, height: float) -> DropPosition | None:
        """The pointer moved over a row while dragging.

        Returns:
            The current drop position of the hovered row, or None.
        """
        if not self.config.draggable:
            return None
        entity = self._require(key)
        if self._drag.active and key == self._drag.hover_key:
            position = self._resolve(offset, height)
            if self._is_self_drop(key, position):
                self._hover.cancel()
                self._drag.clear_hover()
            elif position is not self._drag.drop_position:
                self._drag.drop_position = position
        self._notify('drag_over', key, DragInfo(entity.node))
        return self._drag.drop_position if self._drag.hover_key == key else None

    def drag_leave(self, key: Key) -> None:
        """The pointer left a row; its pending hover expansion is cancelled."""
        if not self.config.draggable:
            return
        entity = self._require(key)
        self._hover.cancel(entity.pos)
        if self._drag.hover_key == key:
            self._drag.clear_hover()
        self._notify('drag_leave', key, DragInfo(entity.node))

    def drag_end(self, key: Key) -> None:
        """The gesture finished, dropped or not."""
        if not self.config.draggable:
            return
        entity = self._require(key)
        self._hover.cancel()
        self._drag = DragState()
        self._notify('drag_end', key, DragInfo(entity.node))

    def drop(self, key: Key) -> DropResult | None:
        """Drop the dragged node on a row.

        Returns:
            The DropResult also emitted to 'drop' subscribers, or None when
            nothing is dragged or the drop targets the dragged subtree.
        """
        self._require(key)
        self._hover.cancel()
        result = finalize_drop(key, self._drag, self._entities, self.diagnostics)
        self._drag.clear_hover()
        if result is None:
            return None
        self._notify('drop', result, None)
        return result
