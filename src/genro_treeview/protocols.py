# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Structural protocols for the collaborators of a TreeState.

Collaborators plug in without inheriting from any base class: any object
with conformant methods passes ``isinstance`` checks.

Example::

    from genro_treeview.protocols import EntityProcessor

    class DepthCounter:
        def init_wrapper(self, wrapper):
            wrapper.data['max_level'] = 0

        def process_entity(self, entity, wrapper):
            wrapper.data['max_level'] = max(wrapper.data['max_level'], entity.level)

        def on_process_finished(self, wrapper):
            pass

    assert isinstance(DepthCounter(), EntityProcessor)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Sequence, runtime_checkable

if TYPE_CHECKING:
    from .entities import Entity, EntityMaps
    from .expansion import VisibleRow
    from .keys import Key
    from .node import TreeNode
    from .state.core import RowState


@runtime_checkable
class EntityProcessor(Protocol):
    """Visitor attaching extra data to entities during indexing.

    - ``init_wrapper`` runs once before the walk; it may return a
      replacement wrapper (None keeps the given one).
    - ``process_entity`` runs once per indexed node, in pre-order.
    - ``on_process_finished`` runs once after the walk.
    """

    def init_wrapper(self, wrapper: EntityMaps) -> Any: ...

    def process_entity(self, entity: Entity, wrapper: Any) -> None: ...

    def on_process_finished(self, wrapper: Any) -> None: ...


@runtime_checkable
class CancelHandle(Protocol):
    """Handle of a scheduled callback (asyncio.TimerHandle conforms)."""

    def cancel(self) -> None: ...


@runtime_checkable
class Scheduler(Protocol):
    """Host scheduler used for deferred hover expansion."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> CancelHandle: ...


@runtime_checkable
class WindowedRenderer(Protocol):
    """Virtualized list renderer consuming the visible rows.

    The renderer draws only the currently scrolled slice of ``data_source``,
    calling ``render_row`` for each row it shows.
    """

    def render(
        self,
        data_source: Sequence[VisibleRow],
        item_min_height: int,
        row_key: Callable[[VisibleRow], Key],
        render_row: Callable[[VisibleRow], RowState],
    ) -> Any: ...


LoadData = Callable[['TreeNode'], Awaitable[Any]]
