# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Entity index - flat lookup structures over a node forest.

This module converts a forest of TreeNode instances into an EntityMaps
arena: one Entity per node, reachable in O(1) by key and by position path.

Structural links never form ownership cycles:
    - parent_key: plain key of the parent entity (None for roots)
    - children: ordered list of child keys, owned by the entity

The arena is rebuilt wholesale whenever the forest changes; entities are
never patched incrementally.

Example:
    >>> forest = [TreeNode('a', [TreeNode('b'), TreeNode()])]
    >>> maps = convert_tree_to_entities(forest)
    >>> maps['b'].pos
    '0-0-0'
    >>> maps.get_by_pos('0-0-1').key   # no explicit key: keyed by position
    '0-0-1'
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, TYPE_CHECKING

from .keys import Key, ROOT_POSITION, get_position, position_level
from .node import TreeNode, is_valid_key

if TYPE_CHECKING:
    from .diagnostics import Diagnostics
    from .protocols import EntityProcessor

logger = logging.getLogger(__name__)


class Entity:
    """Identity, position and structural links of one node.

    Attributes:
        key: Explicit node key, or the position path when none is given.
        pos: Position path (e.g. '0-1-0').
        index: Sibling index within the parent.
        level: Depth (roots are level 0).
        parent_key: Key of the parent entity, None for roots.
        children: Ordered keys of the child entities.
        node: The source TreeNode (borrowed, never modified).
        data: Free slot for values attached by an EntityProcessor.
    """

    __slots__ = ('key', 'pos', 'index', 'level', 'parent_key', 'children', 'node', 'data')

    def __init__(
        self,
        key: Key,
        pos: str,
        index: int,
        node: TreeNode,
        parent_key: Key | None = None,
    ) -> None:
        self.key = key
        self.pos = pos
        self.index = index
        self.level = position_level(pos)
        self.parent_key = parent_key
        self.children: list[Key] = []
        self.node = node
        self.data: dict[str, Any] = {}

    def __repr__(self) -> str:
        return f"Entity({self.key!r}, pos={self.pos!r}, children={self.children!r})"

    @property
    def is_root(self) -> bool:
        return self.parent_key is None


class EntityMaps:
    """Arena of entities indexed by key and by position path.

    Keys are assumed unique. When two nodes share a key the later one
    wins in ``key_entities``; both remain reachable by position.
    """

    __slots__ = ('key_entities', 'pos_entities', 'roots', 'data')

    def __init__(self) -> None:
        self.key_entities: dict[Key, Entity] = {}
        self.pos_entities: dict[str, Entity] = {}
        self.roots: list[Key] = []
        self.data: dict[str, Any] = {}

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        return f"EntityMaps({list(self.key_entities)})"

    def __len__(self) -> int:
        return len(self.key_entities)

    def __iter__(self) -> Iterator[Key]:
        """Iterate over keys in pre-order."""
        return iter(self.key_entities)

    def __contains__(self, key: Key) -> bool:
        return key in self.key_entities

    def __getitem__(self, key: Key) -> Entity:
        return self.key_entities[key]

    # ==================== Lookup ====================

    def get(self, key: Key, default: Entity | None = None) -> Entity | None:
        return self.key_entities.get(key, default)

    def get_by_pos(self, pos: str, default: Entity | None = None) -> Entity | None:
        return self.pos_entities.get(pos, default)

    def parent(self, key: Key) -> Entity | None:
        """Return the parent entity of ``key``, None for roots."""
        parent_key = self.key_entities[key].parent_key
        if parent_key is None:
            return None
        return self.key_entities.get(parent_key)

    def children_of(self, key: Key) -> list[Entity]:
        """Return the child entities of ``key`` in order."""
        entities = self.key_entities
        return [entities[k] for k in entities[key].children if k in entities]

    def iter_ancestors(self, key: Key) -> Iterator[Entity]:
        """Yield the ancestors of ``key`` from the parent up to the root."""
        seen = {key}
        entity = self.key_entities[key]
        while entity.parent_key is not None and entity.parent_key not in seen:
            seen.add(entity.parent_key)
            parent = self.key_entities.get(entity.parent_key)
            if parent is None:
                return
            yield parent
            entity = parent

    def iter_descendants(self, key: Key) -> Iterator[Entity]:
        """Yield the descendants of ``key`` in pre-order (key excluded)."""
        seen = {key}
        stack = list(reversed(self.children_of(key)))
        while stack:
            entity = stack.pop()
            if entity.key in seen:
                continue
            seen.add(entity.key)
            yield entity
            stack.extend(reversed(self.children_of(entity.key)))

    def sort_keys(self, keys: Iterable[Key]) -> list[Key]:
        """Return the known ``keys`` in tree pre-order, unknown keys last."""
        wanted = list(dict.fromkeys(keys))
        lookup = set(wanted)
        ordered = [k for k in self.key_entities if k in lookup]
        ordered.extend(k for k in wanted if k not in self.key_entities)
        return ordered

    def nodes_for(self, keys: Iterable[Key]) -> list[TreeNode]:
        """Return the source nodes of the known ``keys``, in the given order."""
        entities = self.key_entities
        return [entities[k].node for k in keys if k in entities]


def convert_tree_to_entities(
    forest: Iterable[Any],
    processor: EntityProcessor | None = None,
    diagnostics: Diagnostics | None = None,
) -> EntityMaps:
    """Index a forest into an EntityMaps arena with a pre-order walk.

    Each node gets the position of its parent plus its sibling index and is
    keyed by its explicit key or, failing that, by its position. Children that
    are not TreeNode instances, or whose key is not a str/int, are skipped
    together with their subtree and reported as 'invalid-node'.

    Args:
        forest: Ordered root nodes.
        processor: Optional EntityProcessor invoked at walk start, per entity
            and at walk end.
        diagnostics: Channel for non-fatal problems.

    Returns:
        The EntityMaps. When ``processor.init_wrapper`` returns a replacement
        wrapper, that object is what the processor callbacks receive; the
        returned EntityMaps is unaffected.
    """
    maps = EntityMaps()
    wrapper: Any = maps
    if processor is not None:
        replacement = processor.init_wrapper(maps)
        if replacement is not None:
            wrapper = replacement

    def _visit(children: Iterable[Any], parent: Entity | None) -> None:
        parent_pos = parent.pos if parent is not None else ROOT_POSITION
        index = 0
        for child in children:
            if not isinstance(child, TreeNode) or not is_valid_key(child.key):
                if diagnostics is not None:
                    diagnostics.report(
                        'invalid-node',
                        f"Skipped {child!r} under position '{parent_pos}': "
                        f"not a tree node with a valid key",
                    )
                continue
            pos = get_position(parent_pos, index)
            key = child.key if child.key not in (None, '') else pos
            entity = Entity(
                key, pos, index, child,
                parent_key=parent.key if parent is not None else None,
            )
            index += 1
            if key in maps.key_entities and diagnostics is not None:
                diagnostics.report(
                    'duplicate-key',
                    f"Key {key!r} at '{pos}' overwrites the node at "
                    f"'{maps.key_entities[key].pos}'",
                    key=key,
                )
            maps.key_entities[key] = entity
            maps.pos_entities[pos] = entity
            if parent is None:
                maps.roots.append(key)
            else:
                parent.children.append(key)
            if processor is not None:
                processor.process_entity(entity, wrapper)
            _visit(child.children, entity)

    _visit(forest, None)

    if processor is not None:
        processor.on_process_finished(wrapper)

    logger.debug("Indexed %d entities (%d roots)", len(maps.pos_entities), len(maps.roots))
    return maps
