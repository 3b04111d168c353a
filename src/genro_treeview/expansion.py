# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Expansion closure and visible-row flattening."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, NamedTuple

from .entities import EntityMaps
from .keys import Key, ROOT_POSITION, get_position
from .node import tree_children


class VisibleRow(NamedTuple):
    """One row of the flattened tree: the node key and its depth."""

    key: Key
    level: int


def close_over_ancestors(keys: Iterable[Key], entities: EntityMaps) -> list[Key]:
    """Return ``keys`` plus every ancestor of every key.

    Input order is kept, ancestors are appended as they are discovered.
    Keys unknown to ``entities`` are kept as they are. Disabled nodes do
    not interrupt the ascent. The result always contains the input, and
    closing it again returns the same keys.

    Example:
        >>> close_over_ancestors(['d'], maps)   # tree a[b, c[d, e]]
        ['d', 'c', 'a']
    """
    result: dict[Key, None] = {}
    for key in keys:
        if key in result:
            continue
        result[key] = None
        entity = entities.get(key)
        while entity is not None and entity.parent_key is not None:
            if entity.parent_key in result:
                break
            result[entity.parent_key] = None
            entity = entities.get(entity.parent_key)
    return list(result)


def iter_visible(
    forest: Iterable[Any],
    expanded_keys: Iterable[Key],
    entities: EntityMaps,
) -> Iterator[VisibleRow]:
    """Yield the visible rows of ``forest`` in pre-order.

    Root nodes are always visible; the children of a node are visited only
    when its key is expanded. Nodes that were not indexed (malformed input)
    are skipped.
    """
    expanded = set(expanded_keys)

    def _dig(children: Iterable[Any], parent_pos: str, level: int) -> Iterator[VisibleRow]:
        for index, node in enumerate(tree_children(children)):
            pos = get_position(parent_pos, index)
            entity = entities.get_by_pos(pos)
            if entity is None:
                continue
            yield VisibleRow(entity.key, level)
            if entity.key in expanded:
                yield from _dig(node.children, pos, level + 1)

    return _dig(forest, ROOT_POSITION, 0)


def flatten_visible(
    forest: Iterable[Any],
    expanded_keys: Iterable[Key],
    entities: EntityMaps,
) -> list[VisibleRow]:
    """Return the visible rows of ``forest`` as a list.

    Example:
        >>> flatten_visible(forest, [], maps)          # tree A[B]
        [VisibleRow(key='A', level=0)]
        >>> flatten_visible(forest, ['A'], maps)
        [VisibleRow(key='A', level=0), VisibleRow(key='B', level=1)]
    """
    return list(iter_visible(forest, expanded_keys, entities))


def expand_all_keys(entities: EntityMaps) -> list[Key]:
    """Return every key of the arena in pre-order."""
    return list(entities)
