# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tri-state checkbox conduction.

A toggle is conducted in two passes:

1. Down: every conductible descendant of a toggled node takes its value.
2. Up: the ancestors of the toggled nodes are re-evaluated deepest first.
   A node is checked iff all its conductible children are checked, and
   half-checked iff it is not checked and some child is checked or
   half-checked.

Because the up pass only reads direct children, the outcome depends on the
set of checked leaves and the tree shape, never on the toggle order.

Nodes whose checkbox is disabled (``disabled``, ``disable_checkbox`` or
``checkable=False``) are opaque: conduction never changes them and their
parent ignores them. A node without conductible children behaves as a leaf.

In strict mode (``conduct_strict``) every checkbox is independent.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Iterable, TYPE_CHECKING

from .keys import Key

if TYPE_CHECKING:
    from .diagnostics import Diagnostics
    from .entities import Entity, EntityMaps

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckState:
    """Checked and half-checked key sets.

    The two sets are kept disjoint: a key listed in both is checked.

    Example:
        >>> state = CheckState({'a', 'b'}, {'b', 'c'})
        >>> sorted(state.half_checked_keys)
        ['c']
    """

    checked_keys: frozenset[Key] = field(default_factory=frozenset)
    half_checked_keys: frozenset[Key] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        checked = frozenset(self.checked_keys)
        object.__setattr__(self, 'checked_keys', checked)
        object.__setattr__(self, 'half_checked_keys', frozenset(self.half_checked_keys) - checked)

    def is_checked(self, key: Key) -> bool:
        return key in self.checked_keys

    def is_half_checked(self, key: Key) -> bool:
        return key in self.half_checked_keys


def _conductible_children(entity: Entity, entities: EntityMaps) -> list[Entity]:
    return [c for c in entities.children_of(entity.key) if not c.node.check_disabled]


def conduct_check(
    keys: Iterable[Key],
    checked: bool,
    entities: EntityMaps,
    previous: CheckState | None = None,
    diagnostics: Diagnostics | None = None,
) -> CheckState:
    """Toggle ``keys`` to ``checked`` and restore tree-wide consistency.

    With ``previous`` the toggle is incremental: only the subtrees of the
    toggled keys and their ancestor chains are touched. Without it, the
    call recomputes the whole state from a checked-key list in O(n).

    Args:
        keys: Keys being toggled.
        checked: Target value for every toggled key.
        entities: The entity arena of the current forest.
        previous: The state the toggle applies to.
        diagnostics: Channel for unknown keys.

    Returns:
        The conducted CheckState.

    Example:
        >>> maps = convert_tree_to_entities(nodes_from_data(
        ...     [{'key': 'c', 'children': [{'key': 'd'}, {'key': 'e'}]}]))
        >>> state = conduct_check(['d'], True, maps)
        >>> sorted(state.checked_keys), sorted(state.half_checked_keys)
        (['d'], ['c'])
    """
    checked_keys: set[Key] = set(previous.checked_keys) if previous else set()
    half_keys: set[Key] = set(previous.half_checked_keys) if previous else set()

    def _mark(key: Key, value: bool) -> None:
        half_keys.discard(key)
        if value:
            checked_keys.add(key)
        else:
            checked_keys.discard(key)

    toggled: list[Entity] = []
    for key in keys:
        entity = entities.get(key)
        if entity is None:
            if diagnostics is not None:
                diagnostics.report('unknown-key', f"Key {key!r} does not exist in the tree", key=key)
            continue
        toggled.append(entity)
        _mark(key, checked)
        if entity.node.check_disabled:
            continue
        stack = _conductible_children(entity, entities)
        while stack:
            child = stack.pop()
            _mark(child.key, checked)
            stack.extend(_conductible_children(child, entities))

    # Deepest ancestors first so each node reads settled children.
    ancestors: dict[Key, Entity] = {}
    for entity in toggled:
        for ancestor in entities.iter_ancestors(entity.key):
            ancestors[ancestor.key] = ancestor
    for ancestor in sorted(ancestors.values(), key=lambda e: e.level, reverse=True):
        if ancestor.node.check_disabled:
            continue
        children = _conductible_children(ancestor, entities)
        if not children:
            continue
        every = all(c.key in checked_keys for c in children)
        some = any(c.key in checked_keys or c.key in half_keys for c in children)
        _mark(ancestor.key, every)
        if not every and some:
            half_keys.add(ancestor.key)

    logger.debug(
        "Conducted %d key(s) to %s: %d checked, %d half-checked",
        len(toggled), checked, len(checked_keys), len(half_keys),
    )
    return CheckState(frozenset(checked_keys), frozenset(half_keys))


def conduct_strict(key: Key, checked: bool, previous: CheckState | None = None) -> CheckState:
    """Toggle a single key without any propagation.

    The key leaves the half-checked set; no other key changes.
    """
    checked_keys = set(previous.checked_keys) if previous else set()
    half_keys = set(previous.half_checked_keys) if previous else set()
    if checked:
        checked_keys.add(key)
    else:
        checked_keys.discard(key)
    half_keys.discard(key)
    return CheckState(frozenset(checked_keys), frozenset(half_keys))


def parse_checked_keys(value: Any, diagnostics: Diagnostics | None = None) -> CheckState | None:
    """Normalise externally supplied checked keys.

    Accepts:
        - a sequence or set of keys: all of them checked
        - a mapping with 'checked' and 'half_checked' (or 'halfChecked')
        - a CheckState, returned as is

    Returns:
        The CheckState, or None for None and for unsupported shapes (the
        latter reported as 'invalid-checked-keys').
    """
    if value is None:
        return None
    if isinstance(value, CheckState):
        return value
    if isinstance(value, Mapping):
        half = value.get('half_checked', value.get('halfChecked'))
        return CheckState(frozenset(value.get('checked') or ()), frozenset(half or ()))
    if isinstance(value, (list, tuple, set, frozenset)):
        return CheckState(frozenset(value))
    if diagnostics is not None:
        diagnostics.report(
            'invalid-checked-keys',
            f"Checked keys must be a list or a mapping, not {type(value).__name__}",
        )
    return None
