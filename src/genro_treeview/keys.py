# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Key list and position path helpers.

A position path encodes the sibling indices from the root marker ``0`` down
to a node, separated by ``-``:

    '0-0'     first root node
    '0-1-0'   first child of the second root node

Key lists are plain ordered lists; the helpers below never mutate their
input and always return a new list.
"""

from __future__ import annotations

from typing import Hashable, Iterable

Key = Hashable

ROOT_POSITION = '0'
POSITION_SEPARATOR = '-'


def get_position(parent_pos: str, index: int) -> str:
    """Build the position path of the child at ``index`` under ``parent_pos``.

    Example:
        >>> get_position('0', 2)
        '0-2'
        >>> get_position('0-2', 0)
        '0-2-0'
    """
    return f"{parent_pos}{POSITION_SEPARATOR}{index}"


def parse_position(pos: str) -> list[int]:
    """Split a position path into its sibling indices (root marker excluded).

    Example:
        >>> parse_position('0-2-0')
        [2, 0]
    """
    parts = pos.split(POSITION_SEPARATOR)
    return [int(part) for part in parts[1:]]


def position_level(pos: str) -> int:
    """Return the depth of a position path (root nodes are level 0)."""
    return pos.count(POSITION_SEPARATOR) - 1


def position_index(pos: str) -> int:
    """Return the sibling index encoded by the last segment of ``pos``."""
    return int(pos.rsplit(POSITION_SEPARATOR, 1)[1])


def add_key(keys: Iterable[Key], key: Key) -> list[Key]:
    """Return ``keys`` with ``key`` appended if it is not already present."""
    result = list(keys)
    if key not in result:
        result.append(key)
    return result


def remove_key(keys: Iterable[Key], key: Key) -> list[Key]:
    """Return ``keys`` without any occurrence of ``key``, order preserved."""
    return [k for k in keys if k != key]
