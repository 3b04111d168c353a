# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Ownership of independently controllable state slices.

Each slice (selected, checked, expanded and loaded keys) is either:

- OWNED: the TreeState is the source of truth and keeps the next value.
- MIRRORED: the caller supplies the authoritative value on every update;
  the TreeState computes the next value only to emit it to subscribers.

The next value is always computed the same way; only persistence differs.

Example:
    >>> mirrored = StateSlice('selected_keys', ['a'], Ownership.MIRRORED)
    >>> mirrored.commit(['b'])
    ['b']
    >>> mirrored.value
    ['a']
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Ownership(Enum):
    OWNED = 'owned'
    MIRRORED = 'mirrored'


class StateSlice:
    """A named piece of state together with its ownership mode."""

    __slots__ = ('name', 'ownership', 'value')

    def __init__(self, name: str, value: Any = None, ownership: Ownership = Ownership.OWNED) -> None:
        self.name = name
        self.value = value
        self.ownership = ownership

    def __repr__(self) -> str:
        return f"StateSlice({self.name!r}, {self.value!r}, {self.ownership.value})"

    @property
    def is_owned(self) -> bool:
        return self.ownership is Ownership.OWNED

    def commit(self, value: Any) -> Any:
        """Persist ``value`` if the slice is owned; return it either way."""
        if self.is_owned:
            self.value = value
        return value

    def mirror(self, value: Any) -> None:
        """Replace the value with the one supplied by the caller."""
        self.ownership = Ownership.MIRRORED
        self.value = value
