# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Non-fatal diagnostic channel.

Configuration problems (malformed nodes, duplicate keys, invalid drops...)
do not abort a recomputation. They are recorded as Diagnostic entries,
logged at WARNING level and, in strict mode, raised as the matching
TreeViewError subclass.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator

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
from .keys import Key

logger = logging.getLogger(__name__)

_ERRORS: dict[str, type[TreeViewError]] = {
    'invalid-node': InvalidNodeError,
    'duplicate-key': DuplicateKeyError,
    'unknown-key': UnknownKeyError,
    'invalid-drop': InvalidDropError,
    'multiple-selection': SelectionError,
    'invalid-checked-keys': CheckedKeysError,
    'load-failed': LoadError,
}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single reported problem.

    Attributes:
        code: Short machine-readable identifier (e.g. 'duplicate-key').
        message: Human readable description.
        key: The node key involved, if any.
    """

    code: str
    message: str
    key: Key | None = None


class Diagnostics:
    """Collector for non-fatal problems.

    Args:
        raise_on_error: If True, report() raises instead of collecting.

    Example:
        >>> diagnostics = Diagnostics()
        >>> diagnostics.report('duplicate-key', "Key 'a' is used twice", key='a')
        >>> diagnostics.codes()
        ['duplicate-key']
    """

    __slots__ = ('raise_on_error', '_entries')

    def __init__(self, raise_on_error: bool = False) -> None:
        self.raise_on_error = raise_on_error
        self._entries: list[Diagnostic] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"Diagnostics({self.codes()})"

    def report(self, code: str, message: str, key: Key | None = None) -> None:
        """Record a problem, or raise it when raise_on_error is set.

        Raises:
            TreeViewError: Subclass mapped to ``code``, only if raise_on_error.
        """
        if self.raise_on_error:
            raise _ERRORS.get(code, TreeViewError)(message)
        logger.warning("%s: %s", code, message)
        self._entries.append(Diagnostic(code, message, key))

    def codes(self) -> list[str]:
        """Return the codes of the recorded problems in report order."""
        return [entry.code for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()
