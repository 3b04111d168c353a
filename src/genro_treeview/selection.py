# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Selection set maintenance."""

from __future__ import annotations

from typing import Iterable, TYPE_CHECKING

from .keys import Key, add_key, remove_key

if TYPE_CHECKING:
    from .diagnostics import Diagnostics


def toggle_selection(
    selected_keys: Iterable[Key],
    key: Key,
    selected: bool,
    multiple: bool,
) -> list[Key]:
    """Compute the selection after (de)selecting ``key``.

    Args:
        selected_keys: Current selection, in order.
        key: The key being toggled.
        selected: Target state of ``key``.
        multiple: Whether more than one key may be selected.

    Returns:
        The next selection. Deselecting removes every occurrence of ``key``;
        selecting replaces the selection in single mode and appends (once)
        in multiple mode. The relative order of other keys is preserved.

    Example:
        >>> toggle_selection(['a'], 'b', True, multiple=False)
        ['b']
        >>> toggle_selection(['a'], 'b', True, multiple=True)
        ['a', 'b']
        >>> toggle_selection(['a', 'b', 'a'], 'a', False, multiple=True)
        ['b']
    """
    if not selected:
        return remove_key(selected_keys, key)
    if not multiple:
        return [key]
    return add_key(selected_keys, key)


def calc_selected_keys(
    keys: Iterable[Key] | None,
    multiple: bool,
    diagnostics: Diagnostics | None = None,
) -> list[Key]:
    """Normalise an externally supplied selection.

    In single mode only the first key is kept; a longer list is reported
    as 'multiple-selection'.
    """
    if keys is None:
        return []
    result = list(keys)
    if not multiple and len(result) > 1:
        if diagnostics is not None:
            diagnostics.report(
                'multiple-selection',
                f"Only one key can be selected when multiple is off, got {result!r}",
            )
        return result[:1]
    return result
