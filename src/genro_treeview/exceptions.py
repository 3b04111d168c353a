# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView exceptions."""

from __future__ import annotations


class TreeViewError(Exception):
    """Base exception for TreeView errors."""

    pass


class InvalidNodeError(TreeViewError):
    """Raised when a child is not a tree node or has no derivable key."""

    pass


class DuplicateKeyError(TreeViewError):
    """Raised when two nodes share the same key."""

    pass


class UnknownKeyError(TreeViewError, KeyError):
    """Raised when an operation targets a key that is not in the tree."""

    pass


class InvalidDropError(TreeViewError):
    """Raised when a node is dropped onto itself or one of its descendants."""

    pass


class SelectionError(TreeViewError):
    """Raised when a selection is inconsistent with the selection mode."""

    pass


class CheckedKeysError(TreeViewError):
    """Raised when checked keys are supplied in an unsupported shape."""

    pass


class LoadError(TreeViewError):
    """Raised when the loader of a node fails."""

    pass
