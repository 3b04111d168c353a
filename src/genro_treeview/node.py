# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeView node classes."""

from __future__ import annotations

from typing import Any, Iterable, Iterator

from .keys import Key

# Attributes that override the tree-wide capabilities of a single node
CAPABILITY_ATTRS = ('selectable', 'checkable', 'disabled', 'disable_checkbox', 'is_leaf')


class TreeNode:
    """A record in a tree forest.

    Each node has:
    - key: Optional explicit key (falls back to the position path)
    - children: Ordered list of child TreeNode instances
    - attr: Open dictionary of attributes (title, icon, capability overrides...)

    Example:
        >>> node = TreeNode('docs', [TreeNode('readme')], title='Docs')
        >>> node.key
        'docs'
        >>> node.get_attr('title')
        'Docs'
    """

    __slots__ = ('key', 'children', 'attr')

    def __init__(
        self,
        key: Key | None = None,
        children: list[Any] | None = None,
        attr: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize a TreeNode.

        Args:
            key: Explicit key. If None, the node is keyed by its position.
            children: Ordered child nodes.
            attr: Optional dictionary of attributes.
            **kwargs: Additional attributes as keyword arguments.
        """
        self.key = key
        self.children = list(children) if children else []
        self.attr = dict(attr) if attr else {}
        self.attr.update(kwargs)

    def __repr__(self) -> str:
        return f"TreeNode({self.key!r}, children={len(self.children)})"

    def __iter__(self) -> Iterator[Any]:
        """Iterate over direct children in order."""
        return iter(self.children)

    def __len__(self) -> int:
        return len(self.children)

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    # ==================== Capabilities ====================

    @property
    def selectable(self) -> bool:
        return self.attr.get('selectable', True) is not False

    @property
    def disabled(self) -> bool:
        return bool(self.attr.get('disabled', False))

    @property
    def check_disabled(self) -> bool:
        """True if the checkbox of this node does not take part in conduction."""
        return (
            self.disabled
            or bool(self.attr.get('disable_checkbox', False))
            or self.attr.get('checkable', True) is False
        )

    @property
    def is_leaf(self) -> bool:
        """True if the node is explicitly marked as a leaf (never loaded)."""
        return self.attr.get('is_leaf') is True

    # ==================== Attributes ====================

    def get_attr(self, attr: str | None = None, default: Any = None) -> Any:
        """Get attribute value or all attributes.

        Args:
            attr: Attribute name. If None, returns all attributes.
            default: Default value if attribute not found.

        Returns:
            Attribute value, default, or dict of all attributes.
        """
        if attr is None:
            return self.attr
        return self.attr.get(attr, default)

    def set_attr(self, _attr: dict[str, Any] | None = None, **kwargs: Any) -> None:
        """Set attributes on the node.

        Args:
            _attr: Dictionary of attributes to set.
            **kwargs: Additional attributes as keyword arguments.
        """
        if _attr:
            self.attr.update(_attr)
        self.attr.update(kwargs)

    # ==================== Conversion ====================

    @classmethod
    def from_data(cls, data: dict[str, Any]) -> TreeNode:
        """Build a node (and its subtree) from a nested dict.

        The ``key`` and ``children`` entries are structural; every other
        entry becomes an attribute.

        Example:
            >>> node = TreeNode.from_data({'key': 'a', 'title': 'A',
            ...                            'children': [{'key': 'b'}]})
            >>> node.children[0].key
            'b'
        """
        attrs = {k: v for k, v in data.items() if k not in ('key', 'children')}
        children = nodes_from_data(data.get('children') or [])
        return cls(data.get('key'), children, attrs)

    def as_dict(self) -> dict[str, Any]:
        """Convert back to a nested dict (recursive)."""
        result: dict[str, Any] = dict(self.attr)
        if self.key is not None:
            result['key'] = self.key
        if self.children:
            result['children'] = [
                child.as_dict() if isinstance(child, TreeNode) else child
                for child in self.children
            ]
        return result


def nodes_from_data(items: Iterable[Any]) -> list[Any]:
    """Convert a list of nested dicts into a TreeNode forest.

    TreeNode instances pass through unchanged. Anything that is neither a
    dict nor a TreeNode is kept as is so that indexing can report it.

    Example:
        >>> forest = nodes_from_data([{'key': 'a', 'children': [{'key': 'b'}]}])
        >>> forest[0].children[0].key
        'b'
    """
    result: list[Any] = []
    for item in items:
        if isinstance(item, dict):
            result.append(TreeNode.from_data(item))
        else:
            result.append(item)
    return result


def is_valid_key(key: Any) -> bool:
    """True if ``key`` can identify a node (None means 'use the position')."""
    if key is None:
        return True
    if isinstance(key, bool):
        return False
    return isinstance(key, (str, int))


def tree_children(children: Iterable[Any]) -> Iterator[TreeNode]:
    """Yield the children that take part in the tree structure.

    Only TreeNode instances with a derivable key count; sibling indices
    (and therefore position paths) are assigned over this filtered sequence.
    """
    for child in children:
        if isinstance(child, TreeNode) and is_valid_key(child.key):
            yield child
