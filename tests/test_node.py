# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for TreeNode and key helpers."""

from genro_treeview import TreeNode, nodes_from_data
from genro_treeview.keys import (
    add_key,
    get_position,
    parse_position,
    position_index,
    position_level,
    remove_key,
)
from genro_treeview.node import is_valid_key, tree_children


class TestTreeNode:
    """Tests for TreeNode."""

    def test_create_node_defaults(self):
        """Test node creation with default values."""
        node = TreeNode()
        assert node.key is None
        assert node.children == []
        assert node.attr == {}
        assert not node.has_children

    def test_kwargs_become_attributes(self):
        """Test that keyword arguments are merged into attr."""
        node = TreeNode('docs', attr={'icon': 'folder'}, title='Docs')
        assert node.get_attr('title') == 'Docs'
        assert node.get_attr() == {'icon': 'folder', 'title': 'Docs'}
        assert node.get_attr('missing', 'x') == 'x'

    def test_set_attr(self):
        """Test set_attr with dict and kwargs."""
        node = TreeNode('a')
        node.set_attr({'color': 'red'}, size=3)
        assert node.attr == {'color': 'red', 'size': 3}

    def test_iteration_and_len(self):
        """Test iterating over children."""
        node = TreeNode('a', [TreeNode('b'), TreeNode('c')])
        assert [child.key for child in node] == ['b', 'c']
        assert len(node) == 2

    def test_capabilities_default(self):
        """Test capability defaults."""
        node = TreeNode('a')
        assert node.selectable is True
        assert node.disabled is False
        assert node.check_disabled is False
        assert node.is_leaf is False

    def test_capability_overrides(self):
        """Test per-node capability attributes."""
        assert TreeNode('a', selectable=False).selectable is False
        assert TreeNode('a', disabled=True).check_disabled is True
        assert TreeNode('a', disable_checkbox=True).check_disabled is True
        assert TreeNode('a', checkable=False).check_disabled is True
        assert TreeNode('a', is_leaf=True).is_leaf is True

    def test_from_data_and_back(self):
        """Test conversion from nested dicts and back."""
        data = {'key': 'a', 'title': 'A', 'children': [{'key': 'b'}, {'title': 'anon'}]}
        node = TreeNode.from_data(data)
        assert node.key == 'a'
        assert node.attr == {'title': 'A'}
        assert node.children[1].key is None
        assert node.as_dict() == data

    def test_nodes_from_data_passes_through(self):
        """Test that TreeNodes and malformed entries are kept as is."""
        existing = TreeNode('x')
        forest = nodes_from_data([{'key': 'a'}, existing, 42])
        assert forest[0].key == 'a'
        assert forest[1] is existing
        assert forest[2] == 42


class TestKeys:
    """Tests for key validation and position helpers."""

    def test_valid_keys(self):
        """Test which values can identify a node."""
        assert is_valid_key('a')
        assert is_valid_key(0)
        assert is_valid_key(None)
        assert not is_valid_key(True)
        assert not is_valid_key(1.5)
        assert not is_valid_key(('a',))

    def test_tree_children_filters(self):
        """Test that only well-formed nodes take part in the structure."""
        good = TreeNode('a')
        children = [good, 'text', TreeNode(['bad']), TreeNode(7)]
        assert [child.key for child in tree_children(children)] == ['a', 7]

    def test_positions(self):
        """Test building and parsing position paths."""
        assert get_position('0', 1) == '0-1'
        assert get_position('0-1', 0) == '0-1-0'
        assert parse_position('0-1-0') == [1, 0]
        assert parse_position('0') == []
        assert position_level('0-1') == 0
        assert position_level('0-1-0') == 1
        assert position_index('0-1-3') == 3

    def test_add_remove_key(self):
        """Test key list helpers return new lists."""
        keys = ['a', 'b']
        assert add_key(keys, 'c') == ['a', 'b', 'c']
        assert add_key(keys, 'a') == ['a', 'b']
        assert remove_key(['a', 'b', 'a'], 'a') == ['b']
        assert keys == ['a', 'b']
