# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Shared fixtures for TreeView tests."""

import pytest

from genro_treeview import ManualScheduler, TreeNode, convert_tree_to_entities


def build_forest():
    """Tree A[B, C[D, E]] plus a second root F[G]."""
    return [
        TreeNode('A', [
            TreeNode('B'),
            TreeNode('C', [TreeNode('D'), TreeNode('E')]),
        ]),
        TreeNode('F', [TreeNode('G')]),
    ]


@pytest.fixture
def forest():
    return build_forest()


@pytest.fixture
def entities(forest):
    return convert_tree_to_entities(forest)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def tree_data():
    """The same tree as build_forest(), as nested dicts."""
    return [
        {'key': 'A', 'title': 'Alpha', 'children': [
            {'key': 'B', 'title': 'Beta'},
            {'key': 'C', 'title': 'Gamma', 'children': [
                {'key': 'D', 'title': 'Delta'},
                {'key': 'E', 'title': 'Epsilon'},
            ]},
        ]},
        {'key': 'F', 'title': 'Phi', 'children': [{'key': 'G', 'title': 'Gimel'}]},
    ]
