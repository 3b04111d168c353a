# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for tri-state checkbox conduction."""

import itertools

import pytest

from genro_treeview import (
    CheckedKeysError,
    CheckState,
    Diagnostics,
    TreeNode,
    conduct_check,
    conduct_strict,
    convert_tree_to_entities,
    parse_checked_keys,
)


def assert_tri_state(state, entities):
    """Every conductible parent agrees with its conductible children."""
    for key in entities:
        entity = entities[key]
        if entity.node.check_disabled:
            continue
        children = [c for c in entities.children_of(key) if not c.node.check_disabled]
        if not children:
            continue
        every = all(state.is_checked(c.key) for c in children)
        some = any(state.is_checked(c.key) or state.is_half_checked(c.key) for c in children)
        assert state.is_checked(key) == every, key
        assert state.is_half_checked(key) == (not every and some), key


class TestCheckState:
    """Tests for CheckState."""

    def test_sets_are_disjoint(self):
        """Test that a key both checked and half-checked is checked."""
        state = CheckState({'a', 'b'}, {'b', 'c'})
        assert state.checked_keys == frozenset({'a', 'b'})
        assert state.half_checked_keys == frozenset({'c'})
        assert state.is_checked('b')
        assert not state.is_half_checked('b')

    def test_empty(self):
        """Test the default empty state."""
        state = CheckState()
        assert not state.checked_keys
        assert not state.half_checked_keys


class TestConductCheck:
    """Tests for conduct_check."""

    def test_check_leaf_propagates_up(self, entities):
        """Test checking D half-checks its ancestors."""
        state = conduct_check(['D'], True, entities)
        assert state.checked_keys == {'D'}
        assert state.half_checked_keys == {'C', 'A'}
        assert not state.is_checked('A')

    def test_check_all_children_checks_parent(self, entities):
        """Test checking both children of C checks C."""
        state = conduct_check(['D'], True, entities)
        state = conduct_check(['E'], True, entities, state)
        assert state.checked_keys == {'C', 'D', 'E'}
        assert state.half_checked_keys == {'A'}

    def test_toggle_order_is_irrelevant(self, entities):
        """Test that every toggle order yields the same state."""
        results = set()
        for order in itertools.permutations(['D', 'E', 'B']):
            state = None
            for key in order:
                state = conduct_check([key], True, entities, state)
            results.add(state)
        assert len(results) == 1
        state = results.pop()
        assert state.checked_keys == {'A', 'B', 'C', 'D', 'E'}
        assert not state.half_checked_keys

    def test_check_propagates_down(self, entities):
        """Test checking a parent checks the whole subtree."""
        state = conduct_check(['A'], True, entities)
        assert state.checked_keys == {'A', 'B', 'C', 'D', 'E'}
        assert_tri_state(state, entities)

    def test_uncheck_descendant(self, entities):
        """Test unchecking one leaf of a checked subtree."""
        state = conduct_check(['C'], True, entities)
        state = conduct_check(['D'], False, entities, state)
        assert state.checked_keys == {'E'}
        assert state.half_checked_keys == {'C', 'A'}
        assert_tri_state(state, entities)

    def test_uncheck_everything(self, entities):
        """Test unchecking the last checked leaf clears half states."""
        state = conduct_check(['D'], True, entities)
        state = conduct_check(['D'], False, entities, state)
        assert not state.checked_keys
        assert not state.half_checked_keys

    def test_invariant_holds_for_all_toggle_sequences(self, entities):
        """Test the tri-state rule after arbitrary toggles."""
        keys = list(entities)
        for toggles in itertools.combinations(keys, 3):
            state = None
            for index, key in enumerate(toggles):
                state = conduct_check([key], index % 2 == 0, entities, state)
            assert_tri_state(state, entities)

    def test_other_root_untouched(self, entities):
        """Test that conduction stays within one tree."""
        state = conduct_check(['D'], True, entities)
        assert not state.is_checked('F')
        assert not state.is_half_checked('F')

    def test_unknown_key_reported(self, entities):
        """Test unknown keys are reported and ignored."""
        diagnostics = Diagnostics()
        state = conduct_check(['zz', 'D'], True, entities, diagnostics=diagnostics)
        assert state.checked_keys == {'D'}
        assert diagnostics.codes() == ['unknown-key']


class TestDisabledNodes:
    """Tests for nodes whose checkbox is disabled."""

    @pytest.fixture
    def maps(self):
        return convert_tree_to_entities([
            TreeNode('P', [
                TreeNode('Q', disabled=True),
                TreeNode('R'),
                TreeNode('S', disable_checkbox=True, children=[TreeNode('T')]),
            ]),
        ])

    def test_disabled_children_ignored(self, maps):
        """Test that checking P skips disabled children."""
        state = conduct_check(['P'], True, maps)
        assert state.checked_keys == {'P', 'R'}

    def test_disabled_children_do_not_block_parent(self, maps):
        """Test that the only conductible child decides the parent state."""
        state = conduct_check(['R'], True, maps)
        assert state.is_checked('P')

    def test_conduction_stops_at_disabled_node(self, maps):
        """Test that a disabled node hides its subtree from its parent."""
        state = conduct_check(['T'], True, maps)
        assert state.checked_keys == {'T'}
        assert not state.is_half_checked('S')
        assert not state.is_half_checked('P')

    def test_parent_without_conductible_children(self):
        """Test a node whose children are all disabled behaves as a leaf."""
        maps = convert_tree_to_entities([TreeNode('P', [TreeNode('Q', checkable=False)])])
        state = conduct_check(['P'], True, maps)
        assert state.checked_keys == {'P'}


class TestConductStrict:
    """Tests for strict mode."""

    def test_no_propagation(self):
        """Test that only the toggled key changes."""
        state = conduct_strict('C', True)
        assert state.checked_keys == {'C'}
        assert not state.half_checked_keys

    def test_uncheck_keeps_others(self):
        """Test unchecking keeps other keys and clears the half state."""
        previous = CheckState({'A', 'B'}, {'C'})
        state = conduct_strict('C', False, previous)
        assert state.checked_keys == {'A', 'B'}
        assert not state.half_checked_keys
        state = conduct_strict('A', False, state)
        assert state.checked_keys == {'B'}


class TestParseCheckedKeys:
    """Tests for parse_checked_keys."""

    def test_list(self):
        """Test a plain list of keys."""
        assert parse_checked_keys(['a', 'b']) == CheckState(frozenset({'a', 'b'}))

    def test_mapping(self):
        """Test a mapping with both spellings of the half-checked entry."""
        state = parse_checked_keys({'checked': ['a'], 'half_checked': ['b']})
        assert state.half_checked_keys == {'b'}
        state = parse_checked_keys({'checked': ['a'], 'halfChecked': ['c']})
        assert state.half_checked_keys == {'c'}
        assert parse_checked_keys({}) == CheckState()

    def test_none_and_state(self):
        """Test None and CheckState inputs."""
        state = CheckState(frozenset({'a'}))
        assert parse_checked_keys(None) is None
        assert parse_checked_keys(state) is state

    def test_invalid_shape(self):
        """Test unsupported shapes are reported."""
        diagnostics = Diagnostics()
        assert parse_checked_keys('abc', diagnostics) is None
        assert diagnostics.codes() == ['invalid-checked-keys']

    def test_invalid_shape_raises_in_strict_mode(self):
        """Test unsupported shapes with raise_on_error."""
        with pytest.raises(CheckedKeysError):
            parse_checked_keys(42, Diagnostics(raise_on_error=True))
