# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Tests for asynchronous node loading."""

import asyncio
import gc

import pytest

from genro_treeview import LoadError, TreeConfig, TreeState
from genro_treeview.state import LoadTracker


class Loader:
    """Loader recording calls; appends a child to the loaded node."""

    def __init__(self, fail=None):
        self.calls = []
        self.fail = fail

    async def __call__(self, node):
        self.calls.append(node.key)
        await asyncio.sleep(0)
        if self.fail is not None:
            raise self.fail
        node.children.append(type(node)(f'{node.key}.child'))


class TestLoadTracker:
    """Tests for LoadTracker bookkeeping."""

    def test_begin_end(self):
        """Test loading keys are tracked until the load ends."""
        tracker = LoadTracker()
        assert tracker.can_load('a', [])
        tracker.begin('a')
        assert 'a' in tracker
        assert not tracker.can_load('a', [])
        tracker.end('a')
        assert len(tracker) == 0
        assert not tracker.can_load('a', ['a'])


class TestLoad:
    """Tests for loads triggered by expansion."""

    def test_expand_triggers_load(self, tree_data):
        """Test the first expansion loads the node once."""
        loader = Loader()
        state = TreeState(tree_data, load_data=loader)
        events = []
        state.subscribe('ui', load=lambda keys, info: events.append((keys, info.node.key)))

        async def main():
            task = state.expand('B')
            assert state.loading_keys == ['B']
            assert state.row(state.visible[0]).key == 'A'
            await task

        asyncio.run(main())
        assert loader.calls == ['B']
        assert state.loaded_keys == ['B']
        assert state.loading_keys == []
        assert events == [(['B'], 'B')]

    def test_loaded_children_become_visible(self, tree_data):
        """Test the visible rows are refreshed after a load."""
        state = TreeState(tree_data, load_data=Loader(), default_expanded_keys=['A'])

        async def main():
            await state.expand('B')

        asyncio.run(main())
        assert [row.key for row in state.visible] == ['A', 'B', 'B.child', 'C', 'F']

    def test_load_is_idempotent(self, tree_data):
        """Test a node loading or loaded is never loaded again."""
        loader = Loader()
        state = TreeState(tree_data, load_data=loader)

        async def main():
            first = state.expand('B')
            state.expand('B', False)
            assert state.expand('B') is None
            await first
            state.expand('B', False)
            assert state.expand('B') is None
            assert await state.load('B') is False

        asyncio.run(main())
        assert loader.calls == ['B']

    def test_collapse_does_not_load(self, tree_data):
        """Test collapsing never triggers a load."""
        loader = Loader()
        state = TreeState(tree_data, load_data=loader, default_expanded_keys=['A'])

        async def main():
            assert state.expand('A') is None

        asyncio.run(main())
        assert loader.calls == []

    def test_leaf_not_loaded(self):
        """Test nodes marked as leaves are never loaded."""
        loader = Loader()
        state = TreeState([{'key': 'a', 'is_leaf': True}], load_data=loader)

        async def main():
            assert state.expand('a') is None
            assert await state.load('a') is False

        asyncio.run(main())
        assert loader.calls == []

    def test_mirrored_loaded_keys(self, tree_data):
        """Test supplied loaded keys are respected."""
        loader = Loader()
        state = TreeState(tree_data, load_data=loader, loaded_keys=['B'])

        async def main():
            assert state.expand('B') is None
            await state.load('C')

        asyncio.run(main())
        assert loader.calls == ['C']
        assert state.loaded_keys == ['B']

    def test_direct_load(self, tree_data):
        """Test load() without expansion."""
        state = TreeState(tree_data, load_data=Loader())
        assert asyncio.run(state.load('F')) is True
        assert state.loaded_keys == ['F']
        assert state.expanded_keys == []

    def test_no_loader(self, tree_data):
        """Test load() without a loader."""
        state = TreeState(tree_data)
        assert asyncio.run(state.load('F')) is False

    def test_expand_without_event_loop(self, tree_data):
        """Test a load can not start outside a running loop."""
        state = TreeState(tree_data, load_data=Loader())
        with pytest.raises(RuntimeError):
            state.expand('B')

    def test_concurrent_loads(self, tree_data):
        """Test distinct keys load independently, in completion order."""
        gates = {}

        async def loader(node):
            await gates[node.key].wait()

        state = TreeState(tree_data, load_data=loader)

        async def main():
            gates['B'] = asyncio.Event()
            gates['F'] = asyncio.Event()
            state.expand('B')
            state.expand('F')
            assert state.loading_keys == ['B', 'F']
            gates['F'].set()
            await asyncio.sleep(0)
            await asyncio.sleep(0)
            assert state.loading_keys == ['B']
            gates['B'].set()
            await state.wait_loads()

        asyncio.run(main())
        assert state.loaded_keys == ['F', 'B']
        assert state.loading_keys == []


class TestLoadFailure:
    """Tests for failing loaders."""

    def test_failure_clears_loading(self, tree_data):
        """Test a failed load leaves the node retryable and reports it."""
        loader = Loader(fail=ValueError('boom'))
        state = TreeState(tree_data, load_data=loader)
        errors = []
        state.subscribe('ui', load_error=lambda keys, info: errors.append(info))

        async def main():
            task = state.expand('B')
            with pytest.raises(LoadError) as excinfo:
                await task
            return excinfo.value

        error = asyncio.run(main())
        assert isinstance(error.__cause__, ValueError)
        assert state.loading_keys == []
        assert state.loaded_keys == []
        assert len(errors) == 1
        assert errors[0].node.key == 'B'
        assert isinstance(errors[0].error, ValueError)
        assert state.diagnostics.codes() == ['load-failed']

        loader.fail = None
        assert asyncio.run(state.load('B')) is True
        assert loader.calls == ['B', 'B']
        assert state.loaded_keys == ['B']

    def test_failure_in_strict_mode(self, tree_data):
        """Test raise_on_error still raises LoadError without collecting."""
        state = TreeState(
            tree_data, TreeConfig(raise_on_error=True), load_data=Loader(fail=OSError('down'))
        )
        with pytest.raises(LoadError, match='down'):
            asyncio.run(state.load('B'))
        assert len(state.diagnostics) == 0
        assert state.loading_keys == []

    def test_wait_loads_swallows_failures(self, tree_data):
        """Test wait_loads settles failed loads without raising."""
        state = TreeState(tree_data, load_data=Loader(fail=ValueError('boom')))

        async def main():
            state.expand('B')
            await state.wait_loads()

        asyncio.run(main())
        assert state.loading_keys == []

    def test_loading_cleared_before_load_error(self, tree_data):
        """Test load_error subscribers see the node no longer loading."""
        state = TreeState(tree_data, load_data=Loader(fail=ValueError('boom')))
        seen = []
        state.subscribe('ui', load_error=lambda keys, info: seen.append(state.loading_keys))
        with pytest.raises(LoadError):
            asyncio.run(state.load('B'))
        assert seen == [[]]

    def test_unawaited_failure_not_reported_to_loop(self, tree_data):
        """Test a failed load started by expand() never reaches the loop handler."""
        state = TreeState(tree_data, load_data=Loader(fail=ValueError('boom')))
        errors = []
        handled = []
        state.subscribe('ui', load_error=lambda keys, info: errors.append(info.node.key))

        async def main():
            asyncio.get_running_loop().set_exception_handler(
                lambda loop, context: handled.append(context['message'])
            )
            state.expand('B')
            await asyncio.sleep(0.05)
            await state.wait_loads()
            gc.collect()
            await asyncio.sleep(0)

        asyncio.run(main())
        assert errors == ['B']
        assert handled == []
