# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""File Browser - A lazily loaded directory tree rendered as text.

This example demonstrates how TreeState drives a tree widget:

- directories are loaded on first expansion through an async loader
- checkboxes are conducted through the hierarchy
- a tiny windowed renderer draws only a slice of the visible rows

Run it with:

    python examples/file_browser/file_browser.py [directory]
"""

import asyncio
import sys
from pathlib import Path

from genro_treeview import TreeConfig, TreeNode, TreeState


def path_node(path):
    """Build a node for a filesystem entry; files are leaves."""
    return TreeNode(str(path), title=path.name or str(path), is_leaf=not path.is_dir())


async def load_directory(node):
    """Attach the entries of a directory to its node."""
    entries = await asyncio.to_thread(lambda: sorted(Path(node.key).iterdir()))
    node.children.extend(path_node(entry) for entry in entries)


class TextWindow:
    """Windowed renderer printing at most ``size`` rows from ``offset``."""

    def __init__(self, offset=0, size=20):
        self.offset = offset
        self.size = size

    def render(self, data_source, item_min_height, row_key, render_row):
        lines = []
        for row in data_source[self.offset:self.offset + self.size]:
            state = render_row(row)
            box = '[x]' if state.checked else '[-]' if state.half_checked else '[ ]'
            marker = '-' if state.expanded else '+'
            if state.node.is_leaf:
                marker = ' '
            title = state.node.get_attr('title')
            lines.append(f"{' ' * (state.indent // 6)}{marker} {box} {title}")
        return '\n'.join(lines)


async def main(root):
    state = TreeState(
        [path_node(root)],
        TreeConfig(checkable=True, inline_indent=12),
        load_data=load_directory,
    )
    state.subscribe('console', load=lambda keys, info: print(f"loaded {info.node.key}"))

    task = state.expand(str(root))
    if task is not None:
        await task
    for row in state.visible[1:3]:
        task = state.expand(row.key)
        if task is not None:
            await task
    if len(state.visible) > 1:
        state.check(state.visible[1].key)

    print(state.render(TextWindow()))
    print(f"checked: {len(state.checked_keys)}, half: {state.half_checked_keys}")


if __name__ == '__main__':
    asyncio.run(main(Path(sys.argv[1] if len(sys.argv) > 1 else '.').resolve()))
