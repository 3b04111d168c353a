# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Bookkeeping of per-node asynchronous loads.

A node is loaded at most once: a key that is already loading or already
loaded is never triggered again. Loads of distinct keys are independent and
may complete in any order.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Iterator

from ..keys import Key


def _retrieve_exception(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class LoadTracker:
    """Keys currently loading, and the tasks running their loads."""

    __slots__ = ('_loading', '_tasks')

    def __init__(self) -> None:
        self._loading: dict[Key, None] = {}
        self._tasks: dict[Key, asyncio.Task] = {}

    def __contains__(self, key: Key) -> bool:
        return key in self._loading

    def __iter__(self) -> Iterator[Key]:
        return iter(self._loading)

    def __len__(self) -> int:
        return len(self._loading)

    @property
    def loading_keys(self) -> list[Key]:
        return list(self._loading)

    def can_load(self, key: Key, loaded_keys: Iterable[Key]) -> bool:
        """True if ``key`` is neither loading nor loaded."""
        return key not in self._loading and key not in set(loaded_keys)

    def begin(self, key: Key) -> None:
        self._loading[key] = None

    def end(self, key: Key) -> None:
        self._loading.pop(key, None)
        self._tasks.pop(key, None)

    def track(self, key: Key, task: asyncio.Task) -> asyncio.Task:
        """Remember the task running the load of ``key``.

        The exception of a failed task is marked as retrieved: failures
        surface as load_error events, not through the loop exception handler.
        """
        task.add_done_callback(_retrieve_exception)
        self._tasks[key] = task
        return task

    async def join(self) -> None:
        """Wait for every tracked load, failures included."""
        tasks = list(self._tasks.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
