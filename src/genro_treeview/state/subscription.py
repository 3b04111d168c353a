# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Event subscription and notification for TreeState."""

from __future__ import annotations

import logging
from typing import Any, Callable

from ..events import EVENT_NAMES

logger = logging.getLogger(__name__)

SubscriberCallback = Callable[..., Any]


class SubscriptionMixin:
    """Named subscribers per event.

    Subscribers are registered under an id so that they can be replaced or
    removed. Per-event callbacks receive ``(value, info)``; an ``any``
    callback receives ``(event_name, value, info)`` for every event.

    Example:
        >>> state.subscribe('logger', expand=lambda keys, info: print(keys))
        >>> state.subscribe('audit', any=lambda evt, value, info: print(evt))
        >>> state.unsubscribe('logger')
    """

    def _init_subscriptions(self) -> None:
        self._subscribers: dict[str, dict[str, SubscriberCallback]] = {
            name: {} for name in (*EVENT_NAMES, 'any')
        }

    def subscribe(self, subscriber_id: str, **callbacks: SubscriberCallback | None) -> None:
        """Register callbacks under ``subscriber_id``.

        Args:
            subscriber_id: Identifier used to unsubscribe later.
            **callbacks: Event name to callback (None entries are ignored).

        Raises:
            ValueError: If an event name is unknown.
        """
        for name, callback in callbacks.items():
            if name not in self._subscribers:
                raise ValueError(
                    f"Unknown event '{name}'. Valid events: {[*EVENT_NAMES, 'any']}"
                )
            if callback is not None:
                self._subscribers[name][subscriber_id] = callback

    def unsubscribe(self, subscriber_id: str, *names: str) -> None:
        """Remove the callbacks of ``subscriber_id`` (all events if no names)."""
        for name in names or self._subscribers:
            self._subscribers[name].pop(subscriber_id, None)

    def _notify(self, event: str, value: Any, info: Any) -> None:
        logger.debug("Event %s: %r", event, value)
        for callback in list(self._subscribers[event].values()):
            callback(value, info)
        for callback in list(self._subscribers['any'].values()):
            callback(event, value, info)
