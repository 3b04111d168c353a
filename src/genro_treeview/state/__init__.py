# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""TreeState package - state controller and its building blocks.

This package provides the TreeState class and supporting modules:

- core: TreeState and RowState
- ownership: owned vs mirrored state slices
- subscription: event subscription mixin
- loading: bookkeeping of per-node async loads
"""

from .core import RowState, TreeState, row_key
from .loading import LoadTracker
from .ownership import Ownership, StateSlice
from .subscription import SubscriptionMixin

__all__ = [
    "TreeState",
    "RowState",
    "row_key",
    "LoadTracker",
    "Ownership",
    "StateSlice",
    "SubscriptionMixin",
]
