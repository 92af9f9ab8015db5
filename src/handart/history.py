"""Snapshot-based undo/redo."""

from __future__ import annotations

from typing import Optional

import numpy as np


class DrawingHistory:
    """Bounded list of full-surface snapshots with a cursor.

    The cursor points at the snapshot currently shown and ranges over
    [-1, len - 1], -1 meaning nothing has been committed yet. Committing
    after an undo discards the redo branch. When the list grows past
    ``capacity`` the oldest snapshot is evicted and the cursor re-based.
    """

    def __init__(self, capacity: int = 50):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._snapshots: list[np.ndarray] = []
        self._cursor = -1

    def commit(self, snapshot: np.ndarray):
        self._cursor += 1
        if self._cursor < len(self._snapshots):
            del self._snapshots[self._cursor:]
        self._snapshots.append(snapshot)

        if len(self._snapshots) > self.capacity:
            self._snapshots.pop(0)
            self._cursor = self.capacity - 1

    def undo(self) -> Optional[np.ndarray]:
        if self._cursor <= 0:
            return None
        self._cursor -= 1
        return self._snapshots[self._cursor]

    def redo(self) -> Optional[np.ndarray]:
        if self._cursor >= len(self._snapshots) - 1:
            return None
        self._cursor += 1
        return self._snapshots[self._cursor]

    def clear(self):
        self._snapshots = []
        self._cursor = -1

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> Optional[np.ndarray]:
        if self._cursor < 0:
            return None
        return self._snapshots[self._cursor]

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def __len__(self) -> int:
        return len(self._snapshots)
