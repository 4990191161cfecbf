# nicedecor/src/nicedecor/decoration_tool/history.py

from __future__ import annotations

from typing import List, Optional

from nicedecor.utils.logging import get_logger
from .bitmap import Bitmap, Snapshot

logger = get_logger(__name__)

MAX_HISTORY = 50


class HistoryStack:
    """Bounded linear undo/redo over full-canvas snapshots.

    Snapshots above the cursor are the redo branch; the next ``commit``
    discards them. Once ``max_history`` is exceeded the oldest snapshot is
    evicted and can no longer be reached by ``undo``.
    """

    def __init__(self, max_history: int = MAX_HISTORY) -> None:
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self.max_history = max_history
        self._snapshots: List[Snapshot] = []
        self._cursor: int = -1

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        """Index of the snapshot currently shown, or -1 when empty."""
        return self._cursor

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return 0 <= self._cursor < len(self._snapshots) - 1

    @property
    def position(self) -> str:
        """Human readable ``current/total`` position."""
        return f"{self._cursor + 1}/{len(self._snapshots)}"

    def current(self) -> Optional[Snapshot]:
        if self._cursor < 0:
            return None
        return self._snapshots[self._cursor]

    def commit(self, bitmap: Bitmap) -> Snapshot:
        """Record the bitmap as the new tip, dropping any redo branch."""
        del self._snapshots[self._cursor + 1:]

        snapshot = bitmap.snapshot()
        self._snapshots.append(snapshot)

        if len(self._snapshots) > self.max_history:
            del self._snapshots[0]

        self._cursor = len(self._snapshots) - 1
        logger.debug(f"history commit: {self.position}")
        return snapshot

    def undo(self) -> Optional[Snapshot]:
        if not self.can_undo:
            return None
        self._cursor -= 1
        logger.debug(f"undo: {self.position}")
        return self._snapshots[self._cursor]

    def redo(self) -> Optional[Snapshot]:
        if not self.can_redo:
            return None
        self._cursor += 1
        logger.debug(f"redo: {self.position}")
        return self._snapshots[self._cursor]

    def clear(self) -> None:
        self._snapshots.clear()
        self._cursor = -1
