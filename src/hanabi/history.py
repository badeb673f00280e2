"""Undo history as a stack of whole game-state snapshots."""

from __future__ import annotations

from .models import GameState


class GameHistory:
    """Snapshot stack for undo.

    Transitions never mutate their input, so the state before an action can
    be kept as-is and restored later. Only game actions should be pushed;
    navigation and settings changes are not undoable.
    """

    def __init__(self, max_depth: int = 100):
        self.max_depth = max_depth
        self._snapshots: list[GameState] = []

    def push(self, state: GameState) -> None:
        """Remember the state as it was before an action."""
        self._snapshots.append(state)
        if len(self._snapshots) > self.max_depth:
            del self._snapshots[0]

    def undo(self) -> GameState | None:
        """Pop the most recent snapshot, or None if there is nothing to undo."""
        if not self._snapshots:
            return None
        return self._snapshots.pop()

    @property
    def can_undo(self) -> bool:
        return bool(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def clear(self) -> None:
        """Reset history (for a new game)."""
        self._snapshots.clear()
