"""Focus ring: ordered focusable panels with a cursor.

The ring owns the ordering, not the widgets: handles are opaque and the
panel-composition layer owns their lifetime. The ring never moves UI
focus itself; callers focus the returned entry's handle.

// [LAW:single-enforcer] Index clamping happens in _clamp() after every mutation.
"""

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FocusEntry:
    """A focusable element and the action that jumps to it."""

    handle: Any
    action: str


class FocusRing:
    """Ordered sequence of FocusEntry with a current index.

    Invariant: 0 <= index < len(entries) when non-empty, index == 0 when empty.
    """

    def __init__(self, entries=()):
        self._entries: list[FocusEntry] = list(entries)
        self._index = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[FocusEntry]:
        return iter(list(self._entries))

    @property
    def index(self) -> int:
        return self._index

    @property
    def current(self) -> FocusEntry | None:
        if not self._entries:
            return None
        return self._entries[self._index]

    def _clamp(self) -> None:
        if not self._entries:
            self._index = 0
        else:
            self._index = max(0, min(self._index, len(self._entries) - 1))

    def append(self, entry: FocusEntry) -> None:
        self._entries.append(entry)
        self._clamp()

    def remove_where(self, predicate: Callable[[FocusEntry], bool]) -> int:
        """Remove all matching entries, preserving survivor order.

        The index follows the current entry when it survives; otherwise it is
        clamped. Returns the number of entries removed.
        """
        current = self.current
        survivors = [e for e in self._entries if not predicate(e)]
        removed = len(self._entries) - len(survivors)
        if not removed:
            return 0

        if current is not None and current in survivors:
            self._entries = survivors
            self._index = survivors.index(current)
        else:
            # Entries before the cursor that were dropped shift it left.
            dropped_before = sum(
                1 for e in self._entries[: self._index] if predicate(e)
            )
            self._entries = survivors
            self._index -= dropped_before
        self._clamp()
        return removed

    def advance(self) -> FocusEntry | None:
        if not self._entries:
            return None
        self._index = (self._index + 1) % len(self._entries)
        return self._entries[self._index]

    def focus_by_action(self, action: str) -> FocusEntry | None:
        for i, entry in enumerate(self._entries):
            if entry.action == action:
                self._index = i
                return entry
        return None

    def index_of(self, handle) -> int | None:
        for i, entry in enumerate(self._entries):
            if entry.handle is handle:
                return i
        return None

    def sync_to(self, handle) -> bool:
        """Point the cursor at handle's entry (focus moved by other means)."""
        i = self.index_of(handle)
        if i is None:
            return False
        self._index = i
        return True

    def has_action(self, action: str) -> bool:
        return any(e.action == action for e in self._entries)

    def reset(self) -> None:
        self._index = 0
