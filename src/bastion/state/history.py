"""
Command execution history.

A capacity-bounded ring of raw input lines. The oldest entries are
evicted first once the capacity is exceeded. Entries keep their
absolute sequence number so `history` listings stay stable while the
ring rolls over.
"""

from collections import deque
from typing import Iterator

DEFAULT_HISTORY_LIMIT = 100


class CommandHistory:
    """Append-only FIFO ring of submitted command lines."""

    def __init__(self, capacity: int = DEFAULT_HISTORY_LIMIT):
        if capacity < 1:
            raise ValueError("history capacity must be at least 1")
        self.capacity = capacity
        self._entries: deque[str] = deque(maxlen=capacity)
        self._total = 0

    def append(self, line: str) -> None:
        """Record a raw input line."""
        self._entries.append(line)
        self._total += 1

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    @property
    def total(self) -> int:
        """Number of lines ever appended, including evicted ones."""
        return self._total

    def entries(self) -> list[str]:
        """Retained entries, oldest first."""
        return list(self._entries)

    def recent(self, limit: int = 10) -> list[tuple[int, str]]:
        """
        The most recent entries with their absolute 1-based positions.

        Args:
            limit: Maximum number of entries to return

        Returns:
            List of (position, line), oldest first
        """
        if limit <= 0:
            return []
        first = self._total - len(self._entries) + 1
        numbered = [(first + i, line) for i, line in enumerate(self._entries)]
        return numbered[-limit:]
