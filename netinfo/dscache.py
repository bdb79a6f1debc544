"""A bounded record cache that keeps the records with the most children."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

__all__ = ["RecordCache", "DEFAULT_CAPACITY", "MIN_MERIT"]

DEFAULT_CAPACITY = 1000
MIN_MERIT = 1
_ROOT_MERIT = 0xFFFFFFFF


def _merit(record: Any) -> int:
    if record.dsid == 0:
        return _ROOT_MERIT
    return record.sub_count


@dataclass
class _Entry:
    merit: int
    record: Any


class RecordCache:
    """Records ordered by merit; the lowest-merit record is evicted first.

    A record needs ``dsid`` and ``sub_count`` attributes. Its merit is its
    child count; the root (dsid 0) ranks above everything.
    """

    def __init__(self, capacity: int = 0) -> None:
        self.capacity = capacity if capacity else DEFAULT_CAPACITY
        self._entries: List[_Entry] = []
        self.prune_count = 0
        self.save_count = 0
        self.remove_count = 0
        self.fetch_count = 0

    def __len__(self) -> int:
        return len(self._entries)

    def _prune(self, count: int) -> None:
        for _ in range(min(count, len(self._entries))):
            self.prune_count += 1
            del self._entries[0]

    def flush(self) -> None:
        """Drop every cached record."""
        self._prune(len(self._entries))

    def save(self, record: Any) -> None:
        """Cache ``record`` if it has enough merit to earn a place."""
        if record is None:
            return
        merit = _merit(record)
        if merit < MIN_MERIT:
            return
        if len(self._entries) >= self.capacity:
            if self._entries and merit < self._entries[0].merit:
                return
            self._prune(1)
        self.save_count += 1
        position = next(
            (i for i, e in enumerate(self._entries) if merit < e.merit),
            len(self._entries),
        )
        self._entries.insert(position, _Entry(merit, record))

    def remove(self, dsid: int) -> None:
        """Drop the first cached record with this ID, if any."""
        for i, entry in enumerate(self._entries):
            if entry.record.dsid == dsid:
                self.remove_count += 1
                del self._entries[i]
                return

    def fetch(self, dsid: int) -> Optional[Any]:
        """The cached record with this ID, or None."""
        for entry in self._entries:
            if entry.record.dsid == dsid:
                self.fetch_count += 1
                return entry.record
        return None

    def format_statistics(self) -> str:
        """The cache size followed by each record's ID and merit."""
        lines = [f"cache_size = {len(self._entries)}\n"]
        lines.extend(
            f"{i}: {e.record.dsid} {e.merit}\n" for i, e in enumerate(self._entries)
        )
        return "".join(lines)