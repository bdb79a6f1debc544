"""An in-memory index mapping attribute keys and values to directory IDs."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from netinfo.dsattribute import Attribute
from netinfo.dsdata import INDEX_NULL, DSData, data_compare, data_equal

__all__ = ["IndexValue", "IndexKey", "Index"]


@dataclass
class IndexValue:
    """One value of a key, with the sorted directory IDs that hold it."""

    value: DSData
    dsids: List[int] = field(default_factory=list)

    def _add(self, dsid: int) -> None:
        at = bisect.bisect_left(self.dsids, dsid)
        if at == len(self.dsids) or self.dsids[at] != dsid:
            self.dsids.insert(at, dsid)

    def _discard(self, dsid: int) -> None:
        self.dsids = [d for d in self.dsids if d != dsid]


@dataclass
class IndexKey:
    """A key with its values, kept in ascending order."""

    key: DSData
    values: List[IndexValue] = field(default_factory=list)

    def _search(self, value: DSData) -> Tuple[int, bool]:
        lo, hi = 0, len(self.values)
        while lo < hi:
            mid = (lo + hi) // 2
            c = data_compare(self.values[mid].value, value)
            if c == 0:
                return mid, True
            if c < 0:
                lo = mid + 1
            else:
                hi = mid
        return lo, False

    def lookup(self, value: Optional[DSData]) -> Optional[IndexValue]:
        """The entry for ``value``, or None if it is not indexed."""
        if value is None:
            return None
        at, found = self._search(value)
        return self.values[at] if found else None

    def _ensure(self, value: DSData) -> IndexValue:
        at, found = self._search(value)
        if found:
            return self.values[at]
        entry = IndexValue(value)
        self.values.insert(at, entry)
        return entry


@dataclass
class Index:
    """Keys in insertion order, each with sorted values and IDs."""

    keys: List[IndexKey] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keys)

    def lookup_key(self, key: Optional[DSData]) -> Optional[IndexKey]:
        """The entry for ``key``, or None if it is not indexed."""
        if key is None:
            return None
        return next((k for k in self.keys if data_equal(key, k.key)), None)

    def insert_key(self, key: Optional[DSData]) -> Optional[IndexKey]:
        """Add ``key`` if absent and return its entry."""
        if key is None:
            return None
        existing = self.lookup_key(key)
        if existing is not None:
            return existing
        entry = IndexKey(key)
        self.keys.append(entry)
        return entry

    def insert(
        self, key: Optional[DSData], value: Optional[DSData], dsid: int
    ) -> None:
        """Record that ``dsid`` has ``value`` for ``key``, adding what is missing."""
        key_entry = self.insert_key(key)
        if key_entry is None or value is None:
            return
        key_entry._ensure(value)._add(dsid)

    def insert_attribute(self, attribute: Optional[Attribute], dsid: int) -> None:
        """Index every value of ``attribute`` under ``dsid``."""
        if attribute is None or dsid == INDEX_NULL:
            return
        key_entry = self.insert_key(attribute.key)
        for value in attribute.values:
            key_entry._ensure(value)._add(dsid)

    def insert_attributes(self, attributes: Iterable[Attribute], dsid: int) -> None:
        """Index all the attributes of one record."""
        for attribute in attributes:
            self.insert_attribute(attribute, dsid)

    def delete_dsid(self, dsid: int) -> None:
        """Drop ``dsid`` everywhere, and any value left with no IDs."""
        for key_entry in self.keys:
            for value_entry in key_entry.values:
                value_entry._discard(dsid)
            key_entry.values = [v for v in key_entry.values if v.dsids]

    def lookup(
        self, key: Optional[DSData], value: Optional[DSData]
    ) -> Optional[IndexValue]:
        """The entry for ``value`` under ``key``, or None."""
        key_entry = self.lookup_key(key)
        if key_entry is None:
            return None
        return key_entry.lookup(value)

    def format(self) -> str:
        """A listing of every key, value and ID."""
        lines = []
        for key_entry in self.keys:
            lines.append(f"Key: {key_entry.key.format()}\n")
            for value_entry in key_entry.values:
                ids = "".join(f" {d}" for d in value_entry.dsids)
                lines.append(f"    {value_entry.value.format()} @{ids}\n")
        return "".join(lines)