"""A record attribute: a key with an ordered list of values."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import List, Optional

from netinfo.dsdata import DataType, DSData, data_equal

__all__ = ["Attribute"]

_WORD = struct.Struct(">I")
_HEADER = struct.Struct(">II")


def _encode(value: DSData) -> bytes:
    return _HEADER.pack(int(value.type), value.length) + value.data


def _decode(raw: bytes, offset: int) -> tuple:
    try:
        data_type, length = _HEADER.unpack_from(raw, offset)
    except struct.error as exc:
        raise ValueError("truncated attribute data") from exc
    offset += _HEADER.size
    payload = raw[offset:offset + length]
    if len(payload) < length:
        raise ValueError("truncated attribute data")
    return DSData(data_type, payload), offset + length


@dataclass
class Attribute:
    """A key and its values, in order."""

    key: DSData
    values: List[DSData] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.key is None:
            raise ValueError("an attribute needs a key")
        self.values = list(self.values)

    def __len__(self) -> int:
        return len(self.values)

    def copy(self) -> "Attribute":
        """An independent copy of this attribute."""
        return Attribute(self.key, list(self.values))

    def insert(self, value: DSData, where: int) -> None:
        """Insert ``value`` before position ``where``; beyond the end appends."""
        if where < 0:
            raise ValueError(f"negative position {where}")
        self.values.insert(min(where, len(self.values)), value)

    def append(self, value: DSData) -> None:
        """Add ``value`` at the end."""
        self.values.append(value)

    def remove(self, where: int) -> None:
        """Remove the value at ``where``; a position past the end is ignored."""
        if 0 <= where < len(self.values):
            del self.values[where]

    def merge(self, value: DSData) -> None:
        """Append ``value`` unless an equal value is already present."""
        if self.index(value) is None:
            self.values.append(value)

    def index(self, value: Optional[DSData]) -> Optional[int]:
        """Position of the first value equal to ``value``, or None."""
        if value is None:
            return None
        return next(
            (i for i, existing in enumerate(self.values) if data_equal(existing, value)),
            None,
        )

    def value(self, where: int) -> Optional[DSData]:
        """The value at ``where``, or None if there is none."""
        if 0 <= where < len(self.values):
            return self.values[where]
        return None

    def _contains(self, value: DSData) -> bool:
        return any(data_equal(existing, value) for existing in self.values)

    def match(self, pattern: Optional["Attribute"]) -> bool:
        """True if keys agree and every value of ``pattern`` is present here."""
        if pattern is None or pattern is self:
            return True
        if not data_equal(self.key, pattern.key):
            return False
        return all(self._contains(v) for v in pattern.values)

    def equals(self, other: Optional["Attribute"]) -> bool:
        """True if keys agree and both hold the same values in any order."""
        if other is self:
            return True
        if other is None:
            return False
        if len(self.values) != len(other.values):
            return False
        if not data_equal(self.key, other.key):
            return False
        return all(other._contains(v) for v in self.values)

    def to_data(self) -> DSData:
        """Serialise into a machine-independent value."""
        parts = [_encode(self.key), _WORD.pack(len(self.values))]
        parts.extend(_encode(v) for v in self.values)
        return DSData(DataType.DS_ATTRIBUTE, b"".join(parts))

    @classmethod
    def from_data(cls, data: DSData) -> "Attribute":
        """Rebuild an attribute from :meth:`to_data` output."""
        if data.type != DataType.DS_ATTRIBUTE:
            raise ValueError(f"value of type {data.type} is not an attribute")
        raw = data.data
        key, offset = _decode(raw, 0)
        try:
            (count,) = _WORD.unpack_from(raw, offset)
        except struct.error as exc:
            raise ValueError("truncated attribute data") from exc
        offset += _WORD.size
        values = []
        for _ in range(count):
            value, offset = _decode(raw, offset)
            values.append(value)
        return cls(key, values)