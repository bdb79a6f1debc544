"""Typed, length-delimited values used throughout the directory store."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

__all__ = [
    "DataType",
    "DSData",
    "INDEX_NULL",
    "STORAGE_HEADER_SIZE",
    "is_string_type",
    "is_case_string_type",
    "is_utf8_type",
    "comparable_types",
    "data_equal",
    "data_compare",
    "data_compare_sub",
    "cstring_to_data",
    "casecstring_to_data",
    "utf8string_to_data",
    "caseutf8string_to_data",
]

INDEX_NULL = 0xFFFFFFFF

# Size of the stored type and length fields.
STORAGE_HEADER_SIZE = 8


class DataType(IntEnum):
    """Type tags carried by every value."""

    NIL = 0
    BLOB = 1
    BOOL = 2
    INT = 3
    UINT = 4
    FLOAT = 5
    CSTR = 6
    UTF8_STR = 7
    CASE_CSTR = 8
    CASE_UTF8_STR = 9
    INT8_ARRAY = 64
    UINT8_ARRAY = 65
    INT16_ARRAY = 66
    UINT16_ARRAY = 67
    INT32_ARRAY = 68
    UINT32_ARRAY = 69
    INT64_ARRAY = 70
    UINT64_ARRAY = 71
    DS_REFERENCE = 251
    CPTR = 252
    DIRECTORY_ID = 253
    DS_ATTRIBUTE = 254
    ANY = 255
    DS_RECORD = 256


_STRING_TYPES = frozenset(
    {DataType.CSTR, DataType.CASE_CSTR, DataType.UTF8_STR, DataType.CASE_UTF8_STR}
)
_CASE_TYPES = frozenset({DataType.CASE_CSTR, DataType.CASE_UTF8_STR})
_UTF8_TYPES = frozenset({DataType.UTF8_STR, DataType.CASE_UTF8_STR})

_SIGNED_FORMATS = {1: ">b", 2: ">h", 4: ">i", 8: ">q"}
_UNSIGNED_FORMATS = {1: ">B", 2: ">H", 4: ">I", 8: ">Q"}


def is_string_type(data_type: int) -> bool:
    """True for any of the four string types."""
    return data_type in _STRING_TYPES


def is_case_string_type(data_type: int) -> bool:
    """True for the case-insensitive string types."""
    return data_type in _CASE_TYPES


def is_utf8_type(data_type: int) -> bool:
    """True for the UTF-8 string types."""
    return data_type in _UTF8_TYPES


def comparable_types(t1: int, t2: int) -> bool:
    """Whether a value of type ``t2`` may be compared against one of type ``t1``."""
    if t2 == DataType.ANY:
        return True
    return (is_string_type(t1) and is_string_type(t2)) or t1 == t2


def _sign(x, y) -> int:
    return (x > y) - (x < y)


def _until_nul(raw: bytes, limit: Optional[int] = None) -> bytes:
    segment = raw if limit is None else raw[:limit]
    end = segment.find(b"\0")
    return segment if end < 0 else segment[:end]


def _strncmp(a: bytes, b: bytes, limit: int, casefold: bool) -> int:
    sa = _until_nul(a, max(limit, 0))
    sb = _until_nul(b, max(limit, 0))
    if casefold:
        sa, sb = sa.lower(), sb.lower()
    return _sign(sa, sb)


def _utf8_compare(a: bytes, b: bytes, casefold: bool) -> int:
    sa = _until_nul(a).decode("utf-8", "surrogateescape")
    sb = _until_nul(b).decode("utf-8", "surrogateescape")
    if casefold:
        sa, sb = sa.casefold(), sb.casefold()
    return _sign(sa, sb)


@dataclass(frozen=True)
class DSData:
    """A typed value: a type tag and its raw big-endian bytes."""

    type: int
    data: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    @property
    def length(self) -> int:
        return len(self.data)

    def size(self) -> int:
        """Stored size of this value, header included."""
        return self.length + STORAGE_HEADER_SIZE

    def insert(self, other: Optional["DSData"], where: int, length: int) -> "DSData":
        """Return a new value with up to ``length`` bytes of ``other`` inserted at ``where``."""
        if other is None or other.length == 0:
            return self
        count = min(length, other.length)
        at = min(where, self.length)
        return DSData(self.type, self.data[:at] + other.data[:count] + self.data[at:])

    def to_cstring(self) -> Optional[str]:
        """The value as a plain string, or None if it is not an ASCII-reducible string."""
        if self.type in _UTF8_TYPES:
            text = _until_nul(self.data)
            if any(byte >= 0x80 for byte in text):
                return None
            return text.decode("ascii")
        if self.type in (DataType.CSTR, DataType.CASE_CSTR):
            return _until_nul(self.data).decode("utf-8", "surrogateescape")
        return None

    def to_utf8string(self) -> Optional[str]:
        """The value as a string if it is of any string type, else None."""
        if is_string_type(self.type):
            return _until_nul(self.data).decode("utf-8", "surrogateescape")
        return None

    def _hex_bytes(self) -> str:
        return "".join(f" 0x{byte:x}" for byte in self.data)

    def format(self) -> str:
        """A human-readable rendering of the value."""
        t = self.type
        if t == DataType.NIL:
            return "(nil)"
        if t == DataType.BLOB:
            return "(blob)" + self._hex_bytes()
        if t == DataType.BOOL:
            return "(bool) YES" if self.data[:1] not in (b"", b"\0") else "(bool) NO"
        if t == DataType.INT:
            fmt = _SIGNED_FORMATS.get(self.length)
            value = struct.unpack(fmt, self.data)[0] if fmt else 0
            return f"(int) {value}"
        if t == DataType.UINT:
            fmt = _UNSIGNED_FORMATS.get(self.length)
            value = struct.unpack(fmt, self.data)[0] if fmt else 0
            return f"(uint) {value}"
        if t == DataType.FLOAT:
            value = struct.unpack(">f", self.data[:4])[0] if self.length >= 4 else 0.0
            return f"(float) {value:f}"
        if t in (DataType.CSTR, DataType.CASE_CSTR):
            return _until_nul(self.data).decode("utf-8", "surrogateescape")
        if t in _UTF8_TYPES:
            text = self.to_cstring()
            if text is not None:
                return text
        return f"({int(t)})" + self._hex_bytes()


def data_equal(a: Optional[DSData], b: Optional[DSData]) -> bool:
    """Equality that honours string types and case-insensitive types."""
    if a is b:
        return True
    if a is None or b is None:
        return False
    if a.length != b.length:
        return False
    if is_string_type(a.type) and is_string_type(b.type):
        casefold = is_case_string_type(a.type) or is_case_string_type(b.type)
        if is_utf8_type(a.type) or is_utf8_type(b.type):
            return _utf8_compare(a.data, b.data, casefold) == 0
        return _strncmp(a.data, b.data, a.length - 1, casefold) == 0
    if a.type != b.type:
        return False
    return a.data == b.data


def data_compare(a: Optional[DSData], b: Optional[DSData]) -> int:
    """Three-way comparison returning -1, 0 or 1; None sorts before anything."""
    if a is b:
        return 0
    if a is None:
        return -1
    if b is None:
        return 1
    if a.length == 0:
        return 0 if b.length == 0 else -1
    if b.length == 0:
        return 1

    common = min(a.length, b.length)
    if is_string_type(a.type) and is_string_type(b.type):
        casefold = is_case_string_type(a.type) or is_case_string_type(b.type)
        if is_utf8_type(a.type) or is_utf8_type(b.type):
            c = _utf8_compare(a.data, b.data, casefold)
        else:
            c = _strncmp(a.data, b.data, common - 1, casefold)
    else:
        c = _sign(a.data[:common], b.data[:common])

    if c != 0:
        return c
    return _sign(a.length, b.length)


def data_compare_sub(
    a: Optional[DSData], b: Optional[DSData], start: int, length: int
) -> int:
    """Compare ``length`` bytes of ``a`` beginning at ``start`` with the start of ``b``."""
    if a is None:
        return -1
    if b is None:
        return 1
    if a.length == 0:
        return 0 if b.length == 0 else -1
    if b.length == 0:
        return 1
    if start < 0 or start > a.length:
        raise ValueError(f"start {start} outside value of length {a.length}")

    length = min(length, a.length - start, b.length)
    if is_string_type(a.type) and is_string_type(b.type):
        casefold = is_case_string_type(a.type) or is_case_string_type(b.type)
        # The compared span includes a terminating NUL.
        span = max(length - 1, 0)
        left = a.data[start:start + span]
        right = b.data[:span]
        if is_utf8_type(a.type) or is_utf8_type(b.type):
            return _utf8_compare(left, right, casefold)
        return _strncmp(left, right, span, casefold)
    return _sign(a.data[start:start + length], b.data[:length])


def cstring_to_data(text: str) -> DSData:
    """A NUL-terminated plain string value."""
    return DSData(DataType.CSTR, text.encode("utf-8", "surrogateescape") + b"\0")


def casecstring_to_data(text: str) -> DSData:
    """A NUL-terminated case-insensitive string value."""
    return DSData(DataType.CASE_CSTR, text.encode("utf-8", "surrogateescape") + b"\0")


def utf8string_to_data(text: str) -> DSData:
    """A string value, typed as UTF-8 only if it holds non-ASCII characters."""
    raw = text.encode("utf-8", "surrogateescape")
    data_type = DataType.CSTR if raw.isascii() else DataType.UTF8_STR
    return DSData(data_type, raw + b"\0")


def caseutf8string_to_data(text: str) -> DSData:
    """The case-insensitive counterpart of :func:`utf8string_to_data`."""
    value = utf8string_to_data(text)
    if value.type == DataType.UTF8_STR:
        return DSData(DataType.CASE_UTF8_STR, value.data)
    return DSData(DataType.CASE_CSTR, value.data)