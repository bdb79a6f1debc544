"""Conversions between native numbers and typed values, and value file I/O."""

from __future__ import annotations

import struct
from os import PathLike
from typing import BinaryIO, Iterable, Optional, Union

from netinfo.dsdata import DataType, DSData

__all__ = [
    "int_to_data",
    "uint_to_data",
    "dsid_to_data",
    "int_array_to_data",
    "uint_array_to_data",
    "data_to_int",
    "data_to_uint",
    "data_to_dsid",
    "int_at_index",
    "uint_at_index",
    "read_data",
    "write_data",
    "load_data",
    "save_data",
]

_SIGNED_CODES = {1: "b", 2: "h", 4: "i", 8: "q"}
_UNSIGNED_CODES = {1: "B", 2: "H", 4: "I", 8: "Q"}

_SIGNED_ARRAY_TYPES = {
    1: DataType.INT8_ARRAY,
    2: DataType.INT16_ARRAY,
    4: DataType.INT32_ARRAY,
    8: DataType.INT64_ARRAY,
}
_UNSIGNED_ARRAY_TYPES = {
    1: DataType.UINT8_ARRAY,
    2: DataType.UINT16_ARRAY,
    4: DataType.UINT32_ARRAY,
    8: DataType.UINT64_ARRAY,
}

_HEADER = struct.Struct(">II")

PathType = Union[str, "PathLike[str]"]


def _code(width: int, signed: bool) -> str:
    table = _SIGNED_CODES if signed else _UNSIGNED_CODES
    try:
        return table[width]
    except KeyError:
        raise ValueError(f"unsupported integer width {width}") from None


def _pack(values: Iterable[int], width: int, signed: bool) -> bytes:
    code = _code(width, signed)
    items = list(values)
    try:
        return struct.pack(f">{len(items)}{code}", *items)
    except struct.error as exc:
        raise ValueError(f"value out of range for width {width}: {exc}") from exc


def int_to_data(value: int, width: int) -> DSData:
    """A signed integer of ``width`` bytes (1, 2, 4 or 8), big-endian."""
    return DSData(DataType.INT, _pack([value], width, True))


def uint_to_data(value: int, width: int) -> DSData:
    """An unsigned integer of ``width`` bytes (1, 2, 4 or 8), big-endian."""
    return DSData(DataType.UINT, _pack([value], width, False))


def dsid_to_data(value: int) -> DSData:
    """A directory ID value."""
    return DSData(DataType.DIRECTORY_ID, _pack([value], 4, False))


def int_array_to_data(values: Iterable[int], width: int) -> DSData:
    """An array of signed integers, each ``width`` bytes wide."""
    raw = _pack(values, width, True)
    return DSData(_SIGNED_ARRAY_TYPES[width], raw)


def uint_array_to_data(values: Iterable[int], width: int) -> DSData:
    """An array of unsigned integers, each ``width`` bytes wide."""
    raw = _pack(values, width, False)
    return DSData(_UNSIGNED_ARRAY_TYPES[width], raw)


def _unpack_at(data: Optional[DSData], offset: int, width: int, signed: bool) -> int:
    code = _code(width, signed)
    if data is None or offset < 0 or offset + width > data.length:
        return 0
    return struct.unpack_from(f">{code}", data.data, offset)[0]


def data_to_int(data: Optional[DSData], width: int) -> int:
    """The leading signed integer of ``width`` bytes; 0 if the value is too short."""
    return _unpack_at(data, 0, width, True)


def data_to_uint(data: Optional[DSData], width: int) -> int:
    """The leading unsigned integer of ``width`` bytes; 0 if the value is too short."""
    return _unpack_at(data, 0, width, False)


def data_to_dsid(data: Optional[DSData]) -> int:
    """The directory ID held by a value; 0 if the value is too short."""
    return _unpack_at(data, 0, 4, False)


def int_at_index(data: Optional[DSData], index: int, width: int) -> int:
    """Element ``index`` of a signed integer array; 0 when out of range."""
    return _unpack_at(data, index * width, width, True)


def uint_at_index(data: Optional[DSData], index: int, width: int) -> int:
    """Element ``index`` of an unsigned integer array; 0 when out of range."""
    return _unpack_at(data, index * width, width, False)


def read_data(stream: BinaryIO) -> Optional[DSData]:
    """Read one stored value; None at a clean end of stream.

    Raises EOFError if the stream ends part-way through a value.
    """
    header = stream.read(_HEADER.size)
    if not header:
        return None
    if len(header) < _HEADER.size:
        raise EOFError("truncated value header")
    data_type, length = _HEADER.unpack(header)
    payload = stream.read(length) if length else b""
    if len(payload) < length:
        raise EOFError("truncated value data")
    return DSData(data_type, payload)


def write_data(data: DSData, stream: BinaryIO) -> None:
    """Write one value: type, length, then the raw bytes."""
    stream.write(_HEADER.pack(int(data.type), data.length) + data.data)


def load_data(path: PathType) -> Optional[DSData]:
    """Read the first value stored in the file at ``path``."""
    with open(path, "rb") as stream:
        return read_data(stream)


def save_data(data: DSData, path: PathType) -> None:
    """Store one value in the file at ``path``, replacing its contents."""
    with open(path, "wb") as stream:
        write_data(data, stream)