"""A string-keyed hash cache whose entries may expire after a time-to-live."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

__all__ = ["Cache", "hash_key"]

_MASK32 = 0xFFFFFFFF
_GOLDEN_RATIO = 0x9E3779B9

DatumCallback = Callable[[Any], None]


def _mix(a: int, b: int, c: int) -> tuple:
    a = (a - b - c) & _MASK32
    a ^= c >> 13
    b = (b - c - a) & _MASK32
    b ^= (a << 8) & _MASK32
    c = (c - a - b) & _MASK32
    c ^= b >> 13
    a = (a - b - c) & _MASK32
    a ^= c >> 12
    b = (b - c - a) & _MASK32
    b ^= (a << 16) & _MASK32
    c = (c - a - b) & _MASK32
    c ^= b >> 5
    a = (a - b - c) & _MASK32
    a ^= c >> 3
    b = (b - c - a) & _MASK32
    b ^= (a << 10) & _MASK32
    c = (c - a - b) & _MASK32
    c ^= b >> 15
    return a, b, c


def _word(chunk: List[int]) -> int:
    """Little-endian combination of up to four (signed) bytes, modulo 2**32."""
    return sum(byte << (8 * i) for i, byte in enumerate(chunk)) & _MASK32


def _encode_key(key: str) -> bytes:
    raw = key.encode("utf-8")
    if b"\0" in raw:
        raise ValueError("cache keys may not contain NUL characters")
    return raw


def hash_key(key: str, mask: int) -> int:
    """Bucket number for ``key``: a 32-bit mixing hash of its bytes, masked.

    Bytes are taken as signed characters, as the original store did.
    """
    raw = _encode_key(key)
    signed = [b - 256 if b >= 0x80 else b for b in raw]
    a = b = _GOLDEN_RATIO
    c = 0

    full = len(signed) - len(signed) % 12
    for start in range(0, full, 12):
        block = signed[start:start + 12]
        a = (a + _word(block[0:4])) & _MASK32
        b = (b + _word(block[4:8])) & _MASK32
        c = (c + _word(block[8:12])) & _MASK32
        a, b, c = _mix(a, b, c)

    tail = signed[full:]
    c = (c + len(signed)) & _MASK32
    a = (a + _word(tail[0:4])) & _MASK32
    b = (b + _word(tail[4:8])) & _MASK32
    # The lowest byte of c holds the length, so the tail's bytes 8..10 start at bit 8.
    c = (c + ((_word(tail[8:11]) << 8) & _MASK32)) & _MASK32
    a, b, c = _mix(a, b, c)
    return c & mask


@dataclass
class _Node:
    key: str
    datum: Any
    best_before: int
    ttl: int


class Cache:
    """Fixed bucket-count hash table of key to datum.

    An entry with a non-zero ttl expires once the clock reaches its
    best-before time. Optional ``retain`` and ``release`` callbacks are told
    when a datum enters and leaves the cache. With ``replace`` set, inserting
    an existing key replaces its datum; otherwise only its expiry is reset.
    """

    def __init__(
        self,
        size: int,
        replace: bool = False,
        retain: Optional[DatumCallback] = None,
        release: Optional[DatumCallback] = None,
    ) -> None:
        if size <= 0 or size > _MASK32:
            raise ValueError(f"cache size must be between 1 and {_MASK32}, not {size}")
        self._buckets: List[List[_Node]] = [[] for _ in range(size)]
        self._mask = size - 1
        self.replace = replace
        self.retain = retain
        self.release = release

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._buckets)

    def __enter__(self) -> "Cache":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _bucket(self, key: str) -> List[_Node]:
        return self._buckets[hash_key(key, self._mask)]

    def _drop(self, bucket: List[_Node], node: _Node) -> None:
        bucket.remove(node)
        if self.release is not None:
            self.release(node.datum)

    def _find(self, key: Optional[str], reset: bool) -> Any:
        if key is None:
            return None
        bucket = self._bucket(key)
        node = next((n for n in bucket if n.key == key), None)
        if node is None:
            return None
        if node.ttl != 0:
            now = int(time.time())
            if now >= node.best_before:
                self._drop(bucket, node)
                return None
            if reset:
                node.best_before = now + node.ttl
        return node.datum

    def find(self, key: Optional[str]) -> Any:
        """The datum stored under ``key``, or None if absent or expired."""
        return self._find(key, False)

    def find_reset(self, key: Optional[str]) -> Any:
        """Like :meth:`find`, but a live entry's expiry restarts from now."""
        return self._find(key, True)

    def insert(
        self, key: Optional[str], datum: Any, ttl: int = 0, now: Optional[int] = None
    ) -> None:
        """Store ``datum`` under ``key``, expiring ``ttl`` seconds after ``now``.

        A ttl of 0 never expires. ``now`` defaults to the current time when a
        ttl is given. None for key or datum is ignored.
        """
        if key is None or datum is None:
            return
        if now is None:
            now = int(time.time()) if ttl else 0
        bucket = self._bucket(key)
        existing = next((n for n in bucket if n.key == key), None)
        if existing is not None:
            if not self.replace:
                existing.best_before = now + ttl
                return
            self._drop(bucket, existing)

        if self.retain is not None:
            self.retain(datum)
        bucket.insert(0, _Node(key, datum, now + ttl, ttl))

    def delete(self, key: Optional[str]) -> None:
        """Remove the entry for ``key`` if there is one."""
        if key is None:
            return
        bucket = self._bucket(key)
        node = next((n for n in bucket if n.key == key), None)
        if node is not None:
            self._drop(bucket, node)

    def delete_datum(self, datum: Any) -> None:
        """Remove every entry holding this very object."""
        if datum is None:
            return
        for bucket in self._buckets:
            for node in [n for n in bucket if n.datum is datum]:
                self._drop(bucket, node)

    def contains_datum(self, datum: Any) -> bool:
        """Whether any entry holds this very object."""
        if datum is None:
            return False
        return any(n.datum is datum for bucket in self._buckets for n in bucket)

    def sweep(self) -> None:
        """Remove every entry that has expired."""
        now = int(time.time())
        for bucket in self._buckets:
            expired = [n for n in bucket if n.ttl != 0 and now >= n.best_before]
            for node in expired:
                self._drop(bucket, node)

    def close(self) -> None:
        """Remove every entry, releasing each datum."""
        for bucket in self._buckets:
            for node in list(bucket):
                self._drop(bucket, node)

    def format(self) -> str:
        """A listing of each non-empty bucket and its entries."""
        lines = []
        for number, bucket in enumerate(self._buckets):
            if not bucket:
                continue
            lines.append(f"Bucket {number}\n")
            for node in bucket:
                lines.append(
                    f"\t{node.key} 0x{id(node.datum) & _MASK32:08x} {node.ttl} "
                    f"{time.ctime(node.best_before)}\n"
                )
        return "".join(lines)