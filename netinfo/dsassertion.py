"""Assertions about a single record attribute, evaluated in three-valued logic."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Callable, Iterable, Optional

from netinfo.dsattribute import Attribute
from netinfo.dsconvert import data_to_uint
from netinfo.dsdata import (
    DataType,
    DSData,
    comparable_types,
    data_compare,
    data_compare_sub,
    data_equal,
)

__all__ = ["Logic3", "AssertionOp", "Assertion"]


class Logic3(IntEnum):
    """Three-valued truth."""

    FALSE = 0
    TRUE = 1
    UNDEFINED = 2


class AssertionOp(IntEnum):
    """What an assertion checks about an attribute."""

    LESS = 0
    LESS_OR_EQUAL = 1
    EQUAL = 2
    GREATER_OR_EQUAL = 3
    GREATER = 4
    APPROX = 5
    HAS_KEY = 6
    PREFIX = 7
    SUBSTR = 8
    SUFFIX = 9
    PRECOMPUTED = 10


_ORDERING: dict = {
    AssertionOp.LESS: lambda c: c < 0,
    AssertionOp.LESS_OR_EQUAL: lambda c: c <= 0,
    AssertionOp.EQUAL: lambda c: c == 0,
    AssertionOp.APPROX: lambda c: c == 0,
    AssertionOp.GREATER_OR_EQUAL: lambda c: c >= 0,
    AssertionOp.GREATER: lambda c: c > 0,
}

_NO_VALUE_OPS = frozenset({AssertionOp.HAS_KEY, AssertionOp.PRECOMPUTED})


def _find_attribute(record: Any, key: DSData, meta: bool) -> Optional[Attribute]:
    pool: Iterable[Attribute] = getattr(
        record, "meta_attributes" if meta else "attributes", ()
    )
    return next((a for a in pool if data_equal(a.key, key)), None)


def _truth(flag: bool) -> Logic3:
    return Logic3.TRUE if flag else Logic3.FALSE


@dataclass(frozen=True)
class Assertion:
    """A test of one attribute of a record.

    The record is any object with ``attributes`` and ``meta_attributes``
    sequences of :class:`Attribute`; ``meta`` selects which one is searched.
    For a precomputed assertion the key holds the result as an unsigned
    32-bit value.
    """

    op: AssertionOp
    key: DSData
    value: Optional[DSData] = None
    meta: bool = False

    def __post_init__(self) -> None:
        if self.key is None:
            raise ValueError("an assertion needs a key")
        object.__setattr__(self, "op", AssertionOp(self.op))
        if self.op not in _NO_VALUE_OPS and self.value is None:
            raise ValueError(f"assertion {self.op.name} needs a value")

    def test(self, record: Any) -> Logic3:
        """Evaluate the assertion against ``record``."""
        if record is None:
            return Logic3.UNDEFINED

        if self.op == AssertionOp.PRECOMPUTED:
            return Logic3(min(data_to_uint(self.key, 4), Logic3.UNDEFINED))

        attribute = _find_attribute(record, self.key, self.meta)
        if attribute is None:
            return Logic3.UNDEFINED

        if self.op == AssertionOp.HAS_KEY:
            return _truth(data_compare(attribute.key, self.key) == 0)

        target = self.value
        candidates = [
            v for v in attribute.values if comparable_types(v.type, target.type)
        ]

        if self.op in _ORDERING:
            accept: Callable[[int], bool] = _ORDERING[self.op]
            return _truth(any(accept(data_compare(v, target)) for v in candidates))

        length = target.length
        candidates = [v for v in candidates if v.length >= length]

        if self.op == AssertionOp.PREFIX:
            return _truth(
                any(data_compare_sub(v, target, 0, length) == 0 for v in candidates)
            )
        if self.op == AssertionOp.SUFFIX:
            return _truth(
                any(
                    data_compare_sub(v, target, v.length - length, length) == 0
                    for v in candidates
                )
            )
        if self.op == AssertionOp.SUBSTR:
            return _truth(
                any(
                    data_compare_sub(v, target, start, length) == 0
                    for v in candidates
                    for start in range(v.length - length + 1)
                )
            )
        return Logic3.FALSE


# Values compared against any type carry this tag.
_ = DataType.ANY