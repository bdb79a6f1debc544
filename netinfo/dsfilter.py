"""Search filters: assertions combined with AND, OR and NOT."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, List, Optional

from netinfo.dsassertion import Assertion, Logic3

__all__ = ["FilterOp", "Filter"]


class FilterOp(IntEnum):
    """How a filter combines its parts."""

    ASSERT = 0
    AND = 1
    OR = 2
    NOT = 3


@dataclass
class Filter:
    """Either a single assertion or a composite of sub-filters."""

    op: FilterOp
    assertion: Optional[Assertion] = None
    filters: List["Filter"] = field(default_factory=list)

    @classmethod
    def new_assert(cls, assertion: Assertion) -> "Filter":
        """A filter that evaluates one assertion."""
        if assertion is None:
            raise ValueError("an assertion filter needs an assertion")
        return cls(FilterOp.ASSERT, assertion)

    @classmethod
    def new_and(cls) -> "Filter":
        """An empty conjunction."""
        return cls(FilterOp.AND)

    @classmethod
    def new_or(cls) -> "Filter":
        """An empty disjunction."""
        return cls(FilterOp.OR)

    @classmethod
    def new_not(cls) -> "Filter":
        """A negation; only its first sub-filter counts."""
        return cls(FilterOp.NOT)

    def append_filter(self, other: Optional["Filter"]) -> "Filter":
        """Add a sub-filter and return self."""
        if other is not None:
            self.filters.append(other)
        return self

    def append_assertion(self, assertion: Optional[Assertion]) -> "Filter":
        """Add an assertion as a sub-filter and return self."""
        if assertion is not None:
            self.filters.append(Filter.new_assert(assertion))
        return self

    def test(self, record: Any) -> Logic3:
        """Evaluate the filter against ``record`` in three-valued logic."""
        if record is None:
            return Logic3.UNDEFINED

        if self.op == FilterOp.ASSERT:
            if self.assertion is None:
                return Logic3.UNDEFINED
            return self.assertion.test(record)

        if self.op == FilterOp.AND:
            undefined = False
            for sub in self.filters:
                result = sub.test(record)
                if result == Logic3.FALSE:
                    return Logic3.FALSE
                undefined = undefined or result == Logic3.UNDEFINED
            return Logic3.UNDEFINED if undefined else Logic3.TRUE

        if self.op == FilterOp.OR:
            undefined = False
            for sub in self.filters:
                result = sub.test(record)
                if result == Logic3.TRUE:
                    return Logic3.TRUE
                undefined = undefined or result == Logic3.UNDEFINED
            return Logic3.UNDEFINED if undefined else Logic3.FALSE

        if self.op == FilterOp.NOT:
            if not self.filters:
                return Logic3.UNDEFINED
            result = self.filters[0].test(record)
            if result == Logic3.TRUE:
                return Logic3.FALSE
            if result == Logic3.FALSE:
                return Logic3.TRUE
            return Logic3.UNDEFINED

        return Logic3.UNDEFINED