"""
docstore/query.py -- Query shape for collection reads.

A Query is a plain description (filters, ordering, limit) that every store
backend receives already validated. validate_query() enforces the document
database's composite-query rule up front, so a fake store in tests rejects
exactly the queries production would reject:

  - at most one field may carry inequality filters;
  - when such a field exists, it must be the first order_by entry.

Layer rule: no imports from api/, auth/, or records/.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

EQUALITY_OPS = frozenset({"=="})
INEQUALITY_OPS = frozenset({"!=", "<", "<=", ">", ">="})

ASCENDING = "asc"
DESCENDING = "desc"


class InvalidQuery(ValueError):
    """Raised before dispatch when a query breaks the filter/order rule."""


@dataclass(frozen=True)
class Filter:
    field: str
    op: str
    value: Any

    @property
    def is_inequality(self) -> bool:
        return self.op in INEQUALITY_OPS

    def matches(self, data: dict) -> bool:
        """Evaluate the predicate against a document's fields.

        Used by in-process backends. Missing fields never match, which is how
        the managed store treats them for both equality and inequality.
        """
        if self.field not in data:
            return False
        actual = data[self.field]
        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            if self.op == ">=":
                return actual >= self.value
        except TypeError:
            return False
        raise InvalidQuery(f"Unsupported operator: {self.op!r}")


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: str = ASCENDING


@dataclass(frozen=True)
class Query:
    collection: str
    filters: tuple[Filter, ...] = ()
    order_by: tuple[OrderBy, ...] = ()
    limit: int | None = None

    def where(self, field_name: str, op: str, value: Any) -> Query:
        return Query(self.collection, self.filters + (Filter(field_name, op, value),), self.order_by, self.limit)

    def order(self, field_name: str, direction: str = ASCENDING) -> Query:
        return Query(self.collection, self.filters, self.order_by + (OrderBy(field_name, direction),), self.limit)

    def take(self, limit: int) -> Query:
        return Query(self.collection, self.filters, self.order_by, limit)


def validate_query(query: Query) -> None:
    """Raise InvalidQuery if the query cannot be served by the document store.

    Checks operators and directions first, then the single-inequality-field
    rule, then that the inequality field leads the ordering.
    """
    for f in query.filters:
        if f.op not in EQUALITY_OPS and f.op not in INEQUALITY_OPS:
            raise InvalidQuery(f"Unsupported operator {f.op!r} on field {f.field!r}")
    for o in query.order_by:
        if o.direction not in (ASCENDING, DESCENDING):
            raise InvalidQuery(f"Unsupported sort direction {o.direction!r} on field {o.field!r}")
    if query.limit is not None and query.limit < 1:
        raise InvalidQuery(f"limit must be positive, got {query.limit}")

    inequality_fields = {f.field for f in query.filters if f.is_inequality}
    if len(inequality_fields) > 1:
        raise InvalidQuery(
            f"Inequality filters on more than one field: {', '.join(sorted(inequality_fields))}"
        )
    if inequality_fields:
        (field_name,) = inequality_fields
        if not query.order_by or query.order_by[0].field != field_name:
            raise InvalidQuery(f"Field {field_name!r} has an inequality filter and must be ordered first")
