"""In-memory evaluation of `QueryOptions` for file-backed sources."""

from __future__ import annotations

from functools import cmp_to_key
from typing import Any, Dict, Iterator, List, Tuple

from packages.schemas.content import OrderBy, QueryOptions
from .records import Record, resolve_app_id

# Filter value that means "no constraint", besides None.
ALL_SENTINEL = "all"


def active_filters(filters: Dict[str, Any]) -> Iterator[Tuple[str, Any]]:
    """Yield the (field, value) pairs that should constrain a query."""
    for field, value in filters.items():
        if value is None or value == ALL_SENTINEL:
            continue
        yield field, value


def _compare(a: Any, b: Any) -> int:
    """Three-way compare; values of unrelated types are compared by their string form."""
    try:
        return (a > b) - (a < b)
    except TypeError:
        sa, sb = str(a), str(b)
        return (sa > sb) - (sa < sb)


def sort_records(records: List[Record], order: OrderBy) -> List[Record]:
    """Return `records` sorted on `order.field`.

    Missing values sort first when ascending and last when descending.
    """
    field = order.field
    sign = 1 if order.ascending else -1

    def cmp(a: Record, b: Record) -> int:
        av, bv = a.get(field), b.get(field)
        if av is None and bv is None:
            return 0
        if av is None:
            return -sign
        if bv is None:
            return sign
        return sign * _compare(av, bv)

    return sorted(records, key=cmp_to_key(cmp))


def apply_query(records: List[Record], options: QueryOptions) -> List[Record]:
    """Filter, app-match, sort and limit a list of records.

    Steps run in this order: equality filters, resolved-app match, sort, limit.
    The input list is not modified.
    """
    out = list(records)
    for field, value in active_filters(options.filters):
        out = [r for r in out if r.get(field) == value]
    if options.app_id:
        out = [r for r in out if resolve_app_id(r) == options.app_id]
    if options.order:
        out = sort_records(out, options.order)
    if options.limit:
        out = out[: options.limit]
    return out
