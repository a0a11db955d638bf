"""Precedence merge across content sources."""

from __future__ import annotations

from typing import List, Sequence, Set

from .records import Record, record_key


def merge_by_id(*sources: Sequence[Record]) -> List[Record]:
    """Merge record lists, keeping the first record seen for each id.

    `sources` are given in priority order (remote, static, discovered). The
    first list is taken whole; every later record is appended only when its id
    has not been seen yet. Records without an id cannot collide and are always
    kept.

    Args:
        *sources: Record lists, highest priority first.

    Returns:
        A new list with at most one record per id.
    """
    if not sources:
        return []
    merged: List[Record] = list(sources[0])
    seen: Set[str] = {k for k in (record_key(r) for r in merged) if k is not None}
    for records in sources[1:]:
        for record in records:
            key = record_key(record)
            if key is None:
                merged.append(record)
                continue
            if key in seen:
                continue
            seen.add(key)
            merged.append(record)
    return merged
