"""Explicit result type returned by every content source ("leaf")."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .records import Record


class LeafErrorKind(str, Enum):
    """Why a source produced no data for a call."""
    NOT_FOUND = "not_found"
    PARSE_FAILED = "parse_failed"
    QUERY_FAILED = "query_failed"


@dataclass(frozen=True)
class LeafResult:
    """Rows from one source, or the reason there are none."""
    data: List[Record] = field(default_factory=list)
    error: Optional[LeafErrorKind] = None
    detail: Optional[str] = None

    @property
    def failed(self) -> bool:
        """True when the source reported an error."""
        return self.error is not None

    @classmethod
    def ok(cls, data: List[Record]) -> "LeafResult":
        """Successful result carrying `data`."""
        return cls(data=list(data))

    @classmethod
    def fail(cls, kind: LeafErrorKind, detail: Optional[str] = None) -> "LeafResult":
        """Failed result with no rows."""
        return cls(error=kind, detail=detail)
