"""Shared fixtures for the content service tests: JSON file helpers and an in-memory Supabase double."""

import json
from pathlib import Path
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest


class FakeQuery:
    """Chainable stand-in for a PostgREST select builder; records every call."""

    def __init__(self, rows: List[Dict[str, Any]], calls: List[tuple], error: Optional[Exception]) -> None:
        self._rows = rows
        self._calls = calls
        self._error = error
        self._eqs: List[tuple] = []
        self._limit: Optional[int] = None

    def select(self, columns: str) -> "FakeQuery":
        self._calls.append(("select", columns))
        return self

    def or_(self, expr: str) -> "FakeQuery":
        self._calls.append(("or_", expr))
        return self

    def eq(self, field: str, value: Any) -> "FakeQuery":
        self._calls.append(("eq", field, value))
        self._eqs.append((field, value))
        return self

    def order(self, field: str, desc: bool = False) -> "FakeQuery":
        self._calls.append(("order", field, desc))
        return self

    def limit(self, n: int) -> "FakeQuery":
        self._calls.append(("limit", n))
        self._limit = n
        return self

    async def execute(self) -> SimpleNamespace:
        if self._error is not None:
            raise self._error
        rows = [dict(r) for r in self._rows if all(r.get(f) == v for f, v in self._eqs)]
        if self._limit:
            rows = rows[: self._limit]
        return SimpleNamespace(data=rows)


class FakeSupabase:
    """Async Supabase client double serving fixed rows per table."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
                 error: Optional[Exception] = None) -> None:
        self.tables = tables or {}
        self.error = error
        self.calls: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        self.calls.append(("table", name))
        return FakeQuery(self.tables.get(name, []), self.calls, self.error)


@pytest.fixture
def fake_supabase():
    """The `FakeSupabase` class, for building remote sources in tests."""
    return FakeSupabase


@pytest.fixture
def write_json():
    """Write `data` as JSON to `path`, creating parent directories."""

    def _write(path: Path, data: Any) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
