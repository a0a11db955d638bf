"""Bundled JSON document as a content source.

The document is a single object with `courses`, `modules`, `lessons`,
`profiles` and `questions` arrays. The path is chosen once, at construction,
from a list of candidates; the file itself is re-read on every fetch.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from packages.schemas.content import QueryOptions
from .leaf import LeafErrorKind, LeafResult
from .query import apply_query
from .records import check_entity, normalize_records

log = logging.getLogger(__name__)

SOURCE = "local"


class ContentDocumentError(ValueError):
    """The content document exists but is not a JSON object."""


def find_first_existing(candidates: Iterable[Path]) -> Optional[Path]:
    """Return the first candidate that is an existing file, or None."""
    for candidate in candidates:
        if Path(candidate).is_file():
            return Path(candidate)
    return None


def read_document(path: Path) -> Dict[str, Any]:
    """Read and parse the content document.

    Raises:
        OSError: The file cannot be read.
        ValueError: The file is not valid JSON or not a JSON object.
    """
    with open(path, "r", encoding="utf-8-sig") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ContentDocumentError(f"expected a JSON object in {path}, got {type(data).__name__}")
    return data


class StaticContentLoader:
    """Serves the bundled content document with the same query semantics as the remote store."""

    def __init__(self, path: Optional[Path]) -> None:
        """Args:
            path: Resolved document path, or None when no candidate exists.
        """
        self.path = path

    @classmethod
    def from_candidates(cls, candidates: Iterable[Path]) -> "StaticContentLoader":
        """Pick the first existing candidate path; log a warning when none exists."""
        candidates = list(candidates)
        path = find_first_existing(candidates)
        if path is None:
            log.warning(
                "local content file not found at any of: %s",
                ", ".join(str(c) for c in candidates) or "(no candidates)",
            )
        else:
            log.info("using local content from %s", path)
        return cls(path)

    @property
    def available(self) -> bool:
        """True when a document path was found."""
        return self.path is not None

    async def load(self) -> Optional[Dict[str, Any]]:
        """Read the document off the event loop; None when missing or unreadable."""
        if self.path is None:
            return None
        try:
            return await asyncio.to_thread(read_document, self.path)
        except (OSError, ValueError) as e:
            log.error("error loading local content from %s: %s", self.path, e)
            return None

    async def fetch(self, entity: str, options: QueryOptions) -> LeafResult:
        """Return the entity's records from the document, filtered by `options`.

        Returns:
            `LeafResult` tagged `_source="local"`; `NOT_FOUND` when no document
            path exists, `PARSE_FAILED` when it cannot be read or parsed.
        """
        check_entity(entity)
        if self.path is None:
            return LeafResult.fail(LeafErrorKind.NOT_FOUND, "no local content file")
        try:
            document = await asyncio.to_thread(read_document, self.path)
        except (OSError, ValueError) as e:
            log.error("error loading local content from %s: %s", self.path, e)
            return LeafResult.fail(LeafErrorKind.PARSE_FAILED, str(e))
        rows = document.get(entity)
        if not isinstance(rows, list):
            return LeafResult.ok([])
        records = normalize_records(entity, rows, SOURCE)
        return LeafResult.ok(apply_query(records, options))
