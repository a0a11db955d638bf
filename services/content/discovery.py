"""Discovery of content files inside sibling learn-* app directories.

Each configured root is listed once; every child directory whose name starts
with the app prefix is treated as an app and probed for a fixed set of
app-relative JSON files. The scan never raises: unreadable roots and broken
files are logged and skipped.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from packages.common.config import CONTENT_FILE_PATTERNS
from packages.schemas.content import DiscoveredFile, DiscoveredSource, DiscoveryMetadata, QueryOptions
from .leaf import LeafResult
from .query import apply_query
from .records import (
    DISCOVERED_AT_FIELD,
    DISCOVERED_FROM_FIELD,
    ENTITY_TYPES,
    Record,
    check_entity,
    normalize_records,
)

log = logging.getLogger(__name__)

SOURCE = "discovered"


def find_app_directories(roots: Iterable[Path], prefix: str = "learn-") -> List[Path]:
    """List app directories (children named `prefix*`) under every root, sorted by name per root."""
    apps: List[Path] = []
    for root in roots:
        root = Path(root)
        if not root.is_dir():
            log.warning("discovery root not found: %s", root)
            continue
        try:
            children = sorted(root.iterdir(), key=lambda p: p.name)
        except OSError as e:
            log.error("cannot list discovery root %s: %s", root, e)
            continue
        apps.extend(p for p in children if p.is_dir() and p.name.startswith(prefix))
    log.info("found %d app director%s", len(apps), "y" if len(apps) == 1 else "ies")
    return apps


def split_entities(content: Any) -> Dict[str, List[Any]]:
    """Map a parsed content file onto the five entity arrays.

    A top-level array is taken as courses; an object contributes whichever
    entity keys it has (non-list values are ignored).
    """
    out: Dict[str, List[Any]] = {entity: [] for entity in ENTITY_TYPES}
    if isinstance(content, list):
        out["courses"] = content
    elif isinstance(content, dict):
        for entity in ENTITY_TYPES:
            rows = content.get(entity)
            if isinstance(rows, list):
                out[entity] = rows
    return out


def _parse_file(path: Path) -> Optional[Any]:
    """Parse a JSON file, returning None (and logging) when it is unreadable."""
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        log.error("error parsing %s: %s", path, e)
        return None


@dataclass
class DiscoveredContent:
    """Result of one scan: the five entity arrays plus scan metadata."""
    metadata: DiscoveryMetadata
    records: Dict[str, List[Record]] = field(default_factory=lambda: {e: [] for e in ENTITY_TYPES})

    @classmethod
    def empty(cls) -> "DiscoveredContent":
        """A scan that found nothing."""
        return cls(metadata=DiscoveryMetadata(discovered_at=datetime.now(timezone.utc)))

    @property
    def found_anything(self) -> bool:
        """True when at least one content file was parsed."""
        return self.metadata.total_files_found > 0

    @property
    def apps(self) -> List[str]:
        """Names of the apps that contributed files."""
        return [s.app for s in self.metadata.sources]

    def count(self, entity: str) -> int:
        """Number of discovered records of one entity type."""
        return len(self.records.get(entity, []))

    async def fetch(self, entity: str, options: QueryOptions) -> LeafResult:
        """Query the discovered records of one entity type in memory."""
        check_entity(entity)
        return LeafResult.ok(apply_query(self.records.get(entity, []), options))


def scan(
    roots: Sequence[Path],
    prefix: str = "learn-",
    patterns: Sequence[str] = CONTENT_FILE_PATTERNS,
) -> DiscoveredContent:
    """Walk the app directories and collect every recognised content file.

    Args:
        roots: Directories holding app directories.
        prefix: App directory name prefix.
        patterns: App-relative file paths to probe.

    Returns:
        The collected, tagged records and the scan metadata.
    """
    now = datetime.now(timezone.utc)
    stamp = now.isoformat()
    result = DiscoveredContent(metadata=DiscoveryMetadata(discovered_at=now))
    app_dirs = find_app_directories(roots, prefix)
    result.metadata.total_apps_scanned = len(app_dirs)

    for app_dir in app_dirs:
        app = app_dir.name
        source = DiscoveredSource(app=app)
        for pattern in patterns:
            path = app_dir / pattern
            if not path.is_file():
                continue
            try:
                st = path.stat()
            except OSError as e:
                log.warning("could not stat %s: %s", path, e)
                continue
            content = _parse_file(path)
            if content is None:
                continue
            counts: Dict[str, int] = {}
            for entity, rows in split_entities(content).items():
                tagged = normalize_records(
                    entity,
                    rows,
                    SOURCE,
                    **{DISCOVERED_FROM_FIELD: app, DISCOVERED_AT_FIELD: stamp},
                )
                result.records[entity].extend(tagged)
                counts[entity] = len(tagged)
            source.files.append(DiscoveredFile(
                path=pattern,
                size=st.st_size,
                modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                item_counts=counts,
            ))
        if source.files:
            source.file_count = len(source.files)
            result.metadata.sources.append(source)
            result.metadata.total_files_found += source.file_count
            log.info("%s: found %d content file(s)", app, source.file_count)

    log.info(
        "content discovery complete: apps=%d files=%d %s",
        result.metadata.total_apps_scanned,
        result.metadata.total_files_found,
        " ".join(f"{e}={result.count(e)}" for e in ENTITY_TYPES),
    )
    return result


async def discover_all_content(
    roots: Sequence[Path],
    prefix: str = "learn-",
    patterns: Sequence[str] = CONTENT_FILE_PATTERNS,
) -> DiscoveredContent:
    """Run `scan` off the event loop."""
    return await asyncio.to_thread(scan, roots, prefix, patterns)
