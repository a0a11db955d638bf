"""Record-level helpers shared by every content source.

A record is a flat `dict` as it came out of a source. Helpers here never
mutate their input; tagging returns a copy.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from pydantic import ValidationError

from packages.schemas.content import ENTITY_MODELS

log = logging.getLogger(__name__)

Record = Dict[str, Any]

ENTITY_TYPES = ("courses", "modules", "lessons", "profiles", "questions")

# Order matters: the first non-empty field names the owning app.
APP_ID_FIELDS = ("appId", "app", "subdomain", "_discoveredFrom")
UNKNOWN_APP = "unknown"

SOURCE_FIELD = "_source"
DISCOVERED_FROM_FIELD = "_discoveredFrom"
DISCOVERED_AT_FIELD = "_discoveredAt"


class UnknownEntityError(ValueError):
    """Raised when a caller asks for an entity type no source knows about."""


def check_entity(entity: str) -> str:
    """Return `entity` if it is one of the five content types, else raise `UnknownEntityError`."""
    if entity not in ENTITY_TYPES:
        raise UnknownEntityError(f"unknown entity type: {entity!r}")
    return entity


def resolve_app_id(record: Record) -> str:
    """Return the app a record belongs to.

    Walks `APP_ID_FIELDS` in order and returns the first non-empty value as a
    string; returns "unknown" when none is set.
    """
    for field in APP_ID_FIELDS:
        value = record.get(field)
        if value not in (None, ""):
            return str(value)
    return UNKNOWN_APP


def belongs_to_app(record: Record, app_id: str) -> bool:
    """OR-style membership: True when any app-identifying field equals `app_id`."""
    return any(record.get(field) == app_id for field in APP_ID_FIELDS)


def record_key(record: Record) -> Optional[str]:
    """Identifier used for de-duplication, or None for records without an id."""
    value = record.get("id")
    return None if value is None else str(value)


def tag_record(record: Record, source: str, **extra: Any) -> Record:
    """Return a copy of `record` stamped with its provenance and resolved app.

    Args:
        record: Raw record from a source.
        source: Provenance tag ("supabase", "local" or "discovered").
        **extra: Additional fields to set on the copy (e.g. `_discoveredFrom`).

    Returns:
        A new dict carrying `_source` and a non-empty `appId`.
    """
    tagged = dict(record)
    tagged.update(extra)
    tagged[SOURCE_FIELD] = source
    if tagged.get("appId") in (None, ""):
        tagged["appId"] = resolve_app_id(tagged)
    return tagged


def normalize_records(entity: str, rows: Iterable[Any], source: str, **extra: Any) -> List[Record]:
    """Tag raw rows from a source, normalising their ids.

    Column values pass through unchanged. A numeric id is stored as a string;
    rows without an id are kept (they never collide in a merge). Only rows
    that are not mappings are dropped, with a warning. A row whose id cannot
    be read as a string keeps its raw id.

    Args:
        entity: One of `ENTITY_TYPES`.
        rows: Raw rows from a source.
        source: Provenance tag applied to every kept row.
        **extra: Extra fields forwarded to `tag_record`.

    Returns:
        The tagged records, in input order.
    """
    model = ENTITY_MODELS[check_entity(entity)]
    out: List[Record] = []
    dropped = 0
    for row in rows:
        if not isinstance(row, dict):
            dropped += 1
            continue
        record = dict(row)
        try:
            parsed = model.model_validate(row)
        except ValidationError as e:
            log.debug("keep raw id of %s row from %s: %s", entity, source, e.errors(include_url=False))
        else:
            if parsed.id is not None:
                record["id"] = parsed.id
        out.append(tag_record(record, source, **extra))
    if dropped:
        log.warning("dropped %d non-object %s row(s) from %s", dropped, entity, source)
    return out
