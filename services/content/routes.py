# services/content/routes.py
"""HTTP routes of the content service: merged content, stats, apps and source health."""

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from packages.schemas.content import AppContent, AppSummary, ContentStats, OrderBy, QueryOptions
from .provider import UnifiedContentProvider
from .records import ENTITY_TYPES

router = APIRouter()

# Query params with a meaning of their own; everything else is an equality filter.
RESERVED_PARAMS = {"appId", "order", "ascending", "limit"}


def get_provider(request: Request) -> UnifiedContentProvider:
    """Return the provider built at application startup."""
    provider = getattr(request.app.state, "provider", None)
    if provider is None:
        raise HTTPException(503, "content provider not initialised")
    return provider


def _parse_bool(raw: Optional[str], default: bool = True) -> bool:
    """Interpret a query-string flag."""
    if raw is None:
        return default
    return raw.strip().lower() not in ("false", "0", "no", "off")


def _filter_value(raw: str) -> Any:
    """Decode a filter value: JSON scalars (true, 3, null) become Python values, anything else stays a string."""
    try:
        value = json.loads(raw)
    except ValueError:
        return raw
    return value if isinstance(value, (str, int, float, bool)) or value is None else raw


def query_options_from_request(request: Request) -> QueryOptions:
    """Build `QueryOptions` from the query string.

    `appId`, `order`, `ascending` and `limit` are options; any other param is
    an equality filter on the field of the same name.
    """
    params = request.query_params
    order = params.get("order")
    limit = params.get("limit")
    if limit is not None:
        try:
            limit_value: Optional[int] = int(limit)
        except ValueError:
            raise HTTPException(422, f"limit must be an integer, got {limit!r}")
        if limit_value < 0:
            raise HTTPException(422, "limit must not be negative")
    else:
        limit_value = None
    return QueryOptions(
        app_id=params.get("appId") or None,
        filters={k: _filter_value(v) for k, v in params.items() if k not in RESERVED_PARAMS},
        order=OrderBy(field=order, ascending=_parse_bool(params.get("ascending"))) if order else None,
        limit=limit_value,
    )


@router.get("/ping", tags=["content"])
def ping():
    return {"ok": True}


@router.get("/health", tags=["system"])
async def health(provider: UnifiedContentProvider = Depends(get_provider)) -> JSONResponse:
    """Source availability plus sample counts; 503 when no source is usable or a fetch failed."""
    status = provider.get_source_status()
    counts: Dict[str, int] = {}
    errors: List[Dict[str, str]] = []
    for entity in ("courses", "modules", "lessons", "profiles"):
        try:
            counts[entity] = len(await provider.fetch(entity))
        except Exception as e:
            errors.append({"entity": entity, "error": str(e)})

    if errors:
        state, message = "ERROR", f"{len(errors)} data source(s) failed"
    elif status.mode == "no-data":
        state, message = "ERROR", "No data sources available"
    elif status.mode != "merged":
        state, message = "WARNING", f"Running in {status.mode} mode"
    else:
        state, message = "OK", "All systems operational"

    body: Dict[str, Any] = {
        "status": state,
        "message": message,
        "sources": status.model_dump(),
        "counts": counts,
    }
    if errors:
        body["errors"] = errors
    return JSONResponse(body, status_code=503 if state == "ERROR" else 200)


@router.get("/content/{entity}", tags=["content"])
async def list_content(
    entity: str,
    request: Request,
    provider: UnifiedContentProvider = Depends(get_provider),
) -> Dict[str, Any]:
    """Merged records of one entity type."""
    if entity not in ENTITY_TYPES:
        raise HTTPException(404, f"unknown content type: {entity}")
    records = await provider.fetch(entity, query_options_from_request(request))
    return {"entity": entity, "count": len(records), "items": records}


@router.get("/stats", tags=["content"], response_model=ContentStats)
async def stats(provider: UnifiedContentProvider = Depends(get_provider)) -> ContentStats:
    """Aggregate and per-app statistics."""
    return await provider.get_stats()


@router.get("/apps", tags=["content"], response_model=List[AppSummary])
async def apps(provider: UnifiedContentProvider = Depends(get_provider)) -> List[AppSummary]:
    """Every app that has content."""
    return await provider.get_all_apps()


@router.get("/apps/{app_id}", tags=["content"], response_model=AppContent)
async def app_content(app_id: str, provider: UnifiedContentProvider = Depends(get_provider)) -> AppContent:
    """All content of one app."""
    return await provider.get_app_content(app_id)


@router.get("/sources", tags=["system"])
async def sources(provider: UnifiedContentProvider = Depends(get_provider)) -> Dict[str, Any]:
    """Source status and discovery metadata."""
    metadata = provider.get_discovery_metadata()
    return {
        "status": provider.get_source_status().model_dump(),
        "discovery": metadata.model_dump(mode="json") if metadata else None,
    }
