"""Supabase-backed content source.

Turns an (entity, QueryOptions) pair into a PostgREST query, tags every row
with `_source="supabase"`, and reports failures as a `LeafResult` instead of
raising.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from supabase import acreate_client

from packages.common.config import RemoteStoreConfig
from packages.schemas.content import QueryOptions
from .leaf import LeafErrorKind, LeafResult
from .query import active_filters
from .records import check_entity, normalize_records, resolve_app_id

log = logging.getLogger(__name__)

SOURCE = "supabase"

# Columns an app id may live in, depending on which app created the table.
APP_ID_COLUMNS = ("appId", "app", "subdomain")


def app_id_disjunction(app_id: str) -> str:
    """Build the PostgREST `or` expression matching `app_id` in any app column."""
    quoted = '"' + app_id.replace("\\", "\\\\").replace('"', '\\"') + '"'
    return ",".join(f"{column}.eq.{quoted}" for column in APP_ID_COLUMNS)


class RemoteStoreClient:
    """Thin query layer over an async Supabase client."""

    def __init__(self, client: Any) -> None:
        """Wrap an already-built client exposing `.table(name)` query builders."""
        self._client = client

    @classmethod
    async def connect(cls, cfg: RemoteStoreConfig) -> Optional["RemoteStoreClient"]:
        """Build a client from config, or return None when the source must be skipped.

        The source is skipped when it is explicitly suspended, when either
        credential is missing or a known placeholder, or when the client cannot
        be created.

        Args:
            cfg: Remote store credentials and suspension flag.

        Returns:
            A ready `RemoteStoreClient`, or None.
        """
        if cfg.suspended:
            log.info("supabase is suspended; skipping remote content source")
            return None
        if not cfg.is_configured():
            log.warning("supabase credentials missing or placeholder; skipping remote content source")
            return None
        try:
            client = await acreate_client(cfg.url, cfg.key)
        except Exception as e:
            log.error("could not create supabase client: %s", e)
            return None
        log.info("supabase client created")
        return cls(client)

    def build_query(self, entity: str, options: QueryOptions) -> Any:
        """Translate options into a query builder; filters are applied before order and limit."""
        query = self._client.table(entity).select("*")
        if options.app_id:
            query = query.or_(app_id_disjunction(options.app_id))
        for field, value in active_filters(options.filters):
            query = query.eq(field, value)
        if options.order:
            query = query.order(options.order.field, desc=not options.order.ascending)
        if options.limit:
            query = query.limit(options.limit)
        return query

    async def fetch(self, entity: str, options: QueryOptions) -> LeafResult:
        """Run a query for one entity type.

        The `or_` app filter matches a row whose app columns disagree (e.g.
        `appId="learn-math", app="learn-ai"`), so with `app_id` set the rows are
        re-checked against their resolved app and the limit is applied here,
        after that check, instead of on the server.

        Args:
            entity: Table name, one of the five content types.
            options: Query options.

        Returns:
            `LeafResult` with tagged rows, or `QUERY_FAILED` on any client error.
        """
        check_entity(entity)
        server_options = options.model_copy(update={"limit": None}) if options.app_id else options
        try:
            response = await self.build_query(entity, server_options).execute()
        except Exception as e:
            log.error("error fetching %s from supabase: %s", entity, e)
            return LeafResult.fail(LeafErrorKind.QUERY_FAILED, str(e))
        rows = normalize_records(entity, getattr(response, "data", None) or [], SOURCE)
        if options.app_id:
            rows = [r for r in rows if resolve_app_id(r) == options.app_id]
            if options.limit:
                rows = rows[: options.limit]
        return LeafResult.ok(rows)
