"""Unified content provider.

Aggregates the three content sources (Supabase, the bundled JSON document and
discovered app files) into one deduplicated view per entity type, and derives
aggregate / per-app statistics from it.

Precedence for duplicate ids is remote > static > discovered. A source that
fails for a call contributes nothing to that call; no anticipated failure
escapes the public methods.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, List, Optional, Protocol, get_args

from packages.common.config import ProviderConfig
from packages.schemas.content import (
    AppContent,
    AppContentCounts,
    AppSummary,
    ContentStats,
    DiscoveryMetadata,
    QueryOptions,
    SourceCounts,
    SourceName,
    SourceStatus,
)
from .discovery import DiscoveredContent, discover_all_content
from .leaf import LeafResult
from .merge import merge_by_id
from .records import (
    SOURCE_FIELD,
    UNKNOWN_APP,
    Record,
    belongs_to_app,
    check_entity,
    resolve_app_id,
)
from .remote_store import RemoteStoreClient
from .static_loader import StaticContentLoader

log = logging.getLogger(__name__)

APP_NAME_PREFIX = "learn-"


class ContentSource(Protocol):
    """Anything that can answer an entity query with a `LeafResult`."""

    async def fetch(self, entity: str, options: QueryOptions) -> LeafResult: ...


def app_display_name(app_id: str) -> str:
    """Human-readable app name: "learn-govt-jobs" -> "Govt Jobs"."""
    base = app_id[len(APP_NAME_PREFIX):] if app_id.startswith(APP_NAME_PREFIX) else app_id
    return " ".join(word[:1].upper() + word[1:] for word in base.replace("-", " ").split())


def _source_counts(courses: List[Record], profiles: List[Record], modules: List[Record],
                   lessons: List[Record], predicate: Callable[[Record], bool]) -> SourceCounts:
    """Count the records of each entity type that satisfy `predicate`."""
    return SourceCounts(
        courses=sum(1 for r in courses if predicate(r)),
        users=sum(1 for r in profiles if predicate(r)),
        modules=sum(1 for r in modules if predicate(r)),
        lessons=sum(1 for r in lessons if predicate(r)),
    )


class UnifiedContentProvider:
    """Merged, read-only view over the remote store, the static document and discovered files."""

    def __init__(
        self,
        remote: Optional[RemoteStoreClient] = None,
        static: Optional[StaticContentLoader] = None,
        discovered: Optional[DiscoveredContent] = None,
        local_available: Optional[bool] = None,
    ) -> None:
        """Wire up already-built sources.

        Args:
            remote: Supabase source, or None when it is not configured.
            static: Bundled document source, or None.
            discovered: Result of the discovery scan, or None.
            local_available: Whether the static document loaded at start-up;
                defaults to "a document path was found".
        """
        self.remote = remote
        self.static = static or StaticContentLoader(None)
        self.discovered = discovered or DiscoveredContent.empty()
        self._local_available = self.static.available if local_available is None else local_available

    # ---------- leaf access ----------

    async def _query(self, name: str, source: Optional[ContentSource], entity: str,
                     options: QueryOptions) -> List[Record]:
        """Ask one source; a failed result is logged and counted as empty."""
        if source is None:
            return []
        result = await source.fetch(entity, options)
        if result.failed:
            log.warning("%s source returned no %s (%s: %s)", name, entity, result.error.value, result.detail)
            return []
        return result.data

    async def fetch(self, entity: str, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged records of one entity type from every source.

        Args:
            entity: One of courses, modules, lessons, profiles, questions.
            options: Filters, app, order and limit; see `QueryOptions`.

        Filters, order and limit are applied by each source to its own rows;
        the merged list is their concatenation, so it is not re-sorted and may
        hold up to three times `limit` records.

        Returns:
            Records with at most one entry per id; remote rows first, then
            static, then discovered. With `options.app_id` set only records
            whose resolved app equals it are returned.

        Raises:
            UnknownEntityError: `entity` is not a content type.
        """
        check_entity(entity)
        options = options or QueryOptions()
        remote_rows = await self._query("supabase", self.remote, entity, options)
        static_rows = await self._query("local", self.static, entity, options)
        discovered_rows = await self._query("discovered", self.discovered, entity, options)
        merged = merge_by_id(remote_rows, static_rows, discovered_rows)
        if options.app_id:
            merged = [r for r in merged if resolve_app_id(r) == options.app_id]
        return merged

    async def get_courses(self, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged courses."""
        return await self.fetch("courses", options)

    async def get_modules(self, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged modules."""
        return await self.fetch("modules", options)

    async def get_lessons(self, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged lessons."""
        return await self.fetch("lessons", options)

    async def get_profiles(self, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged user profiles."""
        return await self.fetch("profiles", options)

    async def get_questions(self, options: Optional[QueryOptions] = None) -> List[Record]:
        """Merged quiz questions."""
        return await self.fetch("questions", options)

    # ---------- aggregates ----------

    async def get_stats(self) -> ContentStats:
        """Totals plus per-source and per-app breakdowns.

        Courses, profiles, modules and lessons are fetched concurrently. Apps
        are the distinct resolved app ids (minus "unknown"); a record counts
        towards an app when any app-identifying field equals it.
        """
        courses, profiles, modules, lessons = await asyncio.gather(
            self.get_courses(),
            self.get_profiles(),
            self.get_modules(),
            self.get_lessons(),
        )

        sources = {
            name: _source_counts(courses, profiles, modules, lessons,
                                 lambda r, name=name: r.get(SOURCE_FIELD) == name)
            for name in get_args(SourceName)
        }

        app_ids = sorted({
            resolve_app_id(r)
            for r in (*courses, *profiles, *modules, *lessons)
        } - {UNKNOWN_APP})
        per_app: Dict[str, SourceCounts] = {
            app_id: _source_counts(courses, profiles, modules, lessons,
                                   lambda r, app_id=app_id: belongs_to_app(r, app_id))
            for app_id in app_ids
        }

        return ContentStats(
            total_courses=len(courses),
            total_users=len(profiles),
            total_modules=len(modules),
            total_lessons=len(lessons),
            total_apps=len(per_app),
            sources=sources,
            discovered_sources=list(self.discovered.metadata.sources),
            per_app=per_app,
        )

    async def get_app_content(self, app_id: str) -> AppContent:
        """All five entity types for one app, with counts."""
        options = QueryOptions(app_id=app_id)
        courses = await self.get_courses(options)
        modules = await self.get_modules(options)
        lessons = await self.get_lessons(options)
        profiles = await self.get_profiles(options)
        questions = await self.get_questions(options)
        counts = AppContentCounts(
            courses=len(courses),
            modules=len(modules),
            lessons=len(lessons),
            profiles=len(profiles),
            questions=len(questions),
            total=len(courses) + len(modules) + len(lessons) + len(profiles) + len(questions),
        )
        return AppContent(
            app_id=app_id,
            courses=courses,
            modules=modules,
            lessons=lessons,
            profiles=profiles,
            questions=questions,
            stats=counts,
        )

    async def get_all_apps(self) -> List[AppSummary]:
        """Every app seen in courses, modules or lessons, sorted by id."""
        courses = await self.get_courses()
        modules = await self.get_modules()
        lessons = await self.get_lessons()

        counts: Dict[str, Dict[str, int]] = {}
        for kind, records in (("courses", courses), ("modules", modules), ("lessons", lessons)):
            for r in records:
                app_id = resolve_app_id(r)
                if app_id == UNKNOWN_APP:
                    continue
                bucket = counts.setdefault(app_id, {"courses": 0, "modules": 0, "lessons": 0})
                bucket[kind] += 1

        return [
            AppSummary(
                app_id=app_id,
                name=app_display_name(app_id),
                courses_count=c["courses"],
                modules_count=c["modules"],
                lessons_count=c["lessons"],
            )
            for app_id, c in sorted(counts.items())
        ]

    # ---------- introspection ----------

    def get_source_status(self) -> SourceStatus:
        """Which sources are live, and the resulting mode."""
        has_remote = self.remote is not None
        has_local = self._local_available
        has_discovered = self.discovered.found_anything
        if has_remote and (has_local or has_discovered):
            mode = "merged"
        elif has_remote:
            mode = "supabase-only"
        elif has_local or has_discovered:
            mode = "local-only"
        else:
            mode = "no-data"
        return SourceStatus(
            supabase=has_remote,
            local=has_local,
            discovered=has_discovered,
            discovered_apps=self.discovered.apps,
            mode=mode,
        )

    def get_discovery_metadata(self) -> Optional[DiscoveryMetadata]:
        """Scan metadata, or None when discovery found no files."""
        if not self.discovered.found_anything:
            return None
        return self.discovered.metadata


async def create_unified_content_provider(config: Optional[ProviderConfig] = None) -> UnifiedContentProvider:
    """Build every source from `config` and return a ready provider.

    Args:
        config: Explicit provider configuration; defaults to the process settings.

    Returns:
        A `UnifiedContentProvider`; sources that are unconfigured or missing are
        simply absent.
    """
    if config is None:
        from packages.common.config import get_settings
        config = get_settings().provider_config()

    remote = await RemoteStoreClient.connect(config.remote)
    static = StaticContentLoader.from_candidates(config.static_content_paths)
    local_available = (await static.load()) is not None
    discovered = await discover_all_content(
        config.discovery_roots,
        config.discovery_app_prefix,
        config.content_file_patterns,
    )

    provider = UnifiedContentProvider(
        remote=remote,
        static=static,
        discovered=discovered,
        local_available=local_available,
    )
    status = provider.get_source_status()
    log.info(
        "unified content provider ready: supabase=%s local=%s discovered=%s apps=%s mode=%s",
        status.supabase, status.local, status.discovered,
        ",".join(status.discovered_apps) or "-", status.mode,
    )
    return provider
