"""Content schemas: entity records, query options and aggregate views for the platform."""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

SourceName = Literal["supabase", "local", "discovered"]
SourceMode = Literal["merged", "supabase-only", "local-only", "no-data"]


class _Entity(BaseModel):
    """Common shape of every content record: an optional string id plus arbitrary extra columns.

    Column values are not type-checked; sources store lesson bodies as text or
    block lists, question answers as indexes or letters, and so on.
    """
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> Any:
        # bool is an int subclass; a boolean id is a data error, not a number
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class Course(_Entity):
    """A course offered by one of the learn-* apps."""
    title: Any = None
    slug: Any = None
    description: Any = None
    category: Any = None
    subdomain: Any = None
    is_paid: Any = None
    status: Any = None


class Module(_Entity):
    """A course module grouping related lessons."""
    course_id: Any = None
    title: Any = None
    description: Any = None
    order_index: Any = None


class Lesson(_Entity):
    """A single lesson belonging to a module."""
    module_id: Any = None
    title: Any = None
    content: Any = None
    order_index: Any = None
    is_free: Any = None


class Profile(_Entity):
    """A user profile with contact, role and subscription flags."""
    email: Any = None
    role: Any = None
    is_admin: Any = None
    subscribed_to_newsletter: Any = None


class Question(_Entity):
    """A quiz question attached to a lesson."""
    lesson_id: Any = None
    question: Any = None
    options: Any = None
    correct_answer: Any = None
    difficulty: Any = None


ENTITY_MODELS: Dict[str, type[_Entity]] = {
    "courses": Course,
    "modules": Module,
    "lessons": Lesson,
    "profiles": Profile,
    "questions": Question,
}


class OrderBy(BaseModel):
    """Sort instruction for a content query."""
    field: str
    ascending: bool = True


class QueryOptions(BaseModel):
    """Options accepted by every entity fetch."""
    app_id: Optional[str] = None
    filters: Dict[str, Any] = {}
    order: Optional[OrderBy] = None
    limit: Optional[int] = Field(default=None, ge=0)


class SourceCounts(BaseModel):
    """Per-entity record counts for one source or one app."""
    courses: int = 0
    users: int = 0
    modules: int = 0
    lessons: int = 0


class DiscoveredFile(BaseModel):
    """A content file found inside an app directory."""
    path: str
    size: int
    modified: datetime
    item_counts: Dict[str, int] = {}


class DiscoveredSource(BaseModel):
    """All content files found for one app."""
    app: str
    file_count: int = 0
    files: List[DiscoveredFile] = []


class DiscoveryMetadata(BaseModel):
    """Summary of one discovery scan."""
    discovered_at: datetime
    total_apps_scanned: int = 0
    total_files_found: int = 0
    sources: List[DiscoveredSource] = []


class ContentStats(BaseModel):
    """Aggregate totals, per-source and per-app breakdowns across all sources."""
    total_courses: int
    total_users: int
    total_modules: int
    total_lessons: int
    total_apps: int
    sources: Dict[SourceName, SourceCounts]
    discovered_sources: List[DiscoveredSource] = []
    per_app: Dict[str, SourceCounts] = {}


class AppSummary(BaseModel):
    """An app observed in the content with a display name and counts."""
    app_id: str
    name: str
    courses_count: int = 0
    modules_count: int = 0
    lessons_count: int = 0


class AppContentCounts(BaseModel):
    """Item counts for one app's bundle."""
    courses: int = 0
    modules: int = 0
    lessons: int = 0
    profiles: int = 0
    questions: int = 0
    total: int = 0


class AppContent(BaseModel):
    """Every entity of one app, bundled with its counts."""
    app_id: str
    courses: List[Dict[str, Any]] = []
    modules: List[Dict[str, Any]] = []
    lessons: List[Dict[str, Any]] = []
    profiles: List[Dict[str, Any]] = []
    questions: List[Dict[str, Any]] = []
    stats: AppContentCounts = AppContentCounts()


class SourceStatus(BaseModel):
    """Which sources are live for a provider instance."""
    supabase: bool
    local: bool
    discovered: bool
    discovered_apps: List[str] = []
    mode: SourceMode
