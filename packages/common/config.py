"""Settings for the iiskills content aggregation service.

- `Settings` is loaded from env / .env (pydantic-settings) and cached by `get_settings`.
- `RemoteStoreConfig` knows which Supabase credentials are placeholders.
- `ProviderConfig` is the explicit, path-resolved struct handed to the content provider.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_URLS = ("your-project-url-here", "https://your-project.supabase.co")
PLACEHOLDER_URL_FRAGMENTS = ("your-project", "xyz")
PLACEHOLDER_KEYS = ("your-anon-key-here",)
PLACEHOLDER_KEY_PREFIX = "eyJhbGciOi..."
MIN_KEY_LENGTH = 20

CONTENT_FILE_PATTERNS = (
    "data/courses.json",
    "data/modules.json",
    "data/lessons.json",
    "data/content.json",
    "data/newsletters.json",
    "seeds/content.json",
    "content/courses.json",
    "content/data.json",
    "public/data/courses.json",
)


class RemoteStoreConfig(BaseModel):
    """Connection values for the hosted store (Supabase)."""

    url: Optional[str] = None
    key: Optional[str] = None
    suspended: bool = False

    def has_placeholder_url(self) -> bool:
        """Return True when the URL is missing or one of the known template values."""
        url = (self.url or "").strip()
        if not url or url in PLACEHOLDER_URLS:
            return True
        return any(fragment in url for fragment in PLACEHOLDER_URL_FRAGMENTS)

    def has_placeholder_key(self) -> bool:
        """Return True when the API key is missing, a template value, or too short."""
        key = (self.key or "").strip()
        if not key or key in PLACEHOLDER_KEYS:
            return True
        return key.startswith(PLACEHOLDER_KEY_PREFIX) or len(key) < MIN_KEY_LENGTH

    def is_configured(self) -> bool:
        """Return True when both credentials look real."""
        return not (self.has_placeholder_url() or self.has_placeholder_key())


class ProviderConfig(BaseModel):
    """Everything the unified content provider needs, with paths already resolved.

    Attributes:
        remote: Hosted store credentials and suspension flag.
        static_content_paths: Candidate locations of the bundled JSON document, in priority order.
        discovery_roots: Directories whose `learn-*` children are scanned for content files.
        discovery_app_prefix: Directory-name prefix that marks an app.
        content_file_patterns: App-relative paths recognised as content files.
    """

    remote: RemoteStoreConfig = Field(default_factory=RemoteStoreConfig)
    static_content_paths: List[Path] = Field(default_factory=list)
    discovery_roots: List[Path] = Field(default_factory=list)
    discovery_app_prefix: str = "learn-"
    content_file_patterns: List[str] = Field(default_factory=lambda: list(CONTENT_FILE_PATTERNS))


def _split_csv(raw: str) -> List[str]:
    """Split a comma-separated env value, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


class Settings(BaseSettings):
    """Strongly-typed settings model loaded from env / .env.

    Notes:
        - Supabase values accept both the plain and the `NEXT_PUBLIC_` prefixed names.
        - Missing credentials are not an error; the remote source is simply skipped.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    service_name: str = Field(default="iiskills-content", validation_alias="SERVICE_NAME")

    supabase_url: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_URL", "NEXT_PUBLIC_SUPABASE_URL"),
        description="Supabase project URL",
    )
    supabase_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_ANON_KEY", "NEXT_PUBLIC_SUPABASE_ANON_KEY"),
        description="Supabase anon key",
    )
    supabase_suspended: bool = Field(
        default=False,
        validation_alias=AliasChoices("SUPABASE_SUSPENDED", "NEXT_PUBLIC_SUPABASE_SUSPENDED"),
        description="Disable the Supabase source entirely",
    )

    static_content_paths: str = Field(
        default="seeds/content.json,../seeds/content.json",
        validation_alias="STATIC_CONTENT_PATHS",
        description="Comma-separated candidate paths of the bundled content document",
    )
    discovery_roots: str = Field(
        default="apps",
        validation_alias="DISCOVERY_ROOTS",
        description="Comma-separated directories holding learn-* apps",
    )
    discovery_app_prefix: str = Field(default="learn-", validation_alias="DISCOVERY_APP_PREFIX")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    json_logs: bool = Field(default=True, validation_alias="JSON_LOGS")

    def remote_config(self) -> RemoteStoreConfig:
        """Return the hosted store part of the settings."""
        return RemoteStoreConfig(
            url=self.supabase_url or None,
            key=self.supabase_key or None,
            suspended=self.supabase_suspended,
        )

    def provider_config(self, base_dir: Optional[Path] = None) -> ProviderConfig:
        """Build a `ProviderConfig`, resolving relative paths against `base_dir` once.

        Args:
            base_dir: Directory relative paths are anchored to; defaults to the cwd.

        Returns:
            A `ProviderConfig` with absolute paths.
        """
        base = (base_dir or Path.cwd()).resolve()

        def _resolve(raw: str) -> Path:
            p = Path(raw).expanduser()
            return (p if p.is_absolute() else base / p).resolve()

        return ProviderConfig(
            remote=self.remote_config(),
            static_content_paths=[_resolve(p) for p in _split_csv(self.static_content_paths)],
            discovery_roots=[_resolve(p) for p in _split_csv(self.discovery_roots)],
            discovery_app_prefix=self.discovery_app_prefix,
        )


@lru_cache()
def get_settings() -> Settings:
    """Return a cached singleton `Settings` instance."""
    return Settings()
