"""Content service FastAPI application.

Exposes the FastAPI app, attaches tracing middleware, includes content routes,
and builds the unified content provider on startup.
"""

from fastapi import FastAPI
from packages.common.config import get_settings
from packages.common.logging import configure_logging
from packages.common.tracing import trace_middleware
from .provider import create_unified_content_provider
from .routes import router as content_router

app = FastAPI(title="iiskills Content Service", version="1.0.0")
app.middleware("http")(trace_middleware)
app.include_router(content_router)


@app.on_event("startup")
async def _init() -> None:
    """Configure logging and build the content provider from settings."""
    s = get_settings()
    configure_logging(s.log_level, json_logs=s.json_logs, service=s.service_name)
    app.state.provider = await create_unified_content_provider(s.provider_config())
