"""iiskills content service entrypoint.

- `serve`: run the FastAPI content service under uvicorn
- `stats` / `apps` / `sources`: build a provider once and log the result as JSON
"""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from typing import Any, Optional, Sequence

import uvicorn
from dotenv import load_dotenv

from packages.common.config import get_settings
from packages.common.logging import configure_logging
from services.content.provider import create_unified_content_provider

load_dotenv(".env")

log = logging.getLogger("iiskills")


def _json(obj: Any) -> str:
    """Compact JSON for log output."""
    return json.dumps(obj, ensure_ascii=False, default=str)


async def _report(mode: str) -> Any:
    """Build a provider and return the requested report as plain data."""
    provider = await create_unified_content_provider(get_settings().provider_config())
    if mode == "stats":
        return (await provider.get_stats()).model_dump(mode="json")
    if mode == "apps":
        return [a.model_dump() for a in await provider.get_all_apps()]
    metadata = provider.get_discovery_metadata()
    return {
        "status": provider.get_source_status().model_dump(),
        "discovery": metadata.model_dump(mode="json") if metadata else None,
    }


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Parse CLI arguments and dispatch."""
    ap = argparse.ArgumentParser(prog="iiskills-content", description="iiskills content aggregation service")
    ap.add_argument("mode", choices=["serve", "stats", "apps", "sources"], nargs="?", default="serve")
    ap.add_argument("--host", default="0.0.0.0")
    ap.add_argument("--port", type=int, default=8000)
    args = ap.parse_args(argv)

    s = get_settings()
    configure_logging(s.log_level, json_logs=s.json_logs, service=s.service_name)

    if args.mode == "serve":
        uvicorn.run("services.content.app:app", host=args.host, port=args.port)
        return

    log.info(_json(asyncio.run(_report(args.mode))))


if __name__ == "__main__":
    main()
