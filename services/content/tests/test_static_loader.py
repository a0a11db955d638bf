"""Tests for the bundled JSON document source."""

import pytest

from packages.schemas.content import OrderBy, QueryOptions
from services.content.leaf import LeafErrorKind
from services.content.records import UnknownEntityError
from services.content.static_loader import (
    ContentDocumentError,
    StaticContentLoader,
    find_first_existing,
    read_document,
)

DOCUMENT = {
    "courses": [
        {"id": 1, "title": "Intro to AI", "appId": "learn-ai", "status": "published"},
        {"id": 2, "title": "Algebra", "subdomain": "learn-math", "status": "draft"},
        {"title": "missing id"},
    ],
    "modules": [
        {"id": "m2", "course_id": 1, "order_index": 2, "appId": "learn-ai"},
        {"id": "m1", "course_id": 1, "order_index": 1, "appId": "learn-ai"},
    ],
    "profiles": {"not": "a list"},
}


def test_find_first_existing_prefers_earlier_candidates(tmp_path, write_json) -> None:
    second = write_json(tmp_path / "b" / "content.json", {})
    first = write_json(tmp_path / "a" / "content.json", {})
    assert find_first_existing([tmp_path / "missing.json", first, second]) == first
    assert find_first_existing([tmp_path / "missing.json"]) is None


def test_read_document_rejects_non_objects(tmp_path, write_json) -> None:
    path = write_json(tmp_path / "content.json", [1, 2, 3])
    with pytest.raises(ContentDocumentError):
        read_document(path)


@pytest.mark.asyncio
async def test_fetch_tags_and_normalises(tmp_path, write_json) -> None:
    loader = StaticContentLoader.from_candidates([write_json(tmp_path / "content.json", DOCUMENT)])

    result = await loader.fetch("courses", QueryOptions())

    assert not result.failed
    assert [r.get("id") for r in result.data] == ["1", "2", None]
    assert all(r["_source"] == "local" for r in result.data)
    assert result.data[1]["appId"] == "learn-math"


@pytest.mark.asyncio
async def test_fetch_applies_filters_app_order_and_limit(tmp_path, write_json) -> None:
    loader = StaticContentLoader.from_candidates([write_json(tmp_path / "content.json", DOCUMENT)])

    published = await loader.fetch("courses", QueryOptions(filters={"status": "published"}))
    assert [r["id"] for r in published.data] == ["1"]

    math = await loader.fetch("courses", QueryOptions(app_id="learn-math"))
    assert [r["id"] for r in math.data] == ["2"]

    modules = await loader.fetch("modules", QueryOptions(order=OrderBy(field="order_index"), limit=1))
    assert [r["id"] for r in modules.data] == ["m1"]


@pytest.mark.asyncio
async def test_missing_or_non_list_entity_is_empty(tmp_path, write_json) -> None:
    loader = StaticContentLoader.from_candidates([write_json(tmp_path / "content.json", DOCUMENT)])

    profiles = await loader.fetch("profiles", QueryOptions())
    questions = await loader.fetch("questions", QueryOptions())

    assert not profiles.failed and profiles.data == []
    assert not questions.failed and questions.data == []


@pytest.mark.asyncio
async def test_no_document_reports_not_found(tmp_path) -> None:
    loader = StaticContentLoader.from_candidates([tmp_path / "nowhere.json"])

    result = await loader.fetch("courses", QueryOptions())

    assert not loader.available
    assert result.error is LeafErrorKind.NOT_FOUND
    assert result.data == []
    assert await loader.load() is None


@pytest.mark.asyncio
async def test_malformed_document_reports_parse_failure(tmp_path) -> None:
    path = tmp_path / "content.json"
    path.write_text("{ not json", encoding="utf-8")
    loader = StaticContentLoader(path)

    result = await loader.fetch("courses", QueryOptions())

    assert result.error is LeafErrorKind.PARSE_FAILED
    assert result.data == []
    assert await loader.load() is None


@pytest.mark.asyncio
async def test_document_is_reread_on_every_fetch(tmp_path, write_json) -> None:
    path = write_json(tmp_path / "content.json", {"courses": [{"id": "a"}]})
    loader = StaticContentLoader(path)

    first = await loader.fetch("courses", QueryOptions())
    write_json(path, {"courses": [{"id": "a"}, {"id": "b"}]})
    second = await loader.fetch("courses", QueryOptions())

    assert len(first.data) == 1
    assert len(second.data) == 2


@pytest.mark.asyncio
async def test_unknown_entity_raises(tmp_path, write_json) -> None:
    loader = StaticContentLoader(write_json(tmp_path / "content.json", DOCUMENT))
    with pytest.raises(UnknownEntityError):
        await loader.fetch("newsletters", QueryOptions())
