"""Tests for the id-precedence merge and app id resolution."""

from services.content.merge import merge_by_id
from services.content.records import belongs_to_app, resolve_app_id


def test_remote_version_wins_over_fallbacks() -> None:
    remote = [{"id": "c1", "title": "A", "_source": "supabase"}]
    static = [{"id": "c1", "title": "B", "_source": "local"}]
    discovered = [{"id": "c1", "title": "C", "_source": "discovered"}]

    merged = merge_by_id(remote, static, discovered)

    assert merged == [{"id": "c1", "title": "A", "_source": "supabase"}]


def test_static_wins_over_discovered_when_remote_is_silent() -> None:
    static = [{"id": "c2", "title": "Static"}]
    discovered = [{"id": "c2", "title": "Discovered"}]

    merged = merge_by_id([], static, discovered)

    assert [r["title"] for r in merged] == ["Static"]


def test_order_is_remote_then_static_then_discovered() -> None:
    merged = merge_by_id(
        [{"id": "r1"}, {"id": "r2"}],
        [{"id": "s1"}, {"id": "r1"}],
        [{"id": "d1"}, {"id": "s1"}],
    )
    assert [r["id"] for r in merged] == ["r1", "r2", "s1", "d1"]


def test_same_id_in_every_source_yields_one_record() -> None:
    sources = [[{"id": "x", "n": i}] for i in range(5)]
    merged = merge_by_id(*sources)
    assert len(merged) == 1
    assert merged[0]["n"] == 0


def test_duplicates_inside_a_fallback_source_collapse() -> None:
    merged = merge_by_id([], [{"id": "a", "n": 1}, {"id": "a", "n": 2}])
    assert merged == [{"id": "a", "n": 1}]


def test_numeric_and_string_ids_collide() -> None:
    merged = merge_by_id([{"id": "7", "title": "remote"}], [{"id": 7, "title": "local"}])
    assert len(merged) == 1
    assert merged[0]["title"] == "remote"


def test_records_without_id_are_kept() -> None:
    merged = merge_by_id([{"title": "no id"}], [{"title": "also no id"}])
    assert len(merged) == 2


def test_merge_does_not_mutate_inputs() -> None:
    remote = [{"id": "a"}]
    static = [{"id": "b"}]
    merge_by_id(remote, static)
    assert remote == [{"id": "a"}]
    assert static == [{"id": "b"}]


def test_merge_of_nothing() -> None:
    assert merge_by_id() == []
    assert merge_by_id([], [], []) == []


def test_resolve_app_id_field_order() -> None:
    assert resolve_app_id({"appId": "a", "app": "b", "subdomain": "c", "_discoveredFrom": "d"}) == "a"
    assert resolve_app_id({"app": "b", "subdomain": "c", "_discoveredFrom": "d"}) == "b"
    assert resolve_app_id({"subdomain": "c", "_discoveredFrom": "d"}) == "c"
    assert resolve_app_id({"_discoveredFrom": "d"}) == "d"
    assert resolve_app_id({}) == "unknown"


def test_resolve_app_id_skips_empty_values() -> None:
    assert resolve_app_id({"appId": "", "app": None, "subdomain": "learn-jee"}) == "learn-jee"


def test_belongs_to_app_checks_every_field() -> None:
    record = {"appId": "learn-ai", "app": "learn-math"}
    assert belongs_to_app(record, "learn-ai")
    assert belongs_to_app(record, "learn-math")
    assert not belongs_to_app(record, "learn-jee")
