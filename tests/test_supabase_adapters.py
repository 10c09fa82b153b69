"""Tests for Supabase adapter implementations."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime

from fit_planner.adapters.supabase_exercise_repository import (
    SupabaseExerciseRepository,
)
from fit_planner.adapters.supabase_plan_cache import SupabasePlanCacheStore
from fit_planner.services.cache import PlanCacheEntry


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": [], "delete": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)
    ranges: list[tuple[int, int]] = field(default_factory=list)
    upsert_conflicts: list[str | None] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload, on_conflict: str | None = None) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.last_payload = payload
        self.upsert_conflicts.append(on_conflict)
        return self

    def delete(self) -> "FakeTable":
        self._action = "delete"
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def gt(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def order(self, _column: str, desc: bool = False) -> "FakeTable":
        return self

    def range(self, start: int, end: int) -> "FakeTable":
        self.ranges.append((start, end))
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def _exercise_row(index: int, media: str | None = "https://media/x.gif") -> dict:
    return {
        "id": f"ex-{index:03d}",
        "name": f"Exercise {index}",
        "body_part": "Chest",
        "target_muscles": ["Pectorals", " Triceps "],
        "equipment": "Body Weight",
        "media_url": media,
    }


def test_exercise_repository_reads_all_pages() -> None:
    client = FakeSupabaseClient()
    table = client.table("exercises")
    table.queue("select", [_exercise_row(1), _exercise_row(2)])
    table.queue("select", [_exercise_row(3, media=None)])

    repository = SupabaseExerciseRepository(client, page_size=2)
    entries = repository.list_exercises()

    assert [entry.id for entry in entries] == ["ex-001", "ex-002", "ex-003"]
    assert table.ranges == [(0, 1), (2, 3)]
    first = entries[0]
    assert first.body_part == "chest"
    assert first.equipment == "body weight"
    assert first.target_muscles == frozenset({"pectorals", "triceps"})
    assert first.has_media
    assert entries[2].media_ref is None


def test_exercise_repository_accepts_comma_separated_muscles() -> None:
    client = FakeSupabaseClient()
    row = _exercise_row(1)
    row["target_muscles"] = "glutes, hamstrings"
    client.table("exercises").queue("select", [row])

    entries = SupabaseExerciseRepository(client).list_exercises()

    assert entries[0].target_muscles == frozenset({"glutes", "hamstrings"})


def test_plan_cache_upserts_with_expiry() -> None:
    client = FakeSupabaseClient()
    created_at = datetime(2026, 1, 1, tzinfo=UTC)
    entry = PlanCacheEntry(
        fingerprint="fp-1",
        kind="diet",
        result={"plan": {"title": "Day 1"}, "warnings": []},
        created_at=created_at,
    )

    asyncio.run(SupabasePlanCacheStore(client).set(entry, ttl_seconds=3600))

    table = client.tables["generation_cache"]
    assert table.upsert_conflicts == ["fingerprint"]
    assert table.last_payload == {
        "fingerprint": "fp-1",
        "kind": "diet",
        "result": {"plan": {"title": "Day 1"}, "warnings": []},
        "created_at": "2026-01-01T00:00:00+00:00",
        "expires_at": "2026-01-01T01:00:00+00:00",
    }


def test_plan_cache_get_and_miss() -> None:
    client = FakeSupabaseClient()
    table = client.table("generation_cache")
    table.queue(
        "select",
        [
            {
                "fingerprint": "fp-1",
                "kind": "workout",
                "result": {"plan": {"title": "Push"}},
                "created_at": "2026-01-01T00:00:00+00:00",
            }
        ],
    )
    store = SupabasePlanCacheStore(client)

    hit = asyncio.run(store.get("fp-1"))
    miss = asyncio.run(store.get("fp-2"))

    assert hit is not None
    assert hit.kind == "workout"
    assert hit.result == {"plan": {"title": "Push"}}
    assert hit.created_at == datetime(2026, 1, 1, tzinfo=UTC)
    assert miss is None
    assert ("fingerprint", "fp-1") in table.last_filters
    assert any(column == "expires_at" for column, _ in table.last_filters)


def test_plan_cache_delete() -> None:
    client = FakeSupabaseClient()
    table = client.table("generation_cache")
    table.queue("delete", [{"fingerprint": "fp-1"}])
    store = SupabasePlanCacheStore(client)

    assert asyncio.run(store.delete("fp-1")) is True
    assert asyncio.run(store.delete("fp-1")) is False
