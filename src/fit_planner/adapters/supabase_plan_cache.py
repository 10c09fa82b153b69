"""Supabase implementation for the plan cache."""

import asyncio
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from supabase import Client

from fit_planner.services.cache import PlanCacheEntry, PlanCacheStore


@dataclass
class SupabasePlanCacheStore(PlanCacheStore):
    """Supabase-backed store for accepted plans."""

    client: Client

    async def get(self, fingerprint: str) -> PlanCacheEntry | None:
        """Return a cached entry if present and not expired."""
        return await asyncio.to_thread(self._get, fingerprint)

    async def set(self, entry: PlanCacheEntry, ttl_seconds: int) -> None:
        """Store an entry with a TTL in one upsert."""
        await asyncio.to_thread(self._set, entry, ttl_seconds)

    async def delete(self, fingerprint: str) -> bool:
        """Remove an entry; return whether one existed."""
        return await asyncio.to_thread(self._delete, fingerprint)

    def _get(self, fingerprint: str) -> PlanCacheEntry | None:
        now = datetime.now(tz=UTC)
        response = (
            self.client.table("generation_cache")
            .select("fingerprint,kind,result,created_at,expires_at")
            .eq("fingerprint", fingerprint)
            .gt("expires_at", now.isoformat())
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_entry(response.data[0])

    def _set(self, entry: PlanCacheEntry, ttl_seconds: int) -> None:
        expires_at = entry.created_at + timedelta(seconds=ttl_seconds)
        self.client.table("generation_cache").upsert(
            {
                "fingerprint": entry.fingerprint,
                "kind": entry.kind,
                "result": entry.result,
                "created_at": entry.created_at.isoformat(),
                "expires_at": expires_at.isoformat(),
            },
            on_conflict="fingerprint",
        ).execute()

    def _delete(self, fingerprint: str) -> bool:
        response = (
            self.client.table("generation_cache")
            .delete()
            .eq("fingerprint", fingerprint)
            .execute()
        )
        return bool(response.data)


def _parse_entry(row: dict[str, object]) -> PlanCacheEntry:
    """Parse a cache row into an entry."""
    created_raw = row.get("created_at")
    created_at = (
        datetime.fromisoformat(created_raw)
        if isinstance(created_raw, str) and created_raw
        else datetime.now(tz=UTC)
    )
    return PlanCacheEntry(
        fingerprint=str(row["fingerprint"]),
        kind=str(row.get("kind", "")),
        result=dict(row.get("result") or {}),
        created_at=created_at,
    )
