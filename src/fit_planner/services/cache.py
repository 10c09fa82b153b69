"""Plan cache abstractions."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Protocol


@dataclass(frozen=True)
class PlanCacheEntry:
    """Accepted generation result stored under its fingerprint."""

    fingerprint: str
    kind: str
    result: dict[str, object]
    created_at: datetime


class PlanCacheStore(Protocol):
    """Cache interface for accepted plans."""

    async def get(self, fingerprint: str) -> PlanCacheEntry | None:
        """Return a cached entry if present and not expired."""

    async def set(self, entry: PlanCacheEntry, ttl_seconds: int) -> None:
        """Store an entry with a TTL in seconds, replacing any previous one."""

    async def delete(self, fingerprint: str) -> bool:
        """Remove an entry; return whether one existed."""


@dataclass
class _CacheSlot:
    entry: PlanCacheEntry
    expires_at: datetime


@dataclass
class InMemoryCache(PlanCacheStore):
    """Process-local plan cache."""

    _slots: dict[str, _CacheSlot]

    def __init__(self) -> None:
        self._slots = {}

    async def get(self, fingerprint: str) -> PlanCacheEntry | None:
        """Return a cached entry if it hasn't expired."""
        slot = self._slots.get(fingerprint)
        if slot is None:
            return None
        if datetime.now(tz=UTC) >= slot.expires_at:
            self._slots.pop(fingerprint, None)
            return None
        return slot.entry

    async def set(self, entry: PlanCacheEntry, ttl_seconds: int) -> None:
        """Store an entry with a TTL."""
        expires_at = datetime.now(tz=UTC) + timedelta(seconds=ttl_seconds)
        self._slots[entry.fingerprint] = _CacheSlot(entry=entry, expires_at=expires_at)

    async def delete(self, fingerprint: str) -> bool:
        """Remove an entry if present."""
        return self._slots.pop(fingerprint, None) is not None

    def __len__(self) -> int:
        return len(self._slots)
