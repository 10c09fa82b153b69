"""Request fingerprinting, plan caching and in-flight coalescing."""

import asyncio
import hashlib
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Generic

from fit_planner.domain.results import AcceptedPlan, CacheSource, PlanRejected, PlanT
from fit_planner.services.cache import PlanCacheEntry, PlanCacheStore

_logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 7 * 24 * 60 * 60

Outcome = AcceptedPlan[PlanT] | PlanRejected


def compute_fingerprint(kind: str, payload: dict[str, object]) -> str:
    """Hash a request into a stable cache key.

    Keys are sorted, set-valued fields are sorted and strings are lower-cased,
    so requests that differ only in ordering or case share a fingerprint.
    """
    canonical = json.dumps(
        {"kind": kind, "request": _canonical(payload)},
        sort_keys=True,
        separators=(",", ":"),
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _canonical(value: object) -> object:
    if isinstance(value, dict):
        return {str(key): _canonical(item) for key, item in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(item) for item in value), key=json.dumps)
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    if isinstance(value, Enum):
        return _canonical(value.value)
    if isinstance(value, str):
        return value.strip().lower()
    return value


@dataclass(frozen=True)
class CacheLookup(Generic[PlanT]):
    """Outcome of a coordinated generation and where it came from."""

    outcome: AcceptedPlan[PlanT] | PlanRejected
    source: CacheSource
    deduplicated: bool


@dataclass
class _InFlight:
    task: asyncio.Task
    waiters: int = 0


@dataclass
class GenerationCoordinator:
    """Serves cached plans and runs at most one generation per fingerprint."""

    cache: PlanCacheStore
    ttl_seconds: int = DEFAULT_TTL_SECONDS
    _in_flight: dict[str, _InFlight] = field(default_factory=dict, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def get_or_generate(
        self,
        fingerprint: str,
        generate: Callable[[], Awaitable[Outcome]],
        result_type: type[AcceptedPlan[PlanT]],
        *,
        kind: str = "plan",
    ) -> CacheLookup[PlanT]:
        """Return the cached plan, join an identical generation, or start one.

        A waiter that is cancelled detaches without affecting the others; the
        shared generation is cancelled only once every waiter has left.
        """
        cached = await self._cached(fingerprint, result_type)
        if cached is not None:
            return CacheLookup(outcome=cached, source="cache", deduplicated=False)

        async with self._lock:
            in_flight = self._in_flight.get(fingerprint)
            deduplicated = in_flight is not None
            if in_flight is None:
                task = asyncio.create_task(
                    self._run(fingerprint, kind, generate, result_type)
                )
                in_flight = _InFlight(task=task)
                self._in_flight[fingerprint] = in_flight
            in_flight.waiters += 1
        if deduplicated:
            _logger.info(
                "Generation coalesced: fingerprint=%s waiters=%s",
                fingerprint[:12],
                in_flight.waiters,
            )

        try:
            outcome, source = await asyncio.shield(in_flight.task)
        except asyncio.CancelledError:
            in_flight.waiters -= 1
            if in_flight.waiters == 0 and not in_flight.task.done():
                _logger.info(
                    "Generation cancelled: fingerprint=%s", fingerprint[:12]
                )
                if self._in_flight.get(fingerprint) is in_flight:
                    del self._in_flight[fingerprint]
                in_flight.task.cancel()
            raise
        except Exception:
            in_flight.waiters -= 1
            raise
        in_flight.waiters -= 1
        return CacheLookup(outcome=outcome, source=source, deduplicated=deduplicated)

    async def invalidate(self, fingerprint: str) -> bool:
        """Drop a cached plan."""
        removed = await self.cache.delete(fingerprint)
        _logger.info(
            "Cache invalidated: fingerprint=%s removed=%s", fingerprint[:12], removed
        )
        return removed

    def in_flight_count(self) -> int:
        """Number of generations currently running."""
        return len(self._in_flight)

    async def _run(
        self,
        fingerprint: str,
        kind: str,
        generate: Callable[[], Awaitable[Outcome]],
        result_type: type[AcceptedPlan[PlanT]],
    ) -> tuple[Outcome, CacheSource]:
        try:
            cached = await self._cached(fingerprint, result_type)
            if cached is not None:
                return cached, "cache"
            outcome = await generate()
            if isinstance(outcome, AcceptedPlan):
                await self.cache.set(
                    PlanCacheEntry(
                        fingerprint=fingerprint,
                        kind=kind,
                        result=outcome.model_dump(mode="json"),
                        created_at=datetime.now(tz=UTC),
                    ),
                    self.ttl_seconds,
                )
                _logger.info("Cache stored: fingerprint=%s kind=%s", fingerprint[:12], kind)
            else:
                _logger.info(
                    "Rejected outcome not cached: fingerprint=%s code=%s",
                    fingerprint[:12],
                    outcome.code,
                )
            return outcome, "fresh"
        finally:
            current = self._in_flight.get(fingerprint)
            if current is not None and current.task is asyncio.current_task():
                del self._in_flight[fingerprint]

    async def _cached(
        self, fingerprint: str, result_type: type[AcceptedPlan[PlanT]]
    ) -> AcceptedPlan[PlanT] | None:
        entry = await self.cache.get(fingerprint)
        if entry is None:
            _logger.info("Cache miss: fingerprint=%s", fingerprint[:12])
            return None
        _logger.info("Cache hit: fingerprint=%s kind=%s", fingerprint[:12], entry.kind)
        return result_type.model_validate(entry.result)
