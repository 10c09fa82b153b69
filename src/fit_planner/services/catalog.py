"""Read-only exercise catalog and its loader."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol

from fit_planner.domain.exercises import ExerciseCatalogEntry

_logger = logging.getLogger(__name__)


class ExerciseRepository(Protocol):
    """Source of catalog entries."""

    def list_exercises(self) -> list[ExerciseCatalogEntry]:
        """Return every known exercise."""


@dataclass(frozen=True)
class CatalogPage:
    """A page of search results."""

    exercises: list[ExerciseCatalogEntry]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        """Whether more results exist after this page."""
        return self.offset + len(self.exercises) < self.total


class ExerciseCatalog:
    """Indexed, immutable collection of exercise entries."""

    def __init__(self, entries: list[ExerciseCatalogEntry]) -> None:
        self._entries = tuple(sorted(entries, key=lambda entry: entry.id))
        self._by_id = {entry.id: entry for entry in self._entries}
        self._by_name: dict[str, ExerciseCatalogEntry] = {}
        for entry in self._entries:
            self._by_name.setdefault(normalize_name(entry.name), entry)

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> tuple[ExerciseCatalogEntry, ...]:
        """All entries ordered by id."""
        return self._entries

    def lookup(self, exercise_id: str) -> ExerciseCatalogEntry | None:
        """Return an entry by id."""
        return self._by_id.get(exercise_id)

    def find_by_name(self, name: str) -> ExerciseCatalogEntry | None:
        """Return an entry by case and spacing insensitive name."""
        return self._by_name.get(normalize_name(name))

    def with_media(self) -> list[ExerciseCatalogEntry]:
        """Return entries that have demonstration media."""
        return [entry for entry in self._entries if entry.has_media]

    def search(  # noqa: PLR0913
        self,
        query: str | None = None,
        *,
        body_part: str | None = None,
        equipment: str | None = None,
        muscle: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> CatalogPage:
        """Search entries by name fragment and exact attribute filters."""
        needle = normalize_name(query) if query else None
        matches = [
            entry
            for entry in self._entries
            if (needle is None or needle in normalize_name(entry.name))
            and (body_part is None or entry.body_part == body_part.lower())
            and (equipment is None or entry.equipment == equipment.lower())
            and (muscle is None or muscle.lower() in entry.target_muscles)
        ]
        matches.sort(key=lambda entry: (entry.name, entry.id))
        return CatalogPage(
            exercises=matches[offset : offset + limit],
            total=len(matches),
            limit=limit,
            offset=offset,
        )

    def media_coverage(self) -> float:
        """Share of entries that have demonstration media."""
        if not self._entries:
            return 0.0
        return len(self.with_media()) / len(self._entries)


@dataclass
class CatalogService:
    """Loads the catalog once and hands out the shared instance."""

    repository: ExerciseRepository
    _catalog: ExerciseCatalog | None = field(default=None, init=False, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    async def get_catalog(self) -> ExerciseCatalog:
        """Return the catalog, loading it on first use."""
        if self._catalog is not None:
            return self._catalog
        async with self._lock:
            if self._catalog is None:
                entries = await asyncio.to_thread(self.repository.list_exercises)
                self._catalog = ExerciseCatalog(entries)
                _logger.info(
                    "Exercise catalog loaded: entries=%s media_coverage=%.2f",
                    len(self._catalog),
                    self._catalog.media_coverage(),
                )
        return self._catalog


def normalize_name(name: str) -> str:
    """Lower-case a name and collapse separators to single spaces."""
    cleaned = name.lower().replace("_", " ").replace("-", " ")
    return " ".join(cleaned.split())
