"""Supabase implementation for the exercise catalog."""

from dataclasses import dataclass

from supabase import Client

from fit_planner.domain.exercises import ExerciseCatalogEntry
from fit_planner.services.catalog import ExerciseRepository

_COLUMNS = "id,name,body_part,target_muscles,equipment,media_url"


@dataclass
class SupabaseExerciseRepository(ExerciseRepository):
    """Supabase-backed repository for catalog exercises."""

    client: Client
    page_size: int = 1000

    def list_exercises(self) -> list[ExerciseCatalogEntry]:
        """Return every exercise, reading the table page by page."""
        entries: list[ExerciseCatalogEntry] = []
        start = 0
        while True:
            response = (
                self.client.table("exercises")
                .select(_COLUMNS)
                .order("id")
                .range(start, start + self.page_size - 1)
                .execute()
            )
            rows = response.data or []
            entries.extend(_parse_exercise(row) for row in rows)
            if len(rows) < self.page_size:
                return entries
            start += self.page_size


def _parse_exercise(row: dict[str, object]) -> ExerciseCatalogEntry:
    """Parse an exercise row into a catalog entry."""
    raw_muscles = row.get("target_muscles") or []
    if isinstance(raw_muscles, str):
        raw_muscles = raw_muscles.split(",")
    media = row.get("media_url")
    return ExerciseCatalogEntry(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        body_part=str(row.get("body_part") or "").strip().lower(),
        target_muscles=frozenset(
            str(muscle).strip().lower() for muscle in raw_muscles if str(muscle).strip()
        ),
        equipment=str(row.get("equipment") or "body weight").strip().lower(),
        media_ref=str(media) if media else None,
    )
