"""Exercise catalog domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ExerciseCatalogEntry:
    """Represents a known exercise with demonstration media."""

    id: str
    name: str
    body_part: str
    target_muscles: frozenset[str]
    equipment: str
    media_ref: str | None

    @property
    def has_media(self) -> bool:
        """Whether the entry can be shown with a demonstration."""
        return bool(self.media_ref)
