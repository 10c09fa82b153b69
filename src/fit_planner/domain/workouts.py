"""Models for generated and resolved workout plans."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class WorkoutType(StrEnum):
    """Workout focus requested by the caller."""

    FULL_BODY = "full_body"
    UPPER_BODY = "upper_body"
    LOWER_BODY = "lower_body"
    PUSH = "push"
    PULL = "pull"
    LEGS = "legs"
    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    ARMS = "arms"
    CORE = "core"
    CARDIO = "cardio"


class ExerciseReference(BaseModel):
    """Exercise as referenced by the generator, by catalog id or free text."""

    model_config = ConfigDict(frozen=True)

    exercise_id: str | None = None
    name: str | None = None
    target_muscles: list[str] = Field(default_factory=list)
    body_part: str | None = None
    sets: int = Field(ge=1, le=10)
    reps: str
    rest_seconds: int | None = Field(default=None, ge=0, le=600)
    notes: str | None = None

    @property
    def label(self) -> str:
        """Human readable reference used in issue messages."""
        return self.name or self.exercise_id or "<unnamed>"


class GeneratedWorkoutPlan(BaseModel):
    """Workout exactly as returned by the generator."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    warmup: list[ExerciseReference] = Field(default_factory=list)
    exercises: list[ExerciseReference] = Field(default_factory=list)
    cooldown: list[ExerciseReference] = Field(default_factory=list)


class ResolvedExercise(BaseModel):
    """Exercise grounded on a catalog entry with demonstration media."""

    model_config = ConfigDict(frozen=True)

    exercise_id: str
    name: str
    body_part: str
    target_muscles: list[str]
    equipment: str
    media_ref: str
    sets: int
    reps: str
    rest_seconds: int | None = None
    notes: str | None = None
    requested_ref: str
    tier: str


class ResolvedWorkoutPlan(BaseModel):
    """Workout where every exercise maps to a catalog entry."""

    model_config = ConfigDict(frozen=True)

    title: str
    description: str = ""
    warmup: list[ResolvedExercise] = Field(default_factory=list)
    exercises: list[ResolvedExercise] = Field(default_factory=list)
    cooldown: list[ResolvedExercise] = Field(default_factory=list)

    def all_exercises(self) -> list[ResolvedExercise]:
        """Return warm-up, main and cool-down exercises in order."""
        return [*self.warmup, *self.exercises, *self.cooldown]
