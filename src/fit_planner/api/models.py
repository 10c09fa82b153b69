"""Pydantic models for the plan generation API."""

from pydantic import BaseModel, Field

from fit_planner.domain.profiles import DietPreferences, NutritionTarget, UserProfile
from fit_planner.domain.results import AcceptedPlan, GenerationReport, PlanRejected
from fit_planner.domain.workouts import WorkoutType
from fit_planner.services.reporting import rejection_body


class DietPlanRequest(BaseModel):
    """Diet plan generation payload."""

    profile: UserProfile = Field(default_factory=UserProfile)
    preferences: DietPreferences = Field(default_factory=DietPreferences)
    nutrition_target: NutritionTarget
    plan_day: int = Field(default=1, ge=1, le=7)


class WorkoutPlanRequest(BaseModel):
    """Workout plan generation payload."""

    profile: UserProfile = Field(default_factory=UserProfile)
    workout_type: WorkoutType = WorkoutType.FULL_BODY
    duration_minutes: int = Field(default=45, ge=10, le=180)
    plan_day: int = Field(default=1, ge=1, le=7)


def report_envelope(report: GenerationReport) -> dict[str, object]:
    """Serialize a pipeline report into the response envelope."""
    outcome = report.outcome
    if isinstance(outcome, AcceptedPlan):
        data: dict[str, object] | None = outcome.plan.model_dump(mode="json")
        error = None
        warnings = outcome.warnings
    else:
        data = None
        error = rejection_body(outcome)
        warnings = outcome.warnings
    return {
        "success": isinstance(outcome, AcceptedPlan),
        "data": data,
        "error": error,
        "metadata": {
            "cached": report.source == "cache",
            "cache_source": report.source,
            "deduplicated": report.deduplicated,
            "fingerprint": report.fingerprint,
            "generation_time_ms": report.generation_time_ms,
            "warnings": [issue.model_dump(mode="json") for issue in warnings],
        },
    }


def error_envelope(error: dict[str, object]) -> dict[str, object]:
    """Envelope for failures that produced no report."""
    return {"success": False, "data": None, "error": error, "metadata": None}


def is_rejected(report: GenerationReport) -> bool:
    """Whether the report carries a rejection."""
    return isinstance(report.outcome, PlanRejected)
