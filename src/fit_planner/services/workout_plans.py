"""Workout plan pipeline: filter catalog, prompt, generate, resolve, cache."""

import logging
import time
from dataclasses import dataclass

from fit_planner.domain.profiles import UserProfile
from fit_planner.domain.results import AcceptedPlan, GenerationReport, PlanRejected
from fit_planner.domain.validation import IssueCode, ValidationIssue
from fit_planner.domain.workouts import (
    GeneratedWorkoutPlan,
    ResolvedWorkoutPlan,
    WorkoutType,
)
from fit_planner.services.catalog import CatalogService
from fit_planner.services.context import resolve_context
from fit_planner.services.dedup import GenerationCoordinator, compute_fingerprint
from fit_planner.services.exercise_resolution import ExerciseResolver
from fit_planner.services.generation import GenerationService, SchemaError
from fit_planner.services.prompts import PromptBuilder
from fit_planner.services.reporting import log_issues, reject, reject_schema

_logger = logging.getLogger(__name__)

WORKOUT_PROFILE_FIELDS = {
    "fitness_goal",
    "experience_level",
    "available_equipment",
    "injuries",
}


def workout_fingerprint(
    profile: UserProfile,
    workout_type: WorkoutType,
    duration_minutes: int,
    plan_day: int = 1,
) -> str:
    """Fingerprint of everything that shapes a workout."""
    return compute_fingerprint(
        "workout",
        {
            "profile": profile.model_dump(include=WORKOUT_PROFILE_FIELDS),
            "workout_type": workout_type,
            "duration_minutes": duration_minutes,
            "plan_day": plan_day,
        },
    )


@dataclass
class WorkoutPlanService:
    """Produces workouts grounded on catalog exercises with media."""

    catalog_service: CatalogService
    prompt_builder: PromptBuilder
    generation_service: GenerationService
    coordinator: GenerationCoordinator

    async def generate(
        self,
        profile: UserProfile,
        workout_type: WorkoutType,
        duration_minutes: int,
        plan_day: int = 1,
    ) -> GenerationReport[ResolvedWorkoutPlan]:
        """Return a cached or freshly generated workout decision."""
        fingerprint = workout_fingerprint(
            profile, workout_type, duration_minutes, plan_day
        )
        started = time.perf_counter()
        lookup = await self.coordinator.get_or_generate(
            fingerprint,
            lambda: self._generate(profile, workout_type, duration_minutes),
            AcceptedPlan[ResolvedWorkoutPlan],
            kind="workout",
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        _logger.info(
            "Workout plan request: fingerprint=%s source=%s deduplicated=%s "
            "accepted=%s elapsed_ms=%s",
            fingerprint[:12],
            lookup.source,
            lookup.deduplicated,
            isinstance(lookup.outcome, AcceptedPlan),
            elapsed_ms,
        )
        return GenerationReport(
            outcome=lookup.outcome,
            fingerprint=fingerprint,
            source=lookup.source,
            deduplicated=lookup.deduplicated,
            generation_time_ms=elapsed_ms,
        )

    async def _generate(
        self,
        profile: UserProfile,
        workout_type: WorkoutType,
        duration_minutes: int,
    ) -> AcceptedPlan[ResolvedWorkoutPlan] | PlanRejected:
        catalog = await self.catalog_service.get_catalog()
        context = resolve_context(catalog, profile, workout_type)
        if not context.filtered_exercises:
            issue = ValidationIssue.critical(
                IssueCode.INVALID_EXERCISE,
                "No catalog exercises fit the profile and workout type",
                workout_type=workout_type.value,
                equipment=sorted(profile.available_equipment),
                injuries=sorted(profile.injuries),
            )
            log_issues([issue], kind="workout")
            return PlanRejected(
                code=IssueCode.INVALID_EXERCISE.value,
                message=issue.message,
                errors=[issue],
            )

        prompt = self.prompt_builder.build_workout_prompt(
            profile, workout_type, duration_minutes, context
        )
        parsed = await self.generation_service.generate(prompt, GeneratedWorkoutPlan)
        if isinstance(parsed, SchemaError):
            rejected = reject_schema(parsed)
            log_issues(rejected.errors, kind="workout")
            return rejected

        resolution = ExerciseResolver(catalog).resolve(parsed, context.filtered_exercises)
        result = resolution.result
        log_issues([*result.errors, *result.warnings], kind="workout")
        if resolution.plan is None:
            return reject(result)
        return AcceptedPlan[ResolvedWorkoutPlan](
            plan=resolution.plan, warnings=result.warnings
        )
