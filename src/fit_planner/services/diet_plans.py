"""Diet plan pipeline: prompt, generate, validate, adjust, cache."""

import logging
import time
from dataclasses import dataclass

from fit_planner.domain.meals import MealPlan
from fit_planner.domain.profiles import DietPreferences, NutritionTarget, UserProfile
from fit_planner.domain.results import AcceptedPlan, GenerationReport, PlanRejected
from fit_planner.domain.validation import IssueCode, ValidationIssue
from fit_planner.services.context import ResolvedContext, resolve_cuisine
from fit_planner.services.dedup import GenerationCoordinator, compute_fingerprint
from fit_planner.services.diet_validation import DietValidator
from fit_planner.services.generation import GenerationService, SchemaError
from fit_planner.services.portions import adjust_portions
from fit_planner.services.prompts import PromptBuilder
from fit_planner.services.reporting import log_issues, reject, reject_schema

_logger = logging.getLogger(__name__)

DIET_PROFILE_FIELDS = {"country", "region", "age", "gender", "fitness_goal"}


def diet_fingerprint(
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
    plan_day: int = 1,
) -> str:
    """Fingerprint of everything that shapes a meal plan."""
    return compute_fingerprint(
        "diet",
        {
            "profile": profile.model_dump(include=DIET_PROFILE_FIELDS),
            "preferences": preferences.model_dump(),
            "target": target.model_dump(),
            "plan_day": plan_day,
        },
    )


@dataclass
class DietPlanService:
    """Produces validated, calorie-corrected meal plans."""

    prompt_builder: PromptBuilder
    generation_service: GenerationService
    validator: DietValidator
    coordinator: GenerationCoordinator

    async def generate(
        self,
        profile: UserProfile,
        preferences: DietPreferences,
        target: NutritionTarget,
        plan_day: int = 1,
    ) -> GenerationReport[MealPlan]:
        """Return a cached or freshly generated meal plan decision."""
        fingerprint = diet_fingerprint(profile, preferences, target, plan_day)
        started = time.perf_counter()
        lookup = await self.coordinator.get_or_generate(
            fingerprint,
            lambda: self._generate(profile, preferences, target),
            AcceptedPlan[MealPlan],
            kind="diet",
        )
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        _logger.info(
            "Diet plan request: fingerprint=%s source=%s deduplicated=%s "
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
        preferences: DietPreferences,
        target: NutritionTarget,
    ) -> AcceptedPlan[MealPlan] | PlanRejected:
        context = ResolvedContext(
            cuisine=resolve_cuisine(profile.country), filtered_exercises=[]
        )
        prompt = self.prompt_builder.build_diet_prompt(
            profile, preferences, target, context
        )
        parsed = await self.generation_service.generate(prompt, MealPlan)
        if isinstance(parsed, SchemaError):
            rejected = reject_schema(parsed)
            log_issues(rejected.errors, kind="diet")
            return rejected

        result = self.validator.validate(parsed, target, preferences)
        log_issues([*result.errors, *result.warnings], kind="diet")
        if not result.is_valid:
            return reject(result)

        adjustment = adjust_portions(parsed, target.daily_calories)
        warnings = list(result.warnings)
        if adjustment.adjusted:
            warnings.append(
                ValidationIssue.info(
                    IssueCode.PORTION_ADJUSTED,
                    f"Portions scaled by {adjustment.scale:.3f} to meet "
                    f"{target.daily_calories:.0f} kcal",
                    scale=round(adjustment.scale, 4),
                    calories_before=round(parsed.total_calories, 1),
                    calories_after=round(adjustment.plan.total_calories, 1),
                )
            )
        return AcceptedPlan[MealPlan](plan=adjustment.plan, warnings=warnings)
