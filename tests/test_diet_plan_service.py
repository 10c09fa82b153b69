"""Tests for the diet plan pipeline."""

import asyncio

import pytest

from fit_planner.domain.profiles import DietPreferences, NutritionTarget, UserProfile
from fit_planner.domain.results import AcceptedPlan, PlanRejected
from fit_planner.domain.validation import IssueCode
from fit_planner.errors import GenerationFailedError
from fit_planner.services.diet_plans import DietPlanService, diet_fingerprint
from tests.conftest import FakeGenerationClient, food, meal_plan_payload


def test_generates_and_caches_valid_plan(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
) -> None:
    first = asyncio.run(diet_plan_service.generate(profile, preferences, target))
    second = asyncio.run(diet_plan_service.generate(profile, preferences, target))

    assert isinstance(first.outcome, AcceptedPlan)
    assert first.source == "fresh"
    assert second.source == "cache"
    assert second.fingerprint == first.fingerprint
    assert len(generation_client.calls) == 1
    assert "2200 kcal" in generation_client.calls[0]["prompt"]


def test_moderate_drift_is_corrected(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
) -> None:
    generation_client.payloads["meal_plan"] = [
        meal_plan_payload(dinner=[food("Baked Salmon", 200, 50), food("Salad", 300, 13)])
    ]

    report = asyncio.run(diet_plan_service.generate(profile, preferences, target))

    assert isinstance(report.outcome, AcceptedPlan)
    plan = report.outcome.plan
    assert abs(plan.total_calories - 2200) / 2200 <= 0.02
    codes = [issue.code for issue in report.outcome.warnings]
    assert codes == [IssueCode.MODERATE_CALORIE_DRIFT, IssueCode.PORTION_ADJUSTED]


def test_accepted_plan_meal_totals_match_items(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
) -> None:
    payload = meal_plan_payload()
    for entry in payload["meals"]:
        entry["total_calories"] = 100
    generation_client.payloads["meal_plan"] = [payload]

    report = asyncio.run(diet_plan_service.generate(profile, preferences, target))

    assert isinstance(report.outcome, AcceptedPlan)
    for meal in report.outcome.plan.meals:
        assert meal.total_calories == sum(item.calories for item in meal.items)


def test_allergen_plan_is_rejected_and_not_cached(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    target: NutritionTarget,
) -> None:
    preferences = DietPreferences(diet_type="vegetarian", allergies=["peanuts"])
    generation_client.payloads["meal_plan"] = [
        meal_plan_payload(
            breakfast=[food("Peanut Butter Toast", 400, 15), food("Banana", 200, 20)],
            lunch=[food("Paneer Tikka", 500, 60), food("Brown Rice", 300, 7)],
            dinner=[food("Lentil Soup", 500, 50), food("Roasted Vegetables", 300, 13)],
        )
    ]

    first = asyncio.run(diet_plan_service.generate(profile, preferences, target))
    second = asyncio.run(diet_plan_service.generate(profile, preferences, target))

    assert isinstance(first.outcome, PlanRejected)
    assert first.outcome.code == "VALIDATION_FAILED"
    assert [issue.code for issue in first.outcome.errors] == [
        IssueCode.ALLERGEN_DETECTED
    ]
    assert second.source == "fresh"
    assert len(generation_client.calls) == 2


def test_schema_error_is_rejected(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
) -> None:
    generation_client.payloads["meal_plan"] = [{"meals": "not a list"}]

    report = asyncio.run(diet_plan_service.generate(profile, preferences, target))

    assert isinstance(report.outcome, PlanRejected)
    assert report.outcome.code == "SCHEMA_VALIDATION_FAILED"


def test_provider_failure_propagates(
    diet_plan_service: DietPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
    preferences: DietPreferences,
    target: NutritionTarget,
) -> None:
    generation_client.error = RuntimeError("boom")

    with pytest.raises(GenerationFailedError):
        asyncio.run(diet_plan_service.generate(profile, preferences, target))


def test_fingerprint_varies_by_plan_day(
    profile: UserProfile, preferences: DietPreferences, target: NutritionTarget
) -> None:
    assert diet_fingerprint(profile, preferences, target, 1) != diet_fingerprint(
        profile, preferences, target, 2
    )
    assert diet_fingerprint(profile, preferences, target) == diet_fingerprint(
        profile.model_copy(), preferences, target, 1
    )


def test_fingerprint_ignores_workout_fields(
    profile: UserProfile, preferences: DietPreferences, target: NutritionTarget
) -> None:
    other = profile.model_copy(update={"injuries": frozenset({"knee"})})

    assert diet_fingerprint(profile, preferences, target) == diet_fingerprint(
        other, preferences, target
    )
