"""Tests for the workout plan pipeline."""

import asyncio

from fit_planner.domain.profiles import UserProfile
from fit_planner.domain.results import AcceptedPlan, PlanRejected
from fit_planner.domain.validation import IssueCode
from fit_planner.domain.workouts import WorkoutType
from fit_planner.services.workout_plans import WorkoutPlanService, workout_fingerprint
from tests.conftest import (
    FakeGenerationClient,
    InMemoryExerciseRepository,
    exercise_ref,
    workout_payload,
)


def test_generates_resolved_workout(
    workout_plan_service: WorkoutPlanService,
    generation_client: FakeGenerationClient,
    exercise_repository: InMemoryExerciseRepository,
    profile: UserProfile,
) -> None:
    first = asyncio.run(workout_plan_service.generate(profile, WorkoutType.PUSH, 45))
    second = asyncio.run(workout_plan_service.generate(profile, WorkoutType.PUSH, 45))

    assert isinstance(first.outcome, AcceptedPlan)
    plan = first.outcome.plan
    assert [item.exercise_id for item in plan.exercises] == ["ex-001", "ex-002", "ex-015"]
    assert all(item.media_ref for item in plan.all_exercises())
    assert second.source == "cache"
    assert second.outcome.plan == plan
    assert len(generation_client.calls) == 1
    assert exercise_repository.loads == 1
    assert 'id="ex-001"' in generation_client.calls[0]["prompt"]


def test_substitution_is_reported_as_warning(
    workout_plan_service: WorkoutPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
) -> None:
    generation_client.payloads["workout_plan"] = [
        workout_payload(
            cooldown=[exercise_ref(None, "Zyzzyva Flow", ["pectorals"], "chest")]
        )
    ]

    report = asyncio.run(workout_plan_service.generate(profile, WorkoutType.PUSH, 45))

    assert isinstance(report.outcome, AcceptedPlan)
    codes = [issue.code for issue in report.outcome.warnings]
    assert IssueCode.EXERCISE_SUBSTITUTED in codes
    assert "pectorals" in report.outcome.plan.cooldown[0].target_muscles


def test_ungrounded_main_exercise_rejects(
    workout_plan_service: WorkoutPlanService,
    generation_client: FakeGenerationClient,
    profile: UserProfile,
) -> None:
    generation_client.payloads["workout_plan"] = [
        workout_payload(exercises=[exercise_ref(None, "Qwxz")])
    ]

    report = asyncio.run(workout_plan_service.generate(profile, WorkoutType.PUSH, 45))

    assert isinstance(report.outcome, PlanRejected)
    assert report.outcome.errors[0].code is IssueCode.INVALID_EXERCISE


def test_no_candidates_skips_generation(
    workout_plan_service: WorkoutPlanService,
    generation_client: FakeGenerationClient,
) -> None:
    profile = UserProfile(injuries=["knee"])

    report = asyncio.run(workout_plan_service.generate(profile, WorkoutType.LEGS, 30))

    assert isinstance(report.outcome, PlanRejected)
    assert report.outcome.code == "INVALID_EXERCISE"
    assert generation_client.calls == []


def test_workout_fingerprint_includes_type_and_duration(profile: UserProfile) -> None:
    base = workout_fingerprint(profile, WorkoutType.PUSH, 45)

    assert base != workout_fingerprint(profile, WorkoutType.PULL, 45)
    assert base != workout_fingerprint(profile, WorkoutType.PUSH, 60)
