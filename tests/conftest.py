"""Shared test fixtures."""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

import pytest

from fit_planner.config import Settings
from fit_planner.containers import AppContainer
from fit_planner.domain.exercises import ExerciseCatalogEntry
from fit_planner.domain.profiles import DietPreferences, NutritionTarget, UserProfile
from fit_planner.services.allergens import AllergenLexicon
from fit_planner.services.cache import InMemoryCache
from fit_planner.services.catalog import (
    CatalogService,
    ExerciseCatalog,
    ExerciseRepository,
)
from fit_planner.services.dedup import GenerationCoordinator
from fit_planner.services.diet_plans import DietPlanService
from fit_planner.services.diet_validation import DietValidator
from fit_planner.services.generation import GenerationClient, GenerationService
from fit_planner.services.prompts import PromptBuilder
from fit_planner.services.workout_plans import WorkoutPlanService

Payload = dict[str, object] | Callable[[str], dict[str, object]]


@dataclass
class FakeGenerationClient(GenerationClient):
    """Fake generation client returning queued payloads by schema name."""

    payloads: dict[str, list[Payload]] = field(default_factory=dict)
    delay: float = 0.0
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    def queue(self, schema_name: str, payload: Payload) -> None:
        self.payloads.setdefault(schema_name, []).append(payload)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        prompt: str,
        schema_name: str,
        schema: dict[str, object],
    ) -> dict[str, object]:
        self.calls.append({"schema_name": schema_name, "prompt": prompt})
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        queue = self.payloads.get(schema_name) or []
        payload = queue.pop(0) if len(queue) > 1 else queue[0]
        if callable(payload):
            return payload(prompt)
        return payload


@dataclass
class InMemoryExerciseRepository(ExerciseRepository):
    """In-memory exercise repository for tests."""

    entries: list[ExerciseCatalogEntry] = field(default_factory=list)
    loads: int = 0

    def list_exercises(self) -> list[ExerciseCatalogEntry]:
        self.loads += 1
        return list(self.entries)


def make_entry(  # noqa: PLR0913
    exercise_id: str,
    name: str,
    body_part: str,
    muscles: set[str],
    equipment: str = "body weight",
    media: str | None = "https://media.example/{id}.gif",
) -> ExerciseCatalogEntry:
    return ExerciseCatalogEntry(
        id=exercise_id,
        name=name,
        body_part=body_part,
        target_muscles=frozenset(muscles),
        equipment=equipment,
        media_ref=media.format(id=exercise_id) if media else None,
    )


SAMPLE_ENTRIES = [
    make_entry("ex-001", "Push Up", "chest", {"pectorals", "triceps"}),
    make_entry("ex-002", "Incline Push Up", "chest", {"pectorals"}),
    make_entry(
        "ex-003", "Dumbbell Bench Press", "chest", {"pectorals", "triceps"}, "dumbbell"
    ),
    make_entry("ex-004", "Bodyweight Squat", "upper legs", {"quads", "glutes"}),
    make_entry("ex-005", "Glute Bridge", "upper legs", {"glutes", "hamstrings"}),
    make_entry("ex-006", "Walking Lunge", "upper legs", {"quads", "glutes"}),
    make_entry("ex-007", "Calf Raise", "lower legs", {"calves"}),
    make_entry(
        "ex-008", "Dumbbell Shoulder Press", "shoulders", {"delts"}, "dumbbell"
    ),
    make_entry("ex-009", "Arm Circles", "shoulders", {"delts"}),
    make_entry("ex-010", "Dumbbell Row", "back", {"lats", "upper back"}, "dumbbell"),
    make_entry("ex-011", "Superman", "back", {"lower back", "spine"}),
    make_entry("ex-012", "Plank", "waist", {"abs"}),
    make_entry("ex-013", "Crunch", "waist", {"abs"}),
    make_entry("ex-014", "Jumping Jacks", "cardio", {"cardiovascular system"}),
    make_entry("ex-015", "Triceps Dip", "upper arms", {"triceps"}),
    make_entry("ex-016", "Dumbbell Curl", "upper arms", {"biceps"}, "dumbbell"),
    make_entry("ex-017", "Chest Stretch", "chest", {"pectorals"}),
    make_entry("ex-018", "Barbell Back Squat", "upper legs", {"quads"}, "barbell"),
    make_entry("ex-019", "Cable Fly", "chest", {"pectorals"}, "cable"),
    make_entry("ex-020", "Diamond Push Up", "chest", {"triceps"}, media=None),
]


def food(
    name: str,
    calories: float,
    protein: float = 20.0,
    carbs: float = 30.0,
    fat: float = 10.0,
    quantity: float = 150.0,
) -> dict[str, object]:
    return {
        "name": name,
        "quantity_g": quantity,
        "calories": calories,
        "protein_g": protein,
        "carbs_g": carbs,
        "fat_g": fat,
    }


def meal(name: str, items: list[dict[str, object]]) -> dict[str, object]:
    return {
        "name": name,
        "meal_type": name.lower(),
        "items": items,
        "total_calories": sum(item["calories"] for item in items),
        "total_protein_g": sum(item["protein_g"] for item in items),
        "total_carbs_g": sum(item["carbs_g"] for item in items),
        "total_fat_g": sum(item["fat_g"] for item in items),
    }


def meal_plan_payload(
    breakfast: list[dict[str, object]] | None = None,
    lunch: list[dict[str, object]] | None = None,
    dinner: list[dict[str, object]] | None = None,
) -> dict[str, object]:
    """A 2200 kcal plan with 165 g protein unless overridden."""
    return {
        "title": "Day 1",
        "description": "Balanced day",
        "meals": [
            meal(
                "Breakfast",
                breakfast
                or [food("Oatmeal", 400, 15), food("Greek Yogurt", 200, 20)],
            ),
            meal(
                "Lunch",
                lunch or [food("Grilled Chicken Breast", 500, 60), food("Brown Rice", 300, 7)],
            ),
            meal(
                "Dinner",
                dinner or [food("Baked Salmon", 500, 50), food("Roasted Vegetables", 300, 13)],
            ),
        ],
    }


def exercise_ref(
    exercise_id: str | None,
    name: str | None,
    muscles: list[str] | None = None,
    body_part: str | None = None,
) -> dict[str, object]:
    return {
        "exercise_id": exercise_id,
        "name": name,
        "target_muscles": muscles or [],
        "body_part": body_part,
        "sets": 3,
        "reps": "10-12",
        "rest_seconds": 60,
        "notes": None,
    }


def workout_payload(
    warmup: list[dict[str, object]] | None = None,
    exercises: list[dict[str, object]] | None = None,
    cooldown: list[dict[str, object]] | None = None,
) -> dict[str, object]:
    return {
        "title": "Push Day",
        "description": "Chest, shoulders and triceps",
        "warmup": warmup if warmup is not None else [exercise_ref("ex-009", "Arm Circles")],
        "exercises": exercises
        if exercises is not None
        else [
            exercise_ref("ex-001", "Push Up"),
            exercise_ref("ex-002", "Incline Push Up"),
            exercise_ref("ex-015", "Triceps Dip"),
        ],
        "cooldown": cooldown
        if cooldown is not None
        else [exercise_ref("ex-017", "Chest Stretch")],
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        admin_token="admin-token",
        openai_api_key="openai-key",
    )


@pytest.fixture
def lexicon() -> AllergenLexicon:
    return AllergenLexicon.default()


@pytest.fixture
def catalog() -> ExerciseCatalog:
    return ExerciseCatalog(SAMPLE_ENTRIES)


@pytest.fixture
def target() -> NutritionTarget:
    return NutritionTarget(
        daily_calories=2200,
        protein_g=165,
        carbs_g=220,
        fat_g=73,
        water_ml=2500,
    )


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        country="IN",
        age=30,
        gender="female",
        fitness_goal="muscle_gain",
        experience_level="intermediate",
        available_equipment={"body weight", "dumbbell"},
    )


@pytest.fixture
def preferences() -> DietPreferences:
    return DietPreferences()


@pytest.fixture
def generation_client() -> FakeGenerationClient:
    client = FakeGenerationClient()
    client.queue("meal_plan", meal_plan_payload())
    client.queue("workout_plan", workout_payload())
    return client


@pytest.fixture
def exercise_repository() -> InMemoryExerciseRepository:
    return InMemoryExerciseRepository(entries=list(SAMPLE_ENTRIES))


@pytest.fixture
def plan_cache() -> InMemoryCache:
    return InMemoryCache()


@pytest.fixture
def coordinator(plan_cache: InMemoryCache) -> GenerationCoordinator:
    return GenerationCoordinator(cache=plan_cache, ttl_seconds=3600)


@pytest.fixture
def generation_service(
    settings: Settings, generation_client: FakeGenerationClient
) -> GenerationService:
    return GenerationService(
        client=generation_client,
        model=settings.openai_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        timeout_seconds=5,
    )


@pytest.fixture
def diet_plan_service(
    lexicon: AllergenLexicon,
    generation_service: GenerationService,
    coordinator: GenerationCoordinator,
) -> DietPlanService:
    return DietPlanService(
        prompt_builder=PromptBuilder(lexicon),
        generation_service=generation_service,
        validator=DietValidator(lexicon),
        coordinator=coordinator,
    )


@pytest.fixture
def catalog_service(exercise_repository: InMemoryExerciseRepository) -> CatalogService:
    return CatalogService(exercise_repository)


@pytest.fixture
def workout_plan_service(
    lexicon: AllergenLexicon,
    catalog_service: CatalogService,
    generation_service: GenerationService,
    coordinator: GenerationCoordinator,
) -> WorkoutPlanService:
    return WorkoutPlanService(
        catalog_service=catalog_service,
        prompt_builder=PromptBuilder(lexicon),
        generation_service=generation_service,
        coordinator=coordinator,
    )


@pytest.fixture
def container(
    settings: Settings,
    catalog_service: CatalogService,
    coordinator: GenerationCoordinator,
    diet_plan_service: DietPlanService,
    workout_plan_service: WorkoutPlanService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        catalog_service=catalog_service,
        coordinator=coordinator,
        diet_plan_service=diet_plan_service,
        workout_plan_service=workout_plan_service,
        close_resources=close_resources,
    )
