"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from fit_planner.adapters.openai_generation_client import OpenAIGenerationClient
from fit_planner.adapters.supabase_exercise_repository import (
    SupabaseExerciseRepository,
)
from fit_planner.adapters.supabase_plan_cache import SupabasePlanCacheStore
from fit_planner.config import Settings
from fit_planner.services.allergens import AllergenLexicon
from fit_planner.services.cache import InMemoryCache, PlanCacheStore
from fit_planner.services.catalog import CatalogService
from fit_planner.services.dedup import GenerationCoordinator
from fit_planner.services.diet_plans import DietPlanService
from fit_planner.services.diet_validation import DietValidator
from fit_planner.services.generation import GenerationService
from fit_planner.services.prompts import PromptBuilder
from fit_planner.services.workout_plans import WorkoutPlanService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: CatalogService
    coordinator: GenerationCoordinator
    diet_plan_service: DietPlanService
    workout_plan_service: WorkoutPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    cache: PlanCacheStore
    if resolved_settings.plan_cache_backend == "supabase":
        cache = SupabasePlanCacheStore(supabase_client)
    else:
        cache = InMemoryCache()
    coordinator = GenerationCoordinator(
        cache=cache, ttl_seconds=resolved_settings.plan_cache_ttl_seconds
    )
    catalog_service = CatalogService(SupabaseExerciseRepository(supabase_client))
    openai_client = OpenAIGenerationClient.create(resolved_settings.openai_api_key)
    generation_service = GenerationService(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        timeout_seconds=resolved_settings.generation_timeout_seconds,
    )
    lexicon = AllergenLexicon.default()
    prompt_builder = PromptBuilder(lexicon)
    diet_plan_service = DietPlanService(
        prompt_builder=prompt_builder,
        generation_service=generation_service,
        validator=DietValidator(lexicon),
        coordinator=coordinator,
    )
    workout_plan_service = WorkoutPlanService(
        catalog_service=catalog_service,
        prompt_builder=prompt_builder,
        generation_service=generation_service,
        coordinator=coordinator,
    )

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        catalog_service=catalog_service,
        coordinator=coordinator,
        diet_plan_service=diet_plan_service,
        workout_plan_service=workout_plan_service,
        close_resources=close_resources,
    )
