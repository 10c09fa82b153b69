"""Prompt construction for diet and workout generation."""

from dataclasses import dataclass

from fit_planner.domain.exercises import ExerciseCatalogEntry
from fit_planner.domain.profiles import (
    DietPreferences,
    DietType,
    NutritionTarget,
    UserProfile,
)
from fit_planner.domain.workouts import WorkoutType
from fit_planner.services.allergens import AllergenLexicon
from fit_planner.services.context import ResolvedContext
from fit_planner.services.schemas import MEAL_PLAN_SCHEMA, WORKOUT_PLAN_SCHEMA

DIET_RULES: dict[DietType, str] = {
    DietType.VEGAN: (
        "VEGAN: no meat, poultry, fish, seafood, dairy (milk, paneer, ghee, "
        "butter, cheese, yogurt, whey), eggs or honey. Use plant proteins such "
        "as lentils, chickpeas, beans, tofu and tempeh."
    ),
    DietType.VEGETARIAN: (
        "VEGETARIAN: no meat, poultry, fish or seafood. Dairy and eggs are "
        "allowed."
    ),
    DietType.PESCATARIAN: (
        "PESCATARIAN: no meat or poultry. Fish, seafood, dairy and eggs are "
        "allowed."
    ),
    DietType.KETO: (
        "KETO: keep net carbohydrates very low; favour fats and moderate "
        "protein while still meeting the numeric targets."
    ),
    DietType.OMNIVORE: "OMNIVORE: all food groups are allowed.",
}

MEAL_SHARES: dict[str, str] = {
    "breakfast": "20-25% of daily calories",
    "lunch": "30-35% of daily calories",
    "dinner": "25-30% of daily calories",
    "snack": "5-15% of daily calories",
}


@dataclass(frozen=True)
class GenerationPrompt:
    """Request handed to the generation client."""

    kind: str
    text: str
    schema_name: str
    schema: dict[str, object]


@dataclass
class PromptBuilder:
    """Builds generation prompts from resolved context and hard constraints."""

    lexicon: AllergenLexicon

    def build_diet_prompt(
        self,
        profile: UserProfile,
        preferences: DietPreferences,
        target: NutritionTarget,
        context: ResolvedContext,
    ) -> GenerationPrompt:
        """Assemble the meal-plan prompt."""
        meals = preferences.enabled_meals() or ["breakfast", "lunch", "dinner"]
        meal_lines = "\n".join(
            f"- {meal}: {MEAL_SHARES.get(meal, 'balanced share')}" for meal in meals
        )
        if preferences.allergies:
            allergy_lines = "\n".join(
                f"- {self.lexicon.describe(allergy)}"
                for allergy in sorted(preferences.allergies)
            )
        else:
            allergy_lines = "- None"
        restrictions = ", ".join(sorted(preferences.restrictions)) or "None"
        cooking = ", ".join(preferences.cooking_methods) or "any"
        fiber = f"{target.fiber_g:.0f} g" if target.fiber_g is not None else "25 g"
        text = f"""You are an expert nutritionist planning one day of meals.

User context:
- Cuisine: {context.cuisine} ({_location(profile)})
- Age: {profile.age or "unknown"}, Gender: {profile.gender or "unknown"}
- Fitness goal: {profile.fitness_goal.replace("_", " ")}

Numeric targets (must be met):
- Calories: {target.daily_calories:.0f} kcal
- Protein: {target.protein_g:.0f} g
- Carbohydrates: {target.carbs_g:.0f} g
- Fat: {target.fat_g:.0f} g
- Fiber: {fiber}
- Water: {target.water_ml / 1000:.1f} L

Diet type:
{DIET_RULES[preferences.diet_type]}

Allergies (never include any of these or their aliases):
{allergy_lines}

Other restrictions: {restrictions}
Preferred cooking methods: {cooking}

Meals to plan:
{meal_lines}

Rules:
1. Item calories must add up to {target.daily_calories:.0f} kcal within 5%.
2. Give every food a quantity in grams and its calories, protein, carbs and fat
   for that quantity.
3. Meal totals must equal the sum of their items.
4. Prefer dishes common in {context.cuisine} cuisine with realistic portions.
5. Vary foods across meals; avoid repeating the same item.
"""
        return GenerationPrompt(
            kind="diet",
            text=text,
            schema_name="meal_plan",
            schema=MEAL_PLAN_SCHEMA,
        )

    def build_workout_prompt(
        self,
        profile: UserProfile,
        workout_type: WorkoutType,
        duration_minutes: int,
        context: ResolvedContext,
    ) -> GenerationPrompt:
        """Assemble the workout prompt around the candidate exercise list."""
        candidates = "\n".join(
            _format_candidate(index, entry)
            for index, entry in enumerate(context.filtered_exercises, start=1)
        )
        equipment = ", ".join(sorted(profile.available_equipment)) or "body weight"
        injuries = ", ".join(sorted(profile.injuries)) or "None"
        text = f"""You are an expert personal trainer programming one workout.

User context:
- Experience level: {profile.experience_level.value}
- Fitness goal: {profile.fitness_goal.replace("_", " ")}
- Available equipment: {equipment}
- Injuries: {injuries}

Workout requirements:
- Type: {workout_type.value.replace("_", " ")}
- Duration: {duration_minutes} minutes including warm-up and cool-down

Available exercises (use ONLY these, referenced by exercise_id):
{candidates}

Rules:
1. Every exercise must use an exercise_id from the list above and repeat its
   name, target muscles and body part.
2. Warm-up: 2-3 exercises. Main block: 4-10 exercises. Cool-down: 2-3 exercises.
3. Give sets, reps (e.g. "8-12" or "30 seconds") and rest in seconds.
4. Match volume and intensity to the experience level and avoid loading
   injured areas.
"""
        return GenerationPrompt(
            kind="workout",
            text=text,
            schema_name="workout_plan",
            schema=WORKOUT_PLAN_SCHEMA,
        )


def _location(profile: UserProfile) -> str:
    parts = [part for part in (profile.region, profile.country) if part]
    return ", ".join(parts) or "location unknown"


def _format_candidate(index: int, entry: ExerciseCatalogEntry) -> str:
    muscles = ", ".join(sorted(entry.target_muscles))
    return (
        f'{index}. id="{entry.id}" name="{entry.name}" body_part={entry.body_part} '
        f"muscles={muscles} equipment={entry.equipment}"
    )
