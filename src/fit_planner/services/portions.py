"""Proportional portion scaling toward a calorie target."""

import logging
from dataclasses import dataclass

from fit_planner.domain.meals import FoodItem, Meal, MealPlan

_logger = logging.getLogger(__name__)

NO_OP_TOLERANCE = 0.02


@dataclass(frozen=True)
class AdjustmentResult:
    """Scaled plan and the factor that was applied."""

    plan: MealPlan
    scale: float
    adjusted: bool


def adjust_portions(plan: MealPlan, target_calories: float) -> AdjustmentResult:
    """Scale every portion so the plan's calories approach the target.

    Quantities and macros are multiplied by the same factor and rounded to one
    decimal, and meal totals are recomputed from the scaled items. A plan
    already within two percent of the target keeps its portions, which also
    makes a second adjustment a no-op; its meal totals are still recomputed
    from the items.
    """
    actual = plan.total_calories
    if actual <= 0:
        raise ValueError("Cannot scale a plan with no calories")
    scale = target_calories / actual
    if abs(1 - scale) < NO_OP_TOLERANCE:
        return AdjustmentResult(
            plan=_with_item_totals(plan), scale=1.0, adjusted=False
        )

    meals = [_scale_meal(meal, scale) for meal in plan.meals]
    adjusted = plan.model_copy(update={"meals": meals})
    _logger.info(
        "Portions adjusted: scale=%.3f calories_before=%.0f calories_after=%.0f "
        "target=%.0f",
        scale,
        actual,
        adjusted.total_calories,
        target_calories,
    )
    return AdjustmentResult(plan=adjusted, scale=scale, adjusted=True)


def _scale_meal(meal: Meal, scale: float) -> Meal:
    items = [_scale_item(item, scale) for item in meal.items]
    return meal.model_copy(update={"items": items, **_totals(items)})


def _with_item_totals(plan: MealPlan) -> MealPlan:
    meals = [meal.model_copy(update=_totals(meal.items)) for meal in plan.meals]
    if meals == plan.meals:
        return plan
    _logger.info("Meal totals recomputed from items: title=%s", plan.title)
    return plan.model_copy(update={"meals": meals})


def _totals(items: list[FoodItem]) -> dict[str, float]:
    return {
        "total_calories": _sum(items, "calories"),
        "total_protein_g": _sum(items, "protein_g"),
        "total_carbs_g": _sum(items, "carbs_g"),
        "total_fat_g": _sum(items, "fat_g"),
    }


def _scale_item(item: FoodItem, scale: float) -> FoodItem:
    return item.model_copy(
        update={
            "quantity_g": _scaled(item.quantity_g, scale),
            "calories": _scaled(item.calories, scale),
            "protein_g": _scaled(item.protein_g, scale),
            "carbs_g": _scaled(item.carbs_g, scale),
            "fat_g": _scaled(item.fat_g, scale),
        }
    )


def _scaled(value: float | None, scale: float) -> float | None:
    if value is None:
        return None
    return round(value * scale, 1)


def _sum(items: list[FoodItem], name: str) -> float:
    return round(sum(getattr(item, name) or 0.0 for item in items), 1)
