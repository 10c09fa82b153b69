"""Safety, accuracy and completeness checks for generated meal plans."""

import logging
import re
from dataclasses import dataclass, field

from fit_planner.domain.meals import MealPlan
from fit_planner.domain.profiles import DietPreferences, DietType, NutritionTarget
from fit_planner.domain.validation import IssueCode, ValidationIssue, ValidationResult
from fit_planner.services.allergens import AllergenLexicon

_logger = logging.getLogger(__name__)

EXTREME_DRIFT_THRESHOLD = 0.30
MODERATE_DRIFT_THRESHOLD = 0.10
LOW_PROTEIN_RATIO = 0.80
LOW_VARIETY_RATIO = 0.60

FORBIDDEN_KEYWORDS: dict[str, tuple[str, ...]] = {
    "meat": (
        "chicken",
        "beef",
        "pork",
        "mutton",
        "lamb",
        "goat",
        "turkey",
        "bacon",
        "ham",
        "sausage",
        "veal",
        "duck",
        "venison",
        "pepperoni",
        "salami",
        "prosciutto",
        "keema",
        "meat",
        "steak",
        "gelatin",
    ),
    "fish": (
        "fish",
        "salmon",
        "tuna",
        "cod",
        "tilapia",
        "sardine",
        "anchovy",
        "mackerel",
        "trout",
        "shrimp",
        "prawn",
        "crab",
        "lobster",
        "oyster",
        "clam",
        "mussel",
        "scallop",
        "squid",
        "octopus",
    ),
    "dairy": (
        "milk",
        "cheese",
        "paneer",
        "ghee",
        "butter",
        "buttermilk",
        "cream",
        "yogurt",
        "yoghurt",
        "curd",
        "whey",
        "casein",
        "dahi",
        "lassi",
        "raita",
        "khoa",
    ),
    "egg": ("egg", "omelette", "omelet", "mayonnaise", "meringue"),
    "animal_product": ("honey",),
}

EXCLUDED_CATEGORIES: dict[DietType, tuple[str, ...]] = {
    DietType.VEGAN: ("meat", "fish", "dairy", "egg", "animal_product"),
    DietType.VEGETARIAN: ("meat", "fish"),
    DietType.PESCATARIAN: ("meat",),
    DietType.OMNIVORE: (),
    DietType.KETO: (),
}

# Plant-based phrases that contain an animal keyword.
PLANT_BASED_EXCEPTIONS = (
    "bean curd",
    "peanut butter",
    "almond butter",
    "cashew butter",
    "nut butter",
    "seed butter",
    "cocoa butter",
    "apple butter",
    "coconut milk",
    "almond milk",
    "soy milk",
    "soya milk",
    "oat milk",
    "rice milk",
    "cashew milk",
    "coconut cream",
    "coconut yogurt",
    "soy yogurt",
    "vegan cheese",
    "vegan mayonnaise",
    "plant-based",
    "vegan",
    "eggless",
    "egg-free",
    "dairy-free",
)


@dataclass(frozen=True)
class _KeywordMatcher:
    category: str
    keyword: str
    pattern: re.Pattern[str]


def _build_matchers() -> dict[str, list[_KeywordMatcher]]:
    return {
        category: [
            _KeywordMatcher(
                category=category,
                keyword=keyword,
                pattern=re.compile(rf"\b{re.escape(keyword)}(?:es|s)?\b"),
            )
            for keyword in keywords
        ]
        for category, keywords in FORBIDDEN_KEYWORDS.items()
    }


@dataclass
class DietValidator:
    """Runs every diet check and aggregates the findings."""

    lexicon: AllergenLexicon
    _matchers: dict[str, list[_KeywordMatcher]] = field(
        default_factory=_build_matchers, init=False, repr=False
    )

    def validate(
        self,
        plan: MealPlan,
        target: NutritionTarget,
        preferences: DietPreferences,
    ) -> ValidationResult:
        """Validate a plan; every check runs and every issue is returned."""
        issues = [
            *self.check_allergens(plan, preferences.allergies),
            *self.check_diet_type(plan, preferences.diet_type),
            *check_calorie_drift(plan, target),
            *check_completeness(plan),
            *check_quality(plan, target),
        ]
        result = ValidationResult.from_issues(issues)
        _logger.info(
            "Diet validation: valid=%s errors=%s warnings=%s",
            result.is_valid,
            len(result.errors),
            len(result.warnings),
        )
        return result

    def check_allergens(
        self, plan: MealPlan, allergies: frozenset[str]
    ) -> list[ValidationIssue]:
        """Flag foods and dishes whose names carry a declared allergen."""
        issues: list[ValidationIssue] = []
        for allergen in sorted(allergies):
            aliases = sorted(self.lexicon.aliases(allergen), key=lambda a: (-len(a), a))
            for meal in plan.meals:
                item_hit = False
                for item in meal.items:
                    alias = _first_substring(item.name, aliases)
                    if alias is None:
                        continue
                    item_hit = True
                    issues.append(
                        ValidationIssue.critical(
                            IssueCode.ALLERGEN_DETECTED,
                            f'"{item.name}" in {meal.name} contains allergen '
                            f'"{allergen}" (matched "{alias}")',
                            meal=meal.name,
                            food=item.name,
                            allergen=allergen,
                            matched_alias=alias,
                        )
                    )
                if item_hit:
                    continue
                alias = _first_substring(meal.name, aliases)
                if alias is not None:
                    issues.append(
                        ValidationIssue.critical(
                            IssueCode.ALLERGEN_ALIAS_DETECTED,
                            f'Meal "{meal.name}" implies allergen "{allergen}" '
                            f'(matched "{alias}")',
                            meal=meal.name,
                            allergen=allergen,
                            matched_alias=alias,
                        )
                    )
        return issues

    def check_diet_type(
        self, plan: MealPlan, diet_type: DietType
    ) -> list[ValidationIssue]:
        """Flag foods whose names fall in a category the diet excludes."""
        categories = EXCLUDED_CATEGORIES[diet_type]
        if not categories:
            return []
        issues: list[ValidationIssue] = []
        for meal, item in plan.items():
            name = _strip_exceptions(item.name)
            for category in categories:
                matcher = next(
                    (m for m in self._matchers[category] if m.pattern.search(name)),
                    None,
                )
                if matcher is None:
                    continue
                issues.append(
                    ValidationIssue.critical(
                        IssueCode.DIET_TYPE_VIOLATION,
                        f'"{item.name}" in {meal.name} is not {diet_type.value} '
                        f"({category}: {matcher.keyword})",
                        meal=meal.name,
                        food=item.name,
                        diet_type=diet_type.value,
                        category=category,
                        keyword=matcher.keyword,
                    )
                )
                break
        return issues


def calorie_drift(actual: float, target: float) -> float:
    """Relative distance between actual and target calories."""
    return abs(actual - target) / target


def check_calorie_drift(plan: MealPlan, target: NutritionTarget) -> list[ValidationIssue]:
    """Compare the plan's calories with the daily target."""
    actual = plan.total_calories
    drift = calorie_drift(actual, target.daily_calories)
    context = {
        "current": round(actual, 1),
        "target": target.daily_calories,
        "drift": round(drift, 4),
    }
    if drift > EXTREME_DRIFT_THRESHOLD:
        return [
            ValidationIssue.critical(
                IssueCode.EXTREME_CALORIE_DRIFT,
                f"Plan has {actual:.0f} kcal against a {target.daily_calories:.0f} "
                f"kcal target ({drift:.0%} off)",
                **context,
            )
        ]
    if drift > MODERATE_DRIFT_THRESHOLD:
        return [
            ValidationIssue.warning(
                IssueCode.MODERATE_CALORIE_DRIFT,
                f"Plan has {actual:.0f} kcal against a {target.daily_calories:.0f} "
                f"kcal target ({drift:.0%} off)",
                action="portion_adjustment",
                **context,
            )
        ]
    return []


def check_completeness(plan: MealPlan) -> list[ValidationIssue]:
    """Require meals, items, quantities and macros."""
    if not plan.meals:
        return [
            ValidationIssue.critical(
                IssueCode.MISSING_REQUIRED_FIELDS,
                "Plan contains no meals",
                missing=["meals"],
            )
        ]
    issues: list[ValidationIssue] = []
    for meal in plan.meals:
        if not meal.items:
            issues.append(
                ValidationIssue.critical(
                    IssueCode.MISSING_REQUIRED_FIELDS,
                    f"Meal {meal.name} has no food items",
                    meal=meal.name,
                    missing=["items"],
                )
            )
        missing_totals = meal.missing_totals()
        if missing_totals:
            issues.append(
                ValidationIssue.critical(
                    IssueCode.MISSING_REQUIRED_FIELDS,
                    f"Meal {meal.name} is missing {', '.join(missing_totals)}",
                    meal=meal.name,
                    missing=missing_totals,
                )
            )
        for item in meal.items:
            missing = item.missing_fields()
            if missing:
                issues.append(
                    ValidationIssue.critical(
                        IssueCode.MISSING_REQUIRED_FIELDS,
                        f'"{item.name}" in {meal.name} is missing {", ".join(missing)}',
                        meal=meal.name,
                        food=item.name,
                        missing=missing,
                    )
                )
    return issues


def check_quality(plan: MealPlan, target: NutritionTarget) -> list[ValidationIssue]:
    """Non-blocking checks on protein and variety."""
    issues: list[ValidationIssue] = []
    protein = plan.total_protein_g
    if protein < LOW_PROTEIN_RATIO * target.protein_g:
        issues.append(
            ValidationIssue.warning(
                IssueCode.LOW_PROTEIN,
                f"Plan has {protein:.0f} g protein against a {target.protein_g:.0f} g "
                "target",
                current=round(protein, 1),
                target=target.protein_g,
            )
        )
    names = [" ".join(item.name.lower().split()) for _, item in plan.items()]
    if names:
        ratio = len(set(names)) / len(names)
        if ratio < LOW_VARIETY_RATIO:
            issues.append(
                ValidationIssue.info(
                    IssueCode.LOW_VARIETY,
                    f"Only {ratio:.0%} of foods are unique",
                    unique_ratio=round(ratio, 3),
                )
            )
    return issues


def _first_substring(text: str, aliases: list[str]) -> str | None:
    lowered = text.lower()
    return next((alias for alias in aliases if alias in lowered), None)


def _strip_exceptions(name: str) -> str:
    lowered = name.lower()
    for phrase in PLANT_BASED_EXCEPTIONS:
        lowered = lowered.replace(phrase, " ")
    return lowered
