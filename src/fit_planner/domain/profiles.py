"""Inputs that personalize a generation request."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExperienceLevel(StrEnum):
    """Training experience tiers."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class DietType(StrEnum):
    """Supported diet types."""

    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    PESCATARIAN = "pescatarian"
    KETO = "keto"


_DIET_TYPE_ALIASES = {
    "non-veg": DietType.OMNIVORE,
    "nonveg": DietType.OMNIVORE,
    "non-vegetarian": DietType.OMNIVORE,
    "all": DietType.OMNIVORE,
    "lacto-vegetarian": DietType.VEGETARIAN,
    "ovo-vegetarian": DietType.VEGETARIAN,
    "lacto-ovo-vegetarian": DietType.VEGETARIAN,
    "pescetarian": DietType.PESCATARIAN,
    "ketogenic": DietType.KETO,
    "low-carb": DietType.KETO,
    "lchf": DietType.KETO,
}


class NutritionTarget(BaseModel):
    """Daily numeric targets produced by the target calculator."""

    model_config = ConfigDict(frozen=True)

    daily_calories: float = Field(gt=0)
    protein_g: float = Field(gt=0)
    carbs_g: float = Field(gt=0)
    fat_g: float = Field(gt=0)
    water_ml: float = Field(gt=0)
    fiber_g: float | None = Field(default=None, ge=0)


class UserProfile(BaseModel):
    """Subset of the user profile that shapes a plan."""

    model_config = ConfigDict(frozen=True)

    country: str | None = None
    region: str | None = None
    age: int | None = Field(default=None, ge=13, le=120)
    gender: str | None = None
    fitness_goal: str = "maintenance"
    experience_level: ExperienceLevel = ExperienceLevel.BEGINNER
    available_equipment: frozenset[str] = frozenset({"body weight"})
    injuries: frozenset[str] = frozenset()

    @field_validator("available_equipment", "injuries", mode="before")
    @classmethod
    def _normalize_terms(cls, value: object) -> object:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip().lower() for item in value if item)
        return value


class DietPreferences(BaseModel):
    """Dietary constraints and preferences for one request."""

    model_config = ConfigDict(frozen=True)

    diet_type: DietType = DietType.OMNIVORE
    allergies: frozenset[str] = frozenset()
    restrictions: frozenset[str] = frozenset()
    breakfast_enabled: bool = True
    lunch_enabled: bool = True
    dinner_enabled: bool = True
    snacks_enabled: bool = False
    cooking_methods: tuple[str, ...] = ()

    @field_validator("diet_type", mode="before")
    @classmethod
    def _normalize_diet_type(cls, value: object) -> object:
        if isinstance(value, str):
            cleaned = value.strip().lower()
            return _DIET_TYPE_ALIASES.get(cleaned, cleaned)
        return value

    @field_validator("allergies", "restrictions", mode="before")
    @classmethod
    def _normalize_terms(cls, value: object) -> object:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip().lower() for item in value if item)
        return value

    def enabled_meals(self) -> list[str]:
        """Return the meal slots the user wants planned."""
        meals: list[str] = []
        if self.breakfast_enabled:
            meals.append("breakfast")
        if self.lunch_enabled:
            meals.append("lunch")
        if self.dinner_enabled:
            meals.append("dinner")
        if self.snacks_enabled:
            meals.append("snack")
        return meals
