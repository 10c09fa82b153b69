"""Models for generated meal plans."""

from pydantic import BaseModel, ConfigDict, Field

MACRO_FIELDS = ("calories", "protein_g", "carbs_g", "fat_g")
MEAL_TOTAL_FIELDS = (
    "total_calories",
    "total_protein_g",
    "total_carbs_g",
    "total_fat_g",
)


class FoodItem(BaseModel):
    """Single food within a meal, with macros for the stated quantity."""

    model_config = ConfigDict(frozen=True)

    name: str
    quantity_g: float | None = Field(default=None, ge=0)
    calories: float | None = Field(default=None, ge=0)
    protein_g: float | None = Field(default=None, ge=0)
    carbs_g: float | None = Field(default=None, ge=0)
    fat_g: float | None = Field(default=None, ge=0)

    def missing_fields(self) -> list[str]:
        """Return the names of quantity or macro fields the generator left out."""
        missing = [] if self.quantity_g is not None else ["quantity_g"]
        missing.extend(name for name in MACRO_FIELDS if getattr(self, name) is None)
        return missing


class Meal(BaseModel):
    """A meal with its items and stated totals."""

    model_config = ConfigDict(frozen=True)

    name: str
    meal_type: str | None = None
    items: list[FoodItem] = Field(default_factory=list)
    total_calories: float | None = None
    total_protein_g: float | None = None
    total_carbs_g: float | None = None
    total_fat_g: float | None = None

    def missing_totals(self) -> list[str]:
        """Return the names of meal total fields the generator left out."""
        return [name for name in MEAL_TOTAL_FIELDS if getattr(self, name) is None]


class MealPlan(BaseModel):
    """A generated day of meals."""

    model_config = ConfigDict(frozen=True)

    title: str = ""
    description: str = ""
    meals: list[Meal] = Field(default_factory=list)

    def items(self) -> list[tuple[Meal, FoodItem]]:
        """Return every food item paired with its meal, in plan order."""
        return [(meal, item) for meal in self.meals for item in meal.items]

    @property
    def total_calories(self) -> float:
        """Sum of item calories; missing values count as zero."""
        return sum(item.calories or 0.0 for _, item in self.items())

    @property
    def total_protein_g(self) -> float:
        """Sum of item protein; missing values count as zero."""
        return sum(item.protein_g or 0.0 for _, item in self.items())

    @property
    def total_carbs_g(self) -> float:
        """Sum of item carbs; missing values count as zero."""
        return sum(item.carbs_g or 0.0 for _, item in self.items())

    @property
    def total_fat_g(self) -> float:
        """Sum of item fat; missing values count as zero."""
        return sum(item.fat_g or 0.0 for _, item in self.items())
