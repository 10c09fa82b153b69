"""Structured-output schemas sent to the generation provider."""


def _nullable(schema: dict[str, object]) -> dict[str, object]:
    return {"anyOf": [schema, {"type": "null"}]}


def _object(properties: dict[str, object]) -> dict[str, object]:
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties),
        "additionalProperties": False,
    }


_NUMBER = {"type": "number", "minimum": 0}

FOOD_ITEM_SCHEMA = _object(
    {
        "name": {"type": "string"},
        "quantity_g": _nullable(_NUMBER),
        "calories": _nullable(_NUMBER),
        "protein_g": _nullable(_NUMBER),
        "carbs_g": _nullable(_NUMBER),
        "fat_g": _nullable(_NUMBER),
    }
)

MEAL_SCHEMA = _object(
    {
        "name": {"type": "string"},
        "meal_type": _nullable({"type": "string"}),
        "items": {"type": "array", "items": FOOD_ITEM_SCHEMA},
        "total_calories": _nullable(_NUMBER),
        "total_protein_g": _nullable(_NUMBER),
        "total_carbs_g": _nullable(_NUMBER),
        "total_fat_g": _nullable(_NUMBER),
    }
)

MEAL_PLAN_SCHEMA: dict[str, object] = _object(
    {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "meals": {"type": "array", "items": MEAL_SCHEMA},
    }
)

EXERCISE_REFERENCE_SCHEMA = _object(
    {
        "exercise_id": _nullable({"type": "string"}),
        "name": _nullable({"type": "string"}),
        "target_muscles": {"type": "array", "items": {"type": "string"}},
        "body_part": _nullable({"type": "string"}),
        "sets": {"type": "integer", "minimum": 1, "maximum": 10},
        "reps": {"type": "string"},
        "rest_seconds": _nullable({"type": "integer", "minimum": 0, "maximum": 600}),
        "notes": _nullable({"type": "string"}),
    }
)

WORKOUT_PLAN_SCHEMA: dict[str, object] = _object(
    {
        "title": {"type": "string"},
        "description": {"type": "string"},
        "warmup": {"type": "array", "items": EXERCISE_REFERENCE_SCHEMA},
        "exercises": {"type": "array", "items": EXERCISE_REFERENCE_SCHEMA},
        "cooldown": {"type": "array", "items": EXERCISE_REFERENCE_SCHEMA},
    }
)
