"""Resolve regional context and candidate exercises from a user profile."""

import logging
from dataclasses import dataclass

from fit_planner.domain.exercises import ExerciseCatalogEntry
from fit_planner.domain.profiles import ExperienceLevel, UserProfile
from fit_planner.domain.workouts import WorkoutType
from fit_planner.services.catalog import ExerciseCatalog

_logger = logging.getLogger(__name__)

DEFAULT_CUISINE = "international"

CUISINE_BY_COUNTRY: dict[str, str] = {
    "US": "american",
    "CA": "canadian",
    "MX": "mexican",
    "BR": "brazilian",
    "AR": "argentinian",
    "PE": "peruvian",
    "GB": "british",
    "IE": "irish",
    "FR": "french",
    "IT": "italian",
    "ES": "spanish",
    "PT": "portuguese",
    "DE": "german",
    "GR": "greek",
    "TR": "turkish",
    "RU": "russian",
    "PL": "polish",
    "IN": "indian",
    "PK": "pakistani",
    "BD": "bangladeshi",
    "LK": "sri lankan",
    "CN": "chinese",
    "JP": "japanese",
    "KR": "korean",
    "TH": "thai",
    "VN": "vietnamese",
    "ID": "indonesian",
    "MY": "malaysian",
    "PH": "filipino",
    "SG": "singaporean",
    "AE": "middle eastern",
    "SA": "middle eastern",
    "EG": "egyptian",
    "MA": "moroccan",
    "NG": "nigerian",
    "KE": "kenyan",
    "ET": "ethiopian",
    "ZA": "south african",
    "AU": "australian",
    "NZ": "new zealand",
}

ALWAYS_AVAILABLE_EQUIPMENT = frozenset({"body weight"})

BODY_PARTS_BY_WORKOUT_TYPE: dict[WorkoutType, frozenset[str]] = {
    WorkoutType.FULL_BODY: frozenset(
        {"back", "chest", "upper legs", "lower legs", "shoulders", "upper arms", "waist"}
    ),
    WorkoutType.UPPER_BODY: frozenset(
        {"back", "chest", "shoulders", "upper arms", "lower arms"}
    ),
    WorkoutType.LOWER_BODY: frozenset({"upper legs", "lower legs"}),
    WorkoutType.PUSH: frozenset({"chest", "shoulders", "upper arms"}),
    WorkoutType.PULL: frozenset({"back", "upper arms", "lower arms"}),
    WorkoutType.LEGS: frozenset({"upper legs", "lower legs"}),
    WorkoutType.CHEST: frozenset({"chest"}),
    WorkoutType.BACK: frozenset({"back"}),
    WorkoutType.SHOULDERS: frozenset({"shoulders"}),
    WorkoutType.ARMS: frozenset({"upper arms", "lower arms"}),
    WorkoutType.CORE: frozenset({"waist"}),
    WorkoutType.CARDIO: frozenset({"cardio"}),
}

# Injury terms expand to the muscles and body parts a workout must avoid.
INJURY_EXCLUSIONS: dict[str, frozenset[str]] = {
    "knee": frozenset({"quads", "hamstrings", "calves"}),
    "back": frozenset({"spine", "lower back"}),
    "lower back": frozenset({"spine", "lower back"}),
    "shoulder": frozenset({"delts", "rotator cuff", "shoulders"}),
    "wrist": frozenset({"forearms", "lower arms"}),
    "elbow": frozenset({"biceps", "triceps", "forearms"}),
    "neck": frozenset({"levator scapulae", "neck", "traps"}),
    "ankle": frozenset({"calves", "lower legs"}),
    "hip": frozenset({"glutes", "abductors", "adductors", "hip flexors"}),
}

CANDIDATE_LIMITS: dict[ExperienceLevel, int] = {
    ExperienceLevel.BEGINNER: 30,
    ExperienceLevel.INTERMEDIATE: 40,
    ExperienceLevel.ADVANCED: 50,
}

_ADVANCED_MOVEMENTS = (
    "muscle up",
    "planche",
    "front lever",
    "pistol squat",
    "dragon flag",
    "one arm",
    "handstand",
    "snatch",
    "clean and jerk",
    "turkish get up",
    "olympic",
)
_INTERMEDIATE_MOVEMENTS = (
    "pull up",
    "chin up",
    "dip",
    "bulgarian split squat",
    "overhead press",
    "deadlift",
    "barbell squat",
    "bench press",
)
_COMPOUND_INDICATORS = ("squat", "deadlift", "press", "pull", "row", "lunge")
_TIER_RANK = {
    ExperienceLevel.BEGINNER: 0,
    ExperienceLevel.INTERMEDIATE: 1,
    ExperienceLevel.ADVANCED: 2,
}


@dataclass(frozen=True)
class ResolvedContext:
    """Context handed to the prompt builder."""

    cuisine: str
    filtered_exercises: list[ExerciseCatalogEntry]


def resolve_cuisine(country: str | None) -> str:
    """Return the cuisine family for a country code."""
    if not country:
        return DEFAULT_CUISINE
    return CUISINE_BY_COUNTRY.get(country.strip().upper(), DEFAULT_CUISINE)


def resolve_context(
    catalog: ExerciseCatalog,
    profile: UserProfile,
    workout_type: WorkoutType | None = None,
) -> ResolvedContext:
    """Resolve cuisine and candidate exercises for a profile."""
    return ResolvedContext(
        cuisine=resolve_cuisine(profile.country),
        filtered_exercises=filter_exercises(catalog, profile, workout_type),
    )


def filter_exercises(
    catalog: ExerciseCatalog,
    profile: UserProfile,
    workout_type: WorkoutType | None = None,
) -> list[ExerciseCatalogEntry]:
    """Narrow the catalog to a bounded, deterministic candidate list."""
    entries = catalog.with_media()
    total = len(entries)

    equipment = profile.available_equipment | ALWAYS_AVAILABLE_EQUIPMENT
    entries = [entry for entry in entries if entry.equipment in equipment]
    after_equipment = len(entries)

    body_parts = BODY_PARTS_BY_WORKOUT_TYPE.get(workout_type) if workout_type else None
    if body_parts:
        entries = [entry for entry in entries if entry.body_part in body_parts]
    after_body_parts = len(entries)

    excluded = injury_exclusions(profile.injuries)
    if excluded:
        entries = [
            entry
            for entry in entries
            if not (entry.target_muscles & excluded) and entry.body_part not in excluded
        ]
    after_injuries = len(entries)

    user_rank = _TIER_RANK[profile.experience_level]
    entries = [
        entry for entry in entries if _TIER_RANK[exercise_difficulty(entry)] <= user_rank
    ]
    after_experience = len(entries)

    ranked = sorted(
        entries,
        key=lambda entry: (-_relevance_score(entry, profile), entry.id),
    )
    selected = ranked[: CANDIDATE_LIMITS[profile.experience_level]]
    _logger.info(
        "Exercise filter: total=%s equipment=%s body_parts=%s injuries=%s "
        "experience=%s final=%s",
        total,
        after_equipment,
        after_body_parts,
        after_injuries,
        after_experience,
        len(selected),
    )
    return selected


def injury_exclusions(injuries: frozenset[str]) -> frozenset[str]:
    """Expand injury terms to the muscles and body parts to avoid."""
    excluded: set[str] = set()
    for injury in injuries:
        term = injury.strip().lower()
        excluded.add(term)
        for key, muscles in INJURY_EXCLUSIONS.items():
            if key in term:
                excluded.update(muscles)
    return frozenset(excluded)


def exercise_difficulty(entry: ExerciseCatalogEntry) -> ExperienceLevel:
    """Infer an entry's difficulty from its name and equipment."""
    name = entry.name.lower()
    if any(movement in name for movement in _ADVANCED_MOVEMENTS):
        return ExperienceLevel.ADVANCED
    if any(movement in name for movement in _INTERMEDIATE_MOVEMENTS):
        return ExperienceLevel.INTERMEDIATE
    if entry.equipment in {"machine", "cable", "assisted", "leverage machine"}:
        return ExperienceLevel.BEGINNER
    if entry.equipment == "body weight" and any(
        word in name for word in ("pull", "push", "squat")
    ):
        return ExperienceLevel.INTERMEDIATE
    return ExperienceLevel.BEGINNER


def _relevance_score(entry: ExerciseCatalogEntry, profile: UserProfile) -> int:
    name = entry.name.lower()
    score = 0
    if entry.equipment == "body weight":
        score += 10
    elif entry.equipment == "dumbbell":
        score += 8
    elif entry.equipment == "barbell":
        score += 6
    if any(indicator in name for indicator in _COMPOUND_INDICATORS):
        score += 15
    goal = profile.fitness_goal
    if goal == "muscle_gain" and entry.equipment in {"dumbbell", "barbell", "cable"}:
        score += 5
    elif goal in {"weight_loss", "endurance"} and (
        entry.equipment == "body weight" or entry.body_part == "cardio"
    ):
        score += 5
    elif goal == "strength" and (
        entry.equipment == "barbell"
        or any(term in name for term in ("squat", "deadlift", "press", "bench"))
    ):
        score += 5
    if exercise_difficulty(entry) == profile.experience_level:
        score += 5
    return score
