"""Ground generated exercise references on catalog entries with media."""

import logging
from dataclasses import dataclass
from difflib import SequenceMatcher

from fit_planner.domain.exercises import ExerciseCatalogEntry
from fit_planner.domain.validation import (
    IssueCode,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from fit_planner.domain.workouts import (
    ExerciseReference,
    GeneratedWorkoutPlan,
    ResolvedExercise,
    ResolvedWorkoutPlan,
)
from fit_planner.services.catalog import ExerciseCatalog, normalize_name

_logger = logging.getLogger(__name__)

MATCH_THRESHOLD = 0.60
NAME_WEIGHT = 0.6
ANATOMY_WEIGHT = 0.4
MUSCLE_WEIGHT = 0.75
BODY_PART_WEIGHT = 0.25

TIER_EXACT = "exact"
TIER_FUZZY = "fuzzy"
TIER_NEAREST = "nearest_muscle_group"

_SLOTS = ("warmup", "exercises", "cooldown")
_REQUIRED_SLOT = "exercises"


def name_similarity(left: str, right: str) -> float:
    """Best of character-sequence ratio and token Jaccard on normalized names."""
    a = normalize_name(left)
    b = normalize_name(right)
    if not a or not b:
        return 0.0
    ratio = SequenceMatcher(None, a, b).ratio()
    return max(ratio, _jaccard(set(a.split()), set(b.split())))


def anatomy_similarity(
    muscles: frozenset[str], body_part: str | None, entry: ExerciseCatalogEntry
) -> float:
    """Overlap of target muscles and body part with a catalog entry."""
    score = MUSCLE_WEIGHT * _jaccard(muscles, entry.target_muscles)
    if body_part and body_part == entry.body_part:
        score += BODY_PART_WEIGHT
    return score


def similarity_score(reference: ExerciseReference, entry: ExerciseCatalogEntry) -> float:
    """Combined similarity of a generated reference and a catalog entry.

    Name similarity carries most of the weight; anatomy only counts when the
    reference states target muscles or a body part.
    """
    name = name_similarity(reference.name or reference.exercise_id or "", entry.name)
    muscles = _reference_muscles(reference)
    body_part = _reference_body_part(reference)
    if not muscles and not body_part:
        return name
    return NAME_WEIGHT * name + ANATOMY_WEIGHT * anatomy_similarity(
        muscles, body_part, entry
    )


@dataclass(frozen=True)
class WorkoutResolution:
    """Resolved plan, or None when a critical issue blocks it."""

    plan: ResolvedWorkoutPlan | None
    issues: list[ValidationIssue]

    @property
    def result(self) -> ValidationResult:
        """Issues split into blocking errors and warnings."""
        return ValidationResult.from_issues(self.issues)


@dataclass
class ExerciseResolver:
    """Resolves references exactly, then fuzzily, then by muscle group."""

    catalog: ExerciseCatalog
    threshold: float = MATCH_THRESHOLD

    def resolve(
        self,
        plan: GeneratedWorkoutPlan,
        candidates: list[ExerciseCatalogEntry],
    ) -> WorkoutResolution:
        """Resolve every reference in the plan against the catalog."""
        issues: list[ValidationIssue] = []
        if not plan.exercises:
            issues.append(
                ValidationIssue.critical(
                    IssueCode.MISSING_REQUIRED_FIELDS,
                    "Workout has no main exercises",
                    missing=["exercises"],
                )
            )

        by_id = {entry.id: entry for entry in candidates if entry.has_media}
        by_name: dict[str, ExerciseCatalogEntry] = {}
        for entry in by_id.values():
            by_name.setdefault(normalize_name(entry.name), entry)
        pool = self.catalog.with_media()

        resolved: dict[str, list[ResolvedExercise]] = {}
        for slot in _SLOTS:
            resolved[slot] = []
            for reference in getattr(plan, slot):
                exercise = self._resolve_reference(
                    reference, slot, by_id, by_name, pool, issues
                )
                if exercise is not None:
                    resolved[slot].append(exercise)

        blocked = any(issue.severity is Severity.CRITICAL for issue in issues)
        _logger.info(
            "Workout resolution: resolved=%s issues=%s blocked=%s",
            sum(len(items) for items in resolved.values()),
            len(issues),
            blocked,
        )
        if blocked:
            return WorkoutResolution(plan=None, issues=issues)
        return WorkoutResolution(
            plan=ResolvedWorkoutPlan(
                title=plan.title,
                description=plan.description,
                warmup=resolved["warmup"],
                exercises=resolved["exercises"],
                cooldown=resolved["cooldown"],
            ),
            issues=issues,
        )

    def _resolve_reference(  # noqa: PLR0913
        self,
        reference: ExerciseReference,
        slot: str,
        by_id: dict[str, ExerciseCatalogEntry],
        by_name: dict[str, ExerciseCatalogEntry],
        pool: list[ExerciseCatalogEntry],
        issues: list[ValidationIssue],
    ) -> ResolvedExercise | None:
        exact = _exact_match(reference, by_id, by_name)
        if exact is not None:
            return _resolved(reference, exact, TIER_EXACT)

        ranked = sorted(
            ((similarity_score(reference, entry), entry) for entry in pool),
            key=lambda pair: (-pair[0], pair[1].id),
        )
        if ranked and ranked[0][0] >= self.threshold:
            score, entry = ranked[0]
            issues.append(_substitution(reference, entry, slot, TIER_FUZZY, score))
            return _resolved(reference, entry, TIER_FUZZY)

        nearest = _nearest_muscle_group(reference, ranked)
        if nearest is None:
            issues.append(
                ValidationIssue.critical(
                    IssueCode.INVALID_EXERCISE,
                    f'"{reference.label}" is not in the catalog and has no '
                    "alternative",
                    slot=slot,
                    requested=reference.label,
                )
            )
            return None

        score, entry = nearest
        severity = Severity.CRITICAL if slot == _REQUIRED_SLOT else Severity.WARNING
        issues.append(
            ValidationIssue(
                severity=severity,
                code=IssueCode.INVALID_EXERCISE,
                message=f'"{reference.label}" did not match any catalog exercise',
                context={
                    "slot": slot,
                    "requested": reference.label,
                    "best_score": round(ranked[0][0], 3) if ranked else 0.0,
                    "threshold": self.threshold,
                },
            )
        )
        issues.append(_substitution(reference, entry, slot, TIER_NEAREST, score))
        return _resolved(reference, entry, TIER_NEAREST)


def _exact_match(
    reference: ExerciseReference,
    by_id: dict[str, ExerciseCatalogEntry],
    by_name: dict[str, ExerciseCatalogEntry],
) -> ExerciseCatalogEntry | None:
    if reference.exercise_id and reference.exercise_id in by_id:
        return by_id[reference.exercise_id]
    if reference.name:
        return by_name.get(normalize_name(reference.name))
    return None


def _nearest_muscle_group(
    reference: ExerciseReference,
    ranked: list[tuple[float, ExerciseCatalogEntry]],
) -> tuple[float, ExerciseCatalogEntry] | None:
    muscles = _reference_muscles(reference)
    if muscles:
        for score, entry in ranked:
            if entry.target_muscles & muscles:
                return score, entry
    body_part = _reference_body_part(reference)
    if body_part:
        for score, entry in ranked:
            if entry.body_part == body_part:
                return score, entry
    return None


def _substitution(
    reference: ExerciseReference,
    entry: ExerciseCatalogEntry,
    slot: str,
    tier: str,
    score: float,
) -> ValidationIssue:
    _logger.info(
        "Exercise substituted: requested=%s resolved=%s tier=%s score=%.3f",
        reference.label,
        entry.id,
        tier,
        score,
    )
    return ValidationIssue.warning(
        IssueCode.EXERCISE_SUBSTITUTED,
        f'"{reference.label}" was replaced with "{entry.name}"',
        slot=slot,
        requested=reference.label,
        resolved_id=entry.id,
        resolved_name=entry.name,
        tier=tier,
        score=round(score, 3),
    )


def _resolved(
    reference: ExerciseReference, entry: ExerciseCatalogEntry, tier: str
) -> ResolvedExercise:
    if entry.media_ref is None:
        raise ValueError(f"Catalog entry {entry.id} has no media")
    return ResolvedExercise(
        exercise_id=entry.id,
        name=entry.name,
        body_part=entry.body_part,
        target_muscles=sorted(entry.target_muscles),
        equipment=entry.equipment,
        media_ref=entry.media_ref,
        sets=reference.sets,
        reps=reference.reps,
        rest_seconds=reference.rest_seconds,
        notes=reference.notes,
        requested_ref=reference.label,
        tier=tier,
    )


def _reference_muscles(reference: ExerciseReference) -> frozenset[str]:
    return frozenset(
        muscle.strip().lower() for muscle in reference.target_muscles if muscle.strip()
    )


def _reference_body_part(reference: ExerciseReference) -> str | None:
    if not reference.body_part:
        return None
    return reference.body_part.strip().lower() or None


def _jaccard(left: set[str] | frozenset[str], right: set[str] | frozenset[str]) -> float:
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)
