"""Turn validation outcomes into client-facing error bodies and log lines."""

import logging

from fit_planner.domain.results import PlanRejected
from fit_planner.domain.validation import (
    IssueCode,
    Severity,
    ValidationIssue,
    ValidationResult,
)
from fit_planner.errors import GenerationError
from fit_planner.services.generation import SchemaError

_logger = logging.getLogger(__name__)

VALIDATION_FAILED = "VALIDATION_FAILED"

ISSUE_CATEGORIES: dict[IssueCode, str] = {
    IssueCode.ALLERGEN_DETECTED: "allergen",
    IssueCode.ALLERGEN_ALIAS_DETECTED: "allergen",
    IssueCode.DIET_TYPE_VIOLATION: "diet_type",
    IssueCode.EXTREME_CALORIE_DRIFT: "calorie",
    IssueCode.MODERATE_CALORIE_DRIFT: "calorie",
    IssueCode.PORTION_ADJUSTED: "calorie",
    IssueCode.INVALID_EXERCISE: "exercise",
    IssueCode.EXERCISE_SUBSTITUTED: "exercise",
}

_CATEGORY_LABELS = {
    "allergen": "allergen violations",
    "diet_type": "diet type violations",
    "calorie": "calorie issues",
    "exercise": "exercise issues",
    "other": "other issues",
}

_LOG_LEVELS = {
    Severity.CRITICAL: logging.ERROR,
    Severity.WARNING: logging.WARNING,
    Severity.INFO: logging.INFO,
}


def issue_category(issue: ValidationIssue) -> str:
    """Return the reporting category of an issue."""
    return ISSUE_CATEGORIES.get(issue.code, "other")


def group_by_category(
    issues: list[ValidationIssue],
) -> dict[str, list[ValidationIssue]]:
    """Group issues by category, keeping their original order."""
    grouped: dict[str, list[ValidationIssue]] = {}
    for issue in issues:
        grouped.setdefault(issue_category(issue), []).append(issue)
    return grouped


def summarize(issues: list[ValidationIssue]) -> str:
    """One-line summary such as ``Plan rejected: 2 allergen violations``."""
    if not issues:
        return "Plan rejected"
    parts = [
        f"{len(group)} {_CATEGORY_LABELS[category]}"
        for category, group in group_by_category(issues).items()
    ]
    return f"Plan rejected: {', '.join(parts)}"


def reject(result: ValidationResult) -> PlanRejected:
    """Wrap a failed validation into a rejection."""
    return PlanRejected(
        code=VALIDATION_FAILED,
        message=summarize(result.errors),
        errors=result.errors,
        warnings=result.warnings,
    )


def reject_schema(error: SchemaError) -> PlanRejected:
    """Wrap provider output that did not match its schema."""
    issue = ValidationIssue.critical(
        IssueCode.SCHEMA_VALIDATION_FAILED,
        f"Generated {error.schema_name} did not match the expected structure",
        schema=error.schema_name,
        errors=error.messages,
    )
    return PlanRejected(
        code=IssueCode.SCHEMA_VALIDATION_FAILED.value,
        message=issue.message,
        errors=[issue],
    )


def rejection_body(rejected: PlanRejected) -> dict[str, object]:
    """Build the error body for a rejected plan with every triggering issue."""
    errors = [issue.model_dump(mode="json") for issue in rejected.errors]
    warnings = [issue.model_dump(mode="json") for issue in rejected.warnings]
    categories = {
        category: [issue.code.value for issue in group]
        for category, group in group_by_category(rejected.errors).items()
    }
    return {
        "code": rejected.code,
        "message": rejected.message,
        "details": {
            "errors": errors,
            "warnings": warnings,
            "total_errors": len(errors),
            "categories": categories,
        },
    }


def generation_error_body(exc: GenerationError) -> dict[str, object]:
    """Build the error body for a provider failure."""
    return {
        "code": exc.code,
        "message": exc.message,
        "details": {**exc.details, "retryable": exc.retryable},
    }


def log_issues(
    issues: list[ValidationIssue], *, kind: str, logger: logging.Logger | None = None
) -> None:
    """Log every issue at a level matching its severity."""
    target = logger or _logger
    for issue in issues:
        target.log(
            _LOG_LEVELS[issue.severity],
            "%s issue: code=%s category=%s message=%s",
            kind,
            issue.code.value,
            issue_category(issue),
            issue.message,
        )
