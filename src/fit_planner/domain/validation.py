"""Validation issue models shared by every validator."""

from dataclasses import dataclass, field
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    """How an issue affects the generated plan."""

    CRITICAL = "CRITICAL"
    WARNING = "WARNING"
    INFO = "INFO"


class IssueCode(StrEnum):
    """Stable issue identifiers exposed to API clients."""

    ALLERGEN_DETECTED = "ALLERGEN_DETECTED"
    ALLERGEN_ALIAS_DETECTED = "ALLERGEN_ALIAS_DETECTED"
    DIET_TYPE_VIOLATION = "DIET_TYPE_VIOLATION"
    EXTREME_CALORIE_DRIFT = "EXTREME_CALORIE_DRIFT"
    MISSING_REQUIRED_FIELDS = "MISSING_REQUIRED_FIELDS"
    MODERATE_CALORIE_DRIFT = "MODERATE_CALORIE_DRIFT"
    LOW_PROTEIN = "LOW_PROTEIN"
    LOW_VARIETY = "LOW_VARIETY"
    INVALID_EXERCISE = "INVALID_EXERCISE"
    EXERCISE_SUBSTITUTED = "EXERCISE_SUBSTITUTED"
    PORTION_ADJUSTED = "PORTION_ADJUSTED"
    SCHEMA_VALIDATION_FAILED = "SCHEMA_VALIDATION_FAILED"


class ValidationIssue(BaseModel):
    """A single finding produced by a validator."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    code: IssueCode
    message: str
    context: dict[str, object] = Field(default_factory=dict)

    @classmethod
    def critical(
        cls, code: IssueCode, message: str, **context: object
    ) -> "ValidationIssue":
        """Build a blocking issue."""
        return cls(
            severity=Severity.CRITICAL, code=code, message=message, context=context
        )

    @classmethod
    def warning(
        cls, code: IssueCode, message: str, **context: object
    ) -> "ValidationIssue":
        """Build a non-blocking issue."""
        return cls(
            severity=Severity.WARNING, code=code, message=message, context=context
        )

    @classmethod
    def info(cls, code: IssueCode, message: str, **context: object) -> "ValidationIssue":
        """Build an informational issue."""
        return cls(severity=Severity.INFO, code=code, message=message, context=context)


@dataclass(frozen=True)
class ValidationResult:
    """Aggregated outcome of a validation run."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """A result is valid when no critical issue was found."""
        return not self.errors

    @classmethod
    def from_issues(cls, issues: list[ValidationIssue]) -> "ValidationResult":
        """Split issues into blocking errors and everything else, keeping order."""
        errors = [issue for issue in issues if issue.severity is Severity.CRITICAL]
        warnings = [issue for issue in issues if issue.severity is not Severity.CRITICAL]
        return cls(errors=errors, warnings=warnings)

    def codes(self) -> list[IssueCode]:
        """Return every issue code, errors first."""
        return [issue.code for issue in [*self.errors, *self.warnings]]
