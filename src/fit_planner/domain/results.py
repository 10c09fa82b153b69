"""Outcomes of a generation pipeline."""

from dataclasses import dataclass, field
from typing import Generic, Literal, TypeVar

from pydantic import BaseModel, Field

from fit_planner.domain.validation import ValidationIssue

PlanT = TypeVar("PlanT", bound=BaseModel)

CacheSource = Literal["fresh", "cache"]


class AcceptedPlan(BaseModel, Generic[PlanT]):
    """A plan that passed validation, with the non-blocking issues found."""

    plan: PlanT
    warnings: list[ValidationIssue] = Field(default_factory=list)


@dataclass(frozen=True)
class PlanRejected:
    """A generation that failed validation; never cached."""

    code: str
    message: str
    errors: list[ValidationIssue]
    warnings: list[ValidationIssue] = field(default_factory=list)


@dataclass(frozen=True)
class GenerationReport(Generic[PlanT]):
    """What a pipeline hands back to the API layer."""

    outcome: AcceptedPlan[PlanT] | PlanRejected
    fingerprint: str
    source: CacheSource
    deduplicated: bool
    generation_time_ms: int

    @property
    def accepted(self) -> bool:
        """Whether the outcome carries a usable plan."""
        return isinstance(self.outcome, AcceptedPlan)
