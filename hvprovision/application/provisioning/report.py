"""Decommission outcome reporting."""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hvprovision.domain.machine.exceptions import PartialFailureError
from hvprovision.domain.machine.value_objects import CleanupStep, StepOutcome


@dataclass
class StepResult:
    step: CleanupStep
    outcome: StepOutcome = StepOutcome.COMPLETED
    detail: str = ""

    def not_found(self, detail: str = "") -> None:
        self.outcome = StepOutcome.NOT_FOUND
        self.detail = detail

    def skip(self, detail: str = "") -> None:
        self.outcome = StepOutcome.SKIPPED
        self.detail = detail

    def fail(self, detail: str) -> None:
        self.outcome = StepOutcome.FAILED
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"step": self.step.value, "outcome": self.outcome.value, "detail": self.detail}


@dataclass
class DecommissionReport:
    """Outcome of every cleanup step, in execution order."""
    name: str
    host: str
    steps: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> None:
        self.steps.append(result)

    def outcome_of(self, step: CleanupStep) -> Optional[StepOutcome]:
        for result in self.steps:
            if result.step == step:
                return result.outcome
        return None

    @property
    def failures(self) -> List[StepResult]:
        return [r for r in self.steps if r.outcome == StepOutcome.FAILED]

    @property
    def succeeded(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise PartialFailureError(self)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "host": self.host,
            "succeeded": self.succeeded,
            "steps": [r.to_dict() for r in self.steps],
        }
