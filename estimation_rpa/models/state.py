from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict
from pydantic import BaseModel, ConfigDict, Field


class WorkflowStep(BaseModel):
    """One audit-trail entry; created fresh per run and mutated as the step executes."""
    step_number: int
    description: str
    action: str
    is_completed: bool = False
    error_message: Optional[str] = None
    completed_at: Optional[datetime] = None

    def record(self, result: "StepResult") -> None:
        self.is_completed = result.success
        self.error_message = None if result.success else result.message
        self.completed_at = datetime.now(timezone.utc)


class StepResult(BaseModel):
    """Outcome of a single step invocation."""
    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, message: str, **data) -> "StepResult":
        return cls(success=True, message=message, data=data)

    @classmethod
    def fail(cls, message: str, errors: Optional[List[str]] = None, **data) -> "StepResult":
        return cls(success=False, message=message, errors=list(errors or []), data=data)


class AggregateResult(BaseModel):
    """Outcome of a whole workflow run, handed from the orchestrator to the job runner."""
    success: bool
    message: str
    steps: List[WorkflowStep] = Field(default_factory=list)
    data: Dict[str, Any] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)

    @property
    def failed_step(self) -> Optional[WorkflowStep]:
        return next((s for s in self.steps if not s.is_completed), None)


class RunPhase(str, Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    def __str__(self):
        return self.value


class GraphState(TypedDict):
    """State model for the estimation workflow graph."""
    phase: RunPhase
    steps: List[WorkflowStep]
    context: Dict[str, Any]
    errors: List[str]
    message: str
