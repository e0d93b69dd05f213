from .job import Job, JobStatus
from .payload import JobPayload, ProcessDefinition, ProcessSelection
from .state import AggregateResult, StepResult, WorkflowStep

__all__ = [
    'Job', 'JobStatus', 'JobPayload', 'ProcessDefinition', 'ProcessSelection',
    'AggregateResult', 'StepResult', 'WorkflowStep',
]
