from .orchestrator import WorkflowOrchestrator
from .runner import JobRunner

__all__ = ['WorkflowOrchestrator', 'JobRunner']
