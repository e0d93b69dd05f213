from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from estimation_rpa.models.job import JobStatus
from estimation_rpa.models.state import AggregateResult

class QueueNames:
    JOB_PROCESSING = "job-processing"
    NOTIFICATIONS = "notifications"
    DEAD_LETTER = "dead-letter"

class JobMessage(BaseModel):
    """Inbound request to process one job."""
    job_id: str
    job_type: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

class JobNotification(BaseModel):
    """Outbound notice published once a job is terminal or retrying."""
    job_id: str
    status: JobStatus
    result: Optional[AggregateResult] = None
    recipient_email: str = ""
    error_message: Optional[str] = None
