from enum import Enum
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field
from estimation_rpa.core.config import MAX_RETRY_ATTEMPTS, RETRY_BASE_MINUTES
from estimation_rpa.models.state import AggregateResult

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    RETRYING = "retrying"

    def __str__(self):
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED)

class Job(BaseModel):
    """Persisted unit of work for one estimation request."""
    job_id: str
    job_type: str
    status: JobStatus = JobStatus.PENDING
    sender_email: str = ""
    subject: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    processing_result: Optional[str] = None
    error_message: Optional[str] = None
    retry_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    logs: List[str] = Field(default_factory=list)

    def mark_processing(self) -> None:
        self.status = JobStatus.PROCESSING
        self.started_at = utcnow()
        self.completed_at = None
        self.updated_at = utcnow()

    def mark_finished(self, result: AggregateResult) -> None:
        """Store the run outcome; success completes the job, anything else fails it."""
        self.status = JobStatus.COMPLETED if result.success else JobStatus.FAILED
        self.processing_result = result.model_dump_json()
        self.error_message = None if result.success else result.message
        self.completed_at = utcnow()
        self.updated_at = utcnow()

    def mark_retrying(self, error: str) -> bool:
        """Count a failed attempt.

        Returns True when the job may be retried (status becomes RETRYING) and
        False when the retry budget is exhausted (status becomes FAILED).
        """
        self.retry_count += 1
        self.error_message = error
        self.updated_at = utcnow()
        if self.retry_count <= MAX_RETRY_ATTEMPTS:
            self.status = JobStatus.RETRYING
            self.completed_at = None
            return True
        self.status = JobStatus.FAILED
        self.completed_at = utcnow()
        return False

    @property
    def retry_delay_minutes(self) -> int:
        return RETRY_BASE_MINUTES ** self.retry_count

    def result(self) -> Optional[AggregateResult]:
        if not self.processing_result:
            return None
        return AggregateResult.model_validate_json(self.processing_result)
