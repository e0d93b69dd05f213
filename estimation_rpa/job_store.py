from typing import Any, Dict, Optional
from threading import Lock
import uuid
from estimation_rpa.core.config import JOB_TYPE_ERP_ESTIMATION
from estimation_rpa.models.job import Job, JobStatus, utcnow

class JobStore:
    """Thread-safe in-memory job store."""
    def __init__(self):
        self._jobs: Dict[str, Job] = {}
        self._lock = Lock()

    def create_job(
        self,
        metadata: Dict[str, Any],
        sender_email: str = "",
        subject: str = "",
        job_type: str = JOB_TYPE_ERP_ESTIMATION,
    ) -> Job:
        """Create a new pending job."""
        job = Job(
            job_id=str(uuid.uuid4()),
            job_type=job_type,
            status=JobStatus.PENDING,
            sender_email=sender_email,
            subject=subject,
            metadata=metadata,
        )
        with self._lock:
            self._jobs[job.job_id] = job
        return job.model_copy(deep=True)

    def get_job(self, job_id: str) -> Optional[Job]:
        """Get a detached copy of the job, or None."""
        with self._lock:
            job = self._jobs.get(job_id)
            return job.model_copy(deep=True) if job else None

    def save_job(self, job: Job) -> None:
        """Insert or overwrite a job record."""
        job.updated_at = utcnow()
        with self._lock:
            self._jobs[job.job_id] = job.model_copy(deep=True)

    def update_job(self, job_id: str, status: str = None, error: str = None) -> None:
        """Update job status."""
        with self._lock:
            if job := self._jobs.get(job_id):
                if status:
                    job.status = JobStatus(str(status).lower())
                if error:
                    job.error_message = error
                job.updated_at = utcnow()

    def add_log(self, job_id: str, message: str) -> None:
        """Add a log message to the job."""
        with self._lock:
            if job := self._jobs.get(job_id):
                job.logs.append(message)

    def clear(self) -> None:
        with self._lock:
            self._jobs.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._jobs)


job_store = JobStore()
