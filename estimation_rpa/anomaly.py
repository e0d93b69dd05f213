import logging
from datetime import timedelta
from typing import List

from estimation_rpa.models.job import Job, utcnow
from estimation_rpa.models.state import AggregateResult

logger = logging.getLogger(__name__)

MAX_JOB_AGE = timedelta(days=7)
HIGH_RETRY_COUNT = 2


class AnomalyDetector:
    """Post-run sanity checks on a job and its result."""

    def detect(self, job: Job, result: AggregateResult) -> List[str]:
        anomalies = []
        if job.created_at < utcnow() - MAX_JOB_AGE:
            anomalies.append("Job is older than 7 days")
        if result.success and not result.data:
            anomalies.append("Successful result but no data returned")
        if not result.success and not result.errors:
            anomalies.append("Failed result but no error details provided")
        if job.retry_count > HIGH_RETRY_COUNT:
            anomalies.append(f"High retry count: {job.retry_count}")
        if anomalies:
            logger.info(f"Job {job.job_id}: {len(anomalies)} anomalies")
        return anomalies
