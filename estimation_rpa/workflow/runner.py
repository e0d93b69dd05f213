import asyncio
import json
import logging
from typing import AsyncContextManager, Awaitable, Callable, Optional

from pydantic import ValidationError

from estimation_rpa.anomaly import AnomalyDetector
from estimation_rpa.automation.driver import UIDriver
from estimation_rpa.automation.playwright_driver import browser_session
from estimation_rpa.config import Settings, settings
from estimation_rpa.core.config import IN_FLIGHT_JOBS, JOB_TYPE_ERP_ESTIMATION
from estimation_rpa.core.logging import release_job_logger, setup_job_logger
from estimation_rpa.job_store import JobStore, job_store
from estimation_rpa.message_queue import MessageQueue
from estimation_rpa.models.job import Job
from estimation_rpa.models.messages import JobMessage, JobNotification, QueueNames
from estimation_rpa.models.payload import JobPayload
from estimation_rpa.models.state import AggregateResult
from estimation_rpa.workflow.orchestrator import WorkflowOrchestrator

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[UIDriver]]

PAYLOAD_METADATA_KEY = "erpJobData"


class JobRunner:
    """Takes queued job messages through one workflow attempt each.

    Faults that escape a run are counted on the job; the message is
    re-published after an exponential delay until the retry budget is spent.
    """

    def __init__(
        self,
        queue: MessageQueue,
        store: JobStore = job_store,
        session_factory: SessionFactory = browser_session,
        orchestrator: Optional[WorkflowOrchestrator] = None,
        anomaly_detector: Optional[AnomalyDetector] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        config: Settings = settings,
    ):
        self.queue = queue
        self.store = store
        self.session_factory = session_factory
        self.orchestrator = orchestrator or WorkflowOrchestrator(config=config)
        self.anomaly_detector = anomaly_detector or AnomalyDetector()
        self.sleep = sleep
        self.config = config

    async def handle_message(self, message: JobMessage) -> None:
        job = self.store.get_job(message.job_id)
        if job is None:
            logger.error(f"Job {message.job_id} not found, dropping message")
            return
        if self.config.SKIP_TERMINAL_JOBS and job.status.is_terminal:
            logger.warning(f"Job {job.job_id} already {job.status}, skipping duplicate delivery")
            return
        if job.job_id in IN_FLIGHT_JOBS:
            logger.warning(f"Job {job.job_id} is already being processed, skipping duplicate delivery")
            return

        IN_FLIGHT_JOBS[job.job_id] = True
        job_logger = setup_job_logger(job.job_id)
        try:
            retry_in = await self._process(job, message, job_logger)
        finally:
            IN_FLIGHT_JOBS.pop(job.job_id, None)
            release_job_logger(job_logger)

        if retry_in is not None:
            logger.info(f"Retrying job {job.job_id} in {retry_in} minutes")
            try:
                await self.sleep(retry_in * 60)
            except asyncio.CancelledError:
                # Shutdown during the wait: hand the retry back to the queue now.
                logger.warning(f"Retry wait for job {job.job_id} interrupted, re-queueing immediately")
                await self.queue.publish(message, QueueNames.JOB_PROCESSING)
                raise
            await self.queue.publish(message, QueueNames.JOB_PROCESSING)

    async def _process(self, job: Job, message: JobMessage, log: logging.Logger) -> Optional[int]:
        """Run one attempt. Returns the retry delay in minutes, or None when the job is settled."""
        job.mark_processing()
        self.store.save_job(job)
        self.store.add_log(job.job_id, f"Processing attempt {job.retry_count + 1} started")
        log.info(f"Processing job {job.job_id} ({message.job_type or job.job_type})")

        try:
            result = await self._execute(job, message, log)
        except Exception as e:
            log.error(f"Job {job.job_id} faulted: {e}", exc_info=True)
            return await self._handle_fault(job, e)

        for anomaly in self.anomaly_detector.detect(job, result):
            log.warning(f"Anomaly detected: {anomaly}")
            result.errors.append(f"Anomaly: {anomaly}")

        job.mark_finished(result)
        self.store.save_job(job)
        self.store.add_log(job.job_id, f"Finished with status {job.status}: {result.message}")
        log.info(f"Job {job.job_id} {job.status}: {result.message}")
        await self._notify(job, result)
        return None

    async def _execute(self, job: Job, message: JobMessage, log: logging.Logger) -> AggregateResult:
        job_type = message.job_type or job.job_type
        if job_type != JOB_TYPE_ERP_ESTIMATION:
            return AggregateResult(success=False, message=f"Unsupported job type: {job_type}")

        try:
            payload = self.payload_for(job, message)
        except (ValidationError, ValueError) as e:
            log.error(f"Invalid payload for job {job.job_id}: {e}")
            return AggregateResult(success=False, message="Invalid job payload", errors=[str(e)])

        async with self.session_factory() as driver:
            return await self.orchestrator.run(driver, payload, log)

    @staticmethod
    def payload_for(job: Job, message: JobMessage) -> JobPayload:
        """Job metadata holds the payload under `erpJobData`, as an object or a JSON string."""
        raw = job.metadata.get(PAYLOAD_METADATA_KEY) or message.payload
        if not raw:
            raise ValueError("No ERP job data in job metadata or message")
        if isinstance(raw, str):
            raw = json.loads(raw)
        return JobPayload.model_validate(raw)

    async def _handle_fault(self, job: Job, error: Exception) -> Optional[int]:
        can_retry = job.mark_retrying(str(error))
        self.store.save_job(job)
        if can_retry:
            self.store.add_log(job.job_id, f"Attempt failed ({error}), retry {job.retry_count} scheduled")
            await self._notify(job, None)
            return job.retry_delay_minutes
        self.store.add_log(job.job_id, f"Failed permanently after {job.retry_count} attempts: {error}")
        logger.error(f"Job {job.job_id} failed permanently: {error}")
        await self._notify(job, None)
        return None

    async def _notify(self, job: Job, result: Optional[AggregateResult]) -> None:
        notification = JobNotification(
            job_id=job.job_id,
            status=job.status,
            result=result,
            recipient_email=job.sender_email,
            error_message=job.error_message,
        )
        await self.queue.publish(notification, QueueNames.NOTIFICATIONS)
