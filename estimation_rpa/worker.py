import asyncio
import logging
from typing import List, Optional

from estimation_rpa.config import Settings, settings
from estimation_rpa.email_service import NotificationConsumer
from estimation_rpa.message_queue import MessageQueue
from estimation_rpa.models.messages import JobMessage, QueueNames
from estimation_rpa.workflow.runner import JobRunner

logger = logging.getLogger(__name__)


class JobWorker:
    """N worker slots pulling from the job queue plus one notification consumer."""

    def __init__(
        self,
        queue: MessageQueue,
        runner: Optional[JobRunner] = None,
        notifier: Optional[NotificationConsumer] = None,
        concurrency: Optional[int] = None,
        config: Settings = settings,
    ):
        self.queue = queue
        self.runner = runner or JobRunner(queue, config=config)
        self.notifier = notifier or NotificationConsumer(queue)
        self.concurrency = max(1, concurrency or config.WORKER_CONCURRENCY)
        self.stop_event = asyncio.Event()
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    async def _slot(self, index: int) -> None:
        logger.info(f"Worker slot {index} started")
        await self.queue.start_consuming(
            QueueNames.JOB_PROCESSING, JobMessage, self.runner.handle_message, self.stop_event
        )
        logger.info(f"Worker slot {index} stopped")

    def start(self) -> None:
        if self.running:
            return
        self.stop_event.clear()
        self._tasks = [asyncio.create_task(self._slot(i)) for i in range(self.concurrency)]
        self._tasks.append(asyncio.create_task(self.notifier.run(self.stop_event)))
        logger.info(f"Started {self.concurrency} worker slots")

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Stop pulling new messages; in-flight jobs run to completion."""
        self.stop_event.set()
        if not self._tasks:
            return
        done, pending = await asyncio.wait(self._tasks, timeout=timeout)
        for task in pending:
            logger.warning("Worker task did not stop in time, cancelling")
            task.cancel()
        self._tasks = []
        logger.info("Worker stopped")
