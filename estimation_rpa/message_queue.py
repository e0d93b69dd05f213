"""Message transport used between intake, worker and notifier.

Only the in-process implementation lives here; a broker-backed queue just
has to provide the same four coroutines.
"""
import asyncio
import logging
from collections import defaultdict
from typing import Awaitable, Callable, Dict, List, Optional, Protocol, Type, TypeVar
from pydantic import BaseModel
from estimation_rpa.models.messages import QueueNames

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


class MessageQueue(Protocol):
    async def publish(self, message: BaseModel, queue_name: str) -> None: ...

    async def consume(self, queue_name: str, model: Type[M], timeout: Optional[float] = None) -> Optional[M]: ...

    async def start_consuming(
        self,
        queue_name: str,
        model: Type[M],
        handler: Callable[[M], Awaitable[None]],
        stop_event: asyncio.Event,
    ) -> None: ...

    def pending(self, queue_name: str) -> int: ...


class InMemoryMessageQueue:
    """asyncio-backed queue; messages travel as JSON like they would on a broker."""

    def __init__(self):
        self._queues: Dict[str, asyncio.Queue] = defaultdict(asyncio.Queue)
        self.published: List[tuple] = []

    async def publish(self, message: BaseModel, queue_name: str) -> None:
        body = message.model_dump_json()
        self.published.append((queue_name, body))
        await self._queues[queue_name].put(body)
        logger.info(f"Published {type(message).__name__} to {queue_name}")

    async def consume(self, queue_name: str, model: Type[M], timeout: Optional[float] = None) -> Optional[M]:
        """Pop one message, or None when nothing arrives within the timeout."""
        queue = self._queues[queue_name]
        try:
            if timeout is None:
                body = await queue.get()
            else:
                body = await asyncio.wait_for(queue.get(), timeout)
        except asyncio.TimeoutError:
            return None
        queue.task_done()
        return model.model_validate_json(body)

    async def start_consuming(
        self,
        queue_name: str,
        model: Type[M],
        handler: Callable[[M], Awaitable[None]],
        stop_event: asyncio.Event,
        poll_interval: float = 1.0,
    ) -> None:
        """Feed messages to handler until stop_event is set; the in-flight message always finishes."""
        while not stop_event.is_set():
            message = await self.consume(queue_name, model, timeout=poll_interval)
            if message is None:
                continue
            try:
                await handler(message)
            except Exception:
                logger.error(f"Handler for {queue_name} raised", exc_info=True)
                await self._queues[QueueNames.DEAD_LETTER].put(message.model_dump_json())

    def pending(self, queue_name: str) -> int:
        return self._queues[queue_name].qsize()
