"""
Redis pub/sub subscriber

Subscribes to every bound channel and dispatches each message to its handler
as a background task, so a slow prediction run never blocks the listen loop.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Set

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from uniguide.events.registry import ChannelBinding, EventHandler, validate_bindings

logger = logging.getLogger(__name__)


class EventSubscriberManager:
    """Owns the pub/sub connection, the listen task and in-flight handler tasks."""

    def __init__(
        self,
        redis_client: aioredis.Redis,
        bindings: Sequence[ChannelBinding],
        reconnect_delay: float = 1.0,
        drain_timeout: float = 30.0,
    ):
        self._redis = redis_client
        self._handlers: Dict[str, EventHandler] = {
            binding.channel: binding.handler for binding in validate_bindings(bindings)
        }
        self._reconnect_delay = reconnect_delay
        self._drain_timeout = drain_timeout
        self._pubsub: Optional[Any] = None
        self._listen_task: Optional[asyncio.Task] = None
        self._handler_tasks: Set[asyncio.Task] = set()

    @property
    def channels(self) -> List[str]:
        return list(self._handlers)

    @property
    def is_running(self) -> bool:
        return self._listen_task is not None and not self._listen_task.done()

    async def start(self) -> None:
        if self.is_running:
            return
        self._pubsub = self._redis.pubsub(ignore_subscribe_messages=True)
        await self._pubsub.subscribe(*self._handlers)
        self._listen_task = asyncio.create_task(self._listen(), name="event-subscriber")
        logger.info(f"[EVENTS] Subscribed to {', '.join(self._handlers)}")

    async def stop(self) -> None:
        if self._listen_task is not None:
            self._listen_task.cancel()
            try:
                await self._listen_task
            except asyncio.CancelledError:
                pass
            self._listen_task = None

        if self._handler_tasks:
            logger.info(f"[EVENTS] Waiting for {len(self._handler_tasks)} in-flight handler(s)")
            _, pending = await asyncio.wait(set(self._handler_tasks), timeout=self._drain_timeout)
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        if self._pubsub is not None:
            try:
                await self._pubsub.unsubscribe()
            except (RedisError, OSError) as e:
                logger.warning(f"[EVENTS] Unsubscribe failed: {e}")
            await self._pubsub.aclose()
            self._pubsub = None
        logger.info("[EVENTS] Subscriber stopped")

    def dispatch(self, message: Dict[str, Any]) -> Optional[asyncio.Task]:
        """Schedule the handler bound to the message's channel."""
        if message.get("type") != "message":
            return None
        channel = message.get("channel")
        if isinstance(channel, bytes):
            channel = channel.decode("utf-8")
        handler = self._handlers.get(channel)
        if handler is None:
            logger.warning(f"[EVENTS] No handler bound to channel '{channel}'")
            return None

        task = asyncio.create_task(self._run_handler(channel, handler, message.get("data")))
        self._handler_tasks.add(task)
        task.add_done_callback(self._handler_tasks.discard)
        return task

    async def _listen(self) -> None:
        while True:
            try:
                async for message in self._pubsub.listen():
                    self.dispatch(message)
                return
            except (RedisError, OSError) as e:
                logger.error(f"[EVENTS] Pub/sub connection error: {e}")
                await asyncio.sleep(self._reconnect_delay)

    @staticmethod
    async def _run_handler(channel: str, handler: EventHandler, data: Any) -> None:
        try:
            await handler(data)
        except Exception as e:
            logger.exception(f"[EVENTS] Handler for '{channel}' failed: {e}")
