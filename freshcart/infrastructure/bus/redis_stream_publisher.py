"""
Redis Streams Publisher for Event-Driven Architecture.

Publishes order events to a Redis Stream so other services (notifications,
analytics) can consume them with consumer groups.
"""
import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import redis.asyncio as aioredis

from freshcart.application.interfaces import IEventPublisher


logger = logging.getLogger(__name__)


class RedisStreamPublisher(IEventPublisher):
    """
    Publishes events to Redis Streams.

    Stream format: freshcart:orders:stream
    Message format: {
        "topic": str,         # e.g. "order.created"
        "payload": str,       # JSON body
        "timestamp": str,     # ISO format
    }
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "freshcart:orders:stream",
        maxlen: int = 10000,
    ):
        """
        Initialize Redis Stream Publisher.

        Args:
            redis_url: Redis connection URL
            stream_name: Redis Stream name
            maxlen: Approximate number of messages kept in the stream
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.maxlen = maxlen
        self._redis_client: Optional[aioredis.Redis] = None

    async def connect(self) -> None:
        """Establish Redis connection."""
        if self._redis_client is None:
            try:
                self._redis_client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis_client.ping()
                logger.info(f"✅ Connected to Redis: {self.redis_url}")
            except Exception as e:
                self._redis_client = None
                logger.error(f"Failed to connect to Redis: {e}")
                raise

    async def disconnect(self) -> None:
        """Close Redis connection."""
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("✅ Disconnected from Redis")

    @staticmethod
    def build_message(topic: str, payload: Dict[str, Any]) -> Dict[str, str]:
        """Flatten a payload into stream fields (values must be strings)."""
        return {
            "topic": topic,
            "payload": json.dumps(payload, default=str),
            "timestamp": datetime.utcnow().isoformat(),
        }

    async def publish(self, topic: str, payload: Dict[str, Any]) -> None:
        """
        Publish a payload to the stream.

        Failures are logged and swallowed; order processing never waits on Redis.

        Args:
            topic: Topic name
            payload: JSON-serializable message body
        """
        try:
            if self._redis_client is None:
                await self.connect()

            msg_id = await self._redis_client.xadd(
                self.stream_name,
                self.build_message(topic, payload),
                maxlen=self.maxlen,
                approximate=True,
            )
            logger.info(f"Published {topic} to {self.stream_name}: msg_id={msg_id}")
        except Exception as e:
            logger.error(f"Failed to publish {topic} to Redis Stream: {e}", exc_info=True)
