"""
Redis Streams Consumer for Event-Driven Architecture.

Consumes payment events published by the payment service and forwards them
to the in-process event bus, where the settlement handler confirms orders.
"""
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import redis.asyncio as aioredis

from freshcart.application.interfaces import IEventPublisher


logger = logging.getLogger(__name__)


class RedisStreamConsumer:
    """
    Consumes events from Redis Streams.

    Features:
    - Consumer groups for load balancing
    - Message acknowledgment (ACK) after successful processing
    - Unacknowledged messages are redelivered to the group

    Stream: freshcart:payments:stream
    Consumer Group: freshcart:payments:consumers
    """

    def __init__(
        self,
        redis_url: str = "redis://localhost:6379/0",
        stream_name: str = "freshcart:payments:stream",
        consumer_group: str = "freshcart:payments:consumers",
        consumer_name: str = "order-service-1",
    ):
        """
        Initialize Redis Stream Consumer.

        Args:
            redis_url: Redis connection URL
            stream_name: Redis Stream name
            consumer_group: Consumer group name
            consumer_name: Unique consumer name (for load balancing)
        """
        self.redis_url = redis_url
        self.stream_name = stream_name
        self.consumer_group = consumer_group
        self.consumer_name = consumer_name
        self._redis_client: Optional[aioredis.Redis] = None
        self._running = False

    async def connect(self) -> None:
        """Establish Redis connection and create consumer group."""
        if self._redis_client is None:
            try:
                self._redis_client = aioredis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis_client.ping()
                logger.info(f"✅ Connected to Redis: {self.redis_url}")

                try:
                    await self._redis_client.xgroup_create(
                        name=self.stream_name,
                        groupname=self.consumer_group,
                        id="0",  # Start from beginning
                        mkstream=True,
                    )
                    logger.info(f"✅ Created consumer group: {self.consumer_group}")
                except aioredis.ResponseError as e:
                    if "BUSYGROUP" in str(e):
                        logger.info(f"Consumer group {self.consumer_group} already exists")
                    else:
                        raise

            except Exception as e:
                self._redis_client = None
                logger.error(f"Failed to connect to Redis: {e}")
                raise

    async def disconnect(self) -> None:
        """Close Redis connection."""
        self._running = False
        if self._redis_client:
            await self._redis_client.aclose()
            self._redis_client = None
            logger.info("✅ Disconnected from Redis")

    async def consume_messages(
        self,
        batch_size: int = 10,
        block_ms: int = 1000,
    ) -> List[Dict[str, Any]]:
        """
        Read messages from Redis Stream.

        Args:
            batch_size: Maximum number of messages to read
            block_ms: Blocking time in milliseconds

        Returns:
            List of message dictionaries with 'id' and 'data' keys
        """
        if self._redis_client is None:
            await self.connect()

        messages = await self._redis_client.xreadgroup(
            groupname=self.consumer_group,
            consumername=self.consumer_name,
            streams={self.stream_name: ">"},  # ">" means new messages
            count=batch_size,
            block=block_ms,
        )

        if not messages:
            return []

        result = []
        for _stream_name, stream_messages in messages:
            for msg_id, msg_data in stream_messages:
                result.append({"id": msg_id, "data": msg_data})
        return result

    async def acknowledge_message(self, message_id: str) -> None:
        """
        Acknowledge message processing (ACK).

        Args:
            message_id: Message ID to acknowledge
        """
        if self._redis_client is None:
            await self.connect()

        await self._redis_client.xack(self.stream_name, self.consumer_group, message_id)
        logger.debug(f"Acknowledged message: {message_id}")

    async def run(self, bus: IEventPublisher, poll_interval: float = 1.0) -> None:
        """
        Forward stream messages to ``bus`` until ``stop()`` is called.

        Args:
            bus: Publisher that receives ``(topic, payload)`` per message
            poll_interval: Time to wait after an empty read or an error (seconds)
        """
        await self.connect()
        self._running = True
        logger.info(
            f"🚀 Forwarding {self.stream_name} as {self.consumer_name} ({self.consumer_group})"
        )

        while self._running:
            try:
                messages = await self.consume_messages()
                if not messages:
                    await asyncio.sleep(poll_interval)
                    continue

                for message in messages:
                    await forward_message(message, self, bus)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Stream consumer error: {e}", exc_info=True)
                await asyncio.sleep(poll_interval)

    def stop(self) -> None:
        self._running = False


def decode_message(data: Dict[str, str]) -> Dict[str, Any]:
    """
    Decode stream fields into ``{"topic": ..., "payload": {...}}``.

    Producers either send a JSON ``payload`` field or flat fields; flat
    fields (minus ``topic``) become the payload.
    """
    topic = data.get("topic") or data.get("event_type") or ""
    if "payload" in data:
        payload = json.loads(data["payload"])
    else:
        payload = {key: value for key, value in data.items() if key not in ("topic", "event_type")}
    return {"topic": topic, "payload": payload}


async def forward_message(
    message: Dict[str, Any],
    consumer: RedisStreamConsumer,
    bus: IEventPublisher,
) -> None:
    """
    Forward one stream message to the bus and ACK it.

    Malformed messages are ACKed and dropped; they would never succeed.
    """
    message_id = message["id"]
    try:
        decoded = decode_message(message["data"])
    except (ValueError, TypeError) as e:
        logger.error(f"Dropping malformed message {message_id}: {e}")
        await consumer.acknowledge_message(message_id)
        return

    if not decoded["topic"]:
        logger.warning(f"Dropping message {message_id} without topic")
        await consumer.acknowledge_message(message_id)
        return

    logger.info(f"📨 {decoded['topic']} received (msg_id={message_id})")
    await bus.publish(decoded["topic"], decoded["payload"])
    await consumer.acknowledge_message(message_id)
