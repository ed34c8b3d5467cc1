"""Message bus infrastructure - Redis Streams integration."""
from .redis_stream_consumer import RedisStreamConsumer, decode_message, forward_message
from .redis_stream_publisher import RedisStreamPublisher

__all__ = [
    "RedisStreamPublisher",
    "RedisStreamConsumer",
    "decode_message",
    "forward_message",
]
