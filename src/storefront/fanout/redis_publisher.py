"""Redis pub/sub publisher for production deployments.

Each message is published as JSON ``{"event": ..., "data": ...}`` on the
Redis channel of the same name, so any number of admin console workers can
subscribe without the order service knowing about them.
"""

import json
import os

import redis

from storefront.fanout.port import ChannelMessage, Publisher


class RedisPublisher(Publisher):
    def __init__(self, redis_url: str | None = None, client: redis.Redis | None = None):
        self.redis_url = redis_url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self._client = client or redis.Redis.from_url(self.redis_url)

    def publish(self, channel: str, event: str, payload: dict) -> None:
        self._client.publish(channel, encode(event, payload))


def encode(event: str, payload: dict) -> str:
    return json.dumps({"event": event, "data": payload}, default=str)


def decode(channel: str, raw) -> ChannelMessage:
    """Turn a raw pub/sub payload back into a ``ChannelMessage``."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    body = json.loads(raw)
    return ChannelMessage(channel=channel, event=body["event"], payload=body.get("data") or {})
