"""Order-events publisher registry.

Provides get_publisher() / set_publisher() to swap transports:
- InMemoryBus for development and testing (default)
- RedisPublisher when ORDER_EVENTS_TRANSPORT=redis
"""

import os

from storefront.fanout.port import Publisher

ORDERS_CHANNEL = "orders"

_current_publisher: Publisher | None = None


def get_publisher() -> Publisher:
    """Return the current publisher, building it from the environment on first use."""
    global _current_publisher
    if _current_publisher is None:
        transport = os.getenv("ORDER_EVENTS_TRANSPORT", "memory").lower()
        if transport == "redis":
            from storefront.fanout.redis_publisher import RedisPublisher

            _current_publisher = RedisPublisher()
        elif transport == "memory":
            from storefront.fanout.memory import InMemoryBus

            _current_publisher = InMemoryBus()
        else:
            raise ValueError(f"Unknown order events transport: {transport}")
    return _current_publisher


def set_publisher(publisher: Publisher) -> None:
    """Override the active publisher (useful for tests)."""
    global _current_publisher
    _current_publisher = publisher


def reset_publisher() -> None:
    """Reset to the default publisher."""
    global _current_publisher
    _current_publisher = None
