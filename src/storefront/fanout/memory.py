"""In-memory bus — delivers to local subscribers and records every message for tests."""

from collections import defaultdict
from collections.abc import Callable

from storefront.fanout.port import ChannelMessage, Publisher


class InMemoryBus(Publisher):
    def __init__(self):
        self.published: list[ChannelMessage] = []
        self._subscribers: dict[str, list[Callable[[ChannelMessage], None]]] = defaultdict(list)
        self.should_succeed = True
        self.failure_reason = "Publish failed"

    def configure(self, should_succeed: bool = True, failure_reason: str = "Publish failed"):
        """Configure the bus to fail publishes, for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def subscribe(self, channel: str, callback: Callable[[ChannelMessage], None]) -> None:
        self._subscribers[channel].append(callback)

    def publish(self, channel: str, event: str, payload: dict) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)

        message = ChannelMessage(channel=channel, event=event, payload=dict(payload))
        self.published.append(message)
        for callback in list(self._subscribers[channel]):
            callback(message)

    def events(self, channel: str | None = None) -> list[str]:
        """Names of published events, optionally filtered by channel."""
        return [m.event for m in self.published if channel is None or m.channel == channel]

    def reset(self):
        """Clear recorded messages and subscribers (useful between tests)."""
        self.published.clear()
        self._subscribers.clear()
        self.should_succeed = True
        self.failure_reason = "Publish failed"
