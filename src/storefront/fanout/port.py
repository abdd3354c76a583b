"""Fan-out port — the contract every order-events transport implements."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ChannelMessage:
    """One event published on a channel, as a subscriber receives it."""

    channel: str
    event: str
    payload: dict = field(default_factory=dict)


class Publisher(ABC):
    """Abstract interface for publish/subscribe transports."""

    @abstractmethod
    def publish(self, channel: str, event: str, payload: dict) -> None:
        """Publish ``payload`` as ``event`` on ``channel``.

        Raises on transport failure; callers decide whether that matters.
        """
        ...
