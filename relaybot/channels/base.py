# relaybot/channels/base.py
from abc import ABC, abstractmethod
from typing import Awaitable, Callable

from relaybot.core.models import InboundMessage

MessageCallback = Callable[[InboundMessage], Awaitable[None]]


class ChannelPort(ABC):
    """
    Source of inbound messages and sink for outbound ones.

    ``post`` is fire-and-forget: delivery problems are logged by the channel
    and never raised to the caller.
    """

    name = "base"

    def __init__(self):
        self._running = False

    @abstractmethod
    async def listen(self, callback: MessageCallback) -> None:
        """Deliver each inbound message to ``callback`` until stopped"""

    @abstractmethod
    async def post(self, destination: str, text: str) -> None:
        """Post ``text`` to ``destination``"""

    async def stop(self) -> None:
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running
