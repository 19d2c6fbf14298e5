# relaybot/channels/console.py
import asyncio
import sys

from relaybot.channels.base import ChannelPort, MessageCallback
from relaybot.core.models import InboundMessage
from relaybot.utils.logger import get_logger

logger = get_logger(__name__)


class ConsoleChannel(ChannelPort):
    """Interactive channel reading lines from stdin"""

    name = "console"

    def __init__(self, channel_name: str = "console", prompt: str = "You: "):
        super().__init__()
        self.channel_name = channel_name
        self.prompt = prompt

    async def listen(self, callback: MessageCallback) -> None:
        print("Console mode started. Type a message (or 'quit' to exit):")
        self._running = True
        loop = asyncio.get_running_loop()

        while self._running:
            try:
                line = await loop.run_in_executor(None, input, self.prompt)
            except EOFError:
                break

            line = line.strip()
            if not line:
                continue
            if line.lower() == 'quit':
                print("Exiting console mode...")
                break

            await callback(InboundMessage(source_channel=self.channel_name, text=line))

        self._running = False

    async def post(self, destination: str, text: str) -> None:
        try:
            print(f"\n[{destination}] Bot: {text}\n")
            sys.stdout.flush()
        except OSError as e:
            logger.error(f"Error writing message to console: {str(e)}")
