# relaybot/main.py
import argparse
import asyncio
from typing import Optional, Set

from relaybot.channels.base import ChannelPort
from relaybot.channels.console import ConsoleChannel
from relaybot.channels.slack import SlackChannel
from relaybot.core.models import InboundMessage
from relaybot.handlers.completion_client import CompletionClient
from relaybot.handlers.dispatcher import Dispatcher
from relaybot.scraper.page_fetcher import PageFetcher
from relaybot.summarizer.chunker import TokenChunker
from relaybot.summarizer.pipeline import SummaryPipeline
from relaybot.summarizer.summary_templates import SummaryTemplates
from relaybot.summarizer.tokenizer import TiktokenCodec
from relaybot.utils.config import Config
from relaybot.utils.logger import get_logger, log_error

logger = get_logger(__name__)


def build_channel(config: Config, channel_type: Optional[str] = None) -> ChannelPort:
    channel_config = config.get_channel_config()
    channel_type = channel_type or channel_config['type']
    if channel_type == 'slack':
        return SlackChannel(channel_config)
    return ConsoleChannel()


class RelayBot:
    def __init__(self, config: Config, channel: ChannelPort, client: Optional[CompletionClient] = None,
                 fetcher: Optional[PageFetcher] = None, codec=None):
        """Wire the relay components together"""
        self.config = config
        self.channel = channel
        bot_config = config.get_bot_config()

        self.client = client or CompletionClient(config.get_openai_config())
        self.fetcher = fetcher or PageFetcher(config.get_fetch_config())
        self.templates = SummaryTemplates(
            chat_persona=bot_config['chat_persona'],
            summary_persona=bot_config['summary_persona']
        )
        self.chunker = TokenChunker(
            codec or TiktokenCodec(bot_config['encoding']),
            max_tokens=bot_config['chunk_max_tokens']
        )
        self.pipeline = SummaryPipeline(
            self.chunker,
            self.client,
            self.templates,
            max_tokens_per_chunk=bot_config['chunk_max_tokens'],
            max_output_tokens=bot_config['summary_max_tokens']
        )
        self.dispatcher = Dispatcher(
            bot_config,
            config.get_channel_config(),
            channel=self.channel,
            fetcher=self.fetcher,
            pipeline=self.pipeline,
            client=self.client,
            templates=self.templates
        )
        self._tasks: Set[asyncio.Task] = set()

    async def on_message(self, message: InboundMessage) -> None:
        """Schedule the message as its own task"""
        task = asyncio.create_task(self.dispatcher.handle(message))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            log_error(error, "Unhandled error in message task")

    async def run(self) -> None:
        """Listen until the channel stops, then wait for in-flight messages"""
        try:
            await self.channel.listen(self.on_message)
            if self._tasks:
                await asyncio.gather(*self._tasks, return_exceptions=True)
        except asyncio.CancelledError:
            logger.info("Listener cancelled")
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        """Cancel outstanding work and close network resources"""
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.channel.stop()
        await self.fetcher.close()
        await self.client.close()
        logger.info("Cleanup completed")


def main():
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Relay channel messages to a chat-completion model')
    parser.add_argument('--channel', choices=['console', 'slack'], help='Channel to listen on')
    args = parser.parse_args()

    config = Config()
    bot = RelayBot(config, build_channel(config, args.channel))
    try:
        asyncio.run(bot.run())
    except KeyboardInterrupt:
        print("\nShutting down...")


if __name__ == "__main__":
    main()
