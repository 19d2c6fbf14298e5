# relaybot/channels/slack.py
import asyncio
import re
import time
from typing import Any, Dict, List, Optional

from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from relaybot.channels.base import ChannelPort, MessageCallback
from relaybot.core.exceptions import ConfigurationError
from relaybot.core.models import InboundMessage
from relaybot.utils.logger import get_logger

logger = get_logger(__name__)

# Slack truncates message text beyond 40k characters
MAX_MESSAGE_CHARS = 39000

# <https://x|label>, <@U123>, <#C123|general>, <!here>
_MARKUP_RE = re.compile(r"<([^<>|]+)(?:\|([^<>]*))?>")


def split_message(text: str, limit: int = MAX_MESSAGE_CHARS) -> List[str]:
    """Cut text into postable pieces, preferring line breaks"""
    pieces = []
    while len(text) > limit:
        cut = text.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        pieces.append(text[:cut])
        text = text[cut:].lstrip("\n")
    if text:
        pieces.append(text)
    return pieces


def _replace_markup(match: re.Match) -> str:
    target, label = match.group(1), match.group(2)
    if target.startswith("@"):
        return f"@{label or target[1:]}"
    if target.startswith("#"):
        return f"#{label or target[1:]}"
    if target.startswith("!"):
        return f"@{label or target[1:]}"
    # Links keep their target so URL messages stay URLs
    return target


def clean_text(text: str) -> str:
    """Turn Slack message markup back into plain text"""
    text = _MARKUP_RE.sub(_replace_markup, text)
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")


class SlackChannel(ChannelPort):
    """Polls a Slack channel's history and posts through the Web API"""

    name = "slack"

    def __init__(self, channel_config: Dict[str, Any], client: Optional[Any] = None):
        super().__init__()
        self.token = channel_config.get('slack_token')
        if not self.token and client is None:
            raise ConfigurationError('SLACK_BOT_TOKEN', "SLACK_BOT_TOKEN is required for the Slack channel")

        self.channel_name = channel_config.get('slack_channel', 'github-status').lstrip('#')
        self.api_base = channel_config.get('slack_api_base', 'https://slack.com/api').rstrip('/') + '/'
        self.poll_interval = channel_config.get('poll_interval', 3.0)
        self.channel_id = None
        self._client = client

    def _get_client(self) -> AsyncWebClient:
        if self._client is None:
            self._client = AsyncWebClient(token=self.token, base_url=self.api_base)
        return self._client

    async def resolve_channel_id(self) -> str:
        """Find the id of the configured channel, accepting an id as-is"""
        client = self._get_client()
        cursor = None
        while True:
            response = await client.conversations_list(
                types="public_channel,private_channel",
                limit=200,
                cursor=cursor
            )
            for channel in response.get('channels', []):
                if self.channel_name in (channel.get('name'), channel.get('id')):
                    return channel['id']
            cursor = response.get('response_metadata', {}).get('next_cursor')
            if not cursor:
                logger.warning(f"Channel {self.channel_name} not listed; using it as an id")
                return self.channel_name

    async def poll(self, oldest: str) -> List[Dict]:
        """User messages newer than ``oldest``, oldest first"""
        response = await self._get_client().conversations_history(
            channel=self.channel_id,
            oldest=oldest,
            limit=100
        )
        # History is returned newest first
        return sorted(response.get('messages', []), key=lambda m: float(m.get('ts', 0)))

    async def listen(self, callback: MessageCallback) -> None:
        self.channel_id = await self.resolve_channel_id()
        self._running = True
        oldest = f"{time.time():.6f}"
        logger.info(f"Listening to Slack channel {self.channel_name} ({self.channel_id})")

        while self._running:
            try:
                for message in await self.poll(oldest):
                    oldest = max(oldest, message.get('ts', oldest), key=float)
                    if not self._is_user_message(message):
                        continue
                    await callback(InboundMessage(
                        source_channel=self.channel_name,
                        text=clean_text(message['text'])
                    ))
            except SlackApiError as e:
                logger.error(f"Error polling Slack history: {e.response.get('error', str(e))}")

            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def _is_user_message(message: Dict) -> bool:
        return (
            message.get('type') == 'message'
            and not message.get('subtype')
            and not message.get('bot_id')
            and bool(message.get('text'))
        )

    async def post(self, destination: str, text: str) -> None:
        client = self._get_client()
        for piece in split_message(text):
            try:
                await client.chat_postMessage(channel=destination, text=piece)
            except SlackApiError as e:
                logger.error(f"Error posting to Slack channel {destination}: {e.response.get('error', str(e))}")
                return

    async def stop(self) -> None:
        await super().stop()
        if self._client is not None and getattr(self._client, 'session', None) is not None:
            await self._client.session.close()
