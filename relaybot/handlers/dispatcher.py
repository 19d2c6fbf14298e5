# relaybot/handlers/dispatcher.py
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import urlparse

from relaybot.core.exceptions import FetchError
from relaybot.core.models import InboundMessage
from relaybot.handlers.completion_client import CompletionClient
from relaybot.summarizer.pipeline import SummaryPipeline
from relaybot.summarizer.summary_templates import SummaryTemplates
from relaybot.utils.logger import RelayLogAdapter, get_logger, relay_logger

logger = get_logger(__name__)

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")


class RuleKind(Enum):
    URL = "url"
    PREFIX = "prefix"
    NOOP = "noop"


@dataclass(frozen=True)
class TriggerRule:
    kind: RuleKind
    predicate: Callable[[str], bool]

    def matches(self, text: str) -> bool:
        return self.predicate(text)


def is_absolute_uri(text: str) -> bool:
    """True when text is a single well-formed absolute URI with an authority"""
    candidate = text.strip()
    if not candidate or any(ch.isspace() for ch in candidate):
        return False
    try:
        parsed = urlparse(candidate)
        # Accessing port validates it
        parsed.port
    except ValueError:
        return False
    return bool(_SCHEME_RE.match(parsed.scheme or "")) and bool(parsed.netloc)


def build_rules(trigger_prefix: str) -> Tuple[TriggerRule, ...]:
    """Trigger rules in priority order; the first match wins"""
    return (
        TriggerRule(RuleKind.URL, is_absolute_uri),
        TriggerRule(RuleKind.PREFIX, lambda text: text.startswith(trigger_prefix)),
        TriggerRule(RuleKind.NOOP, lambda text: True),
    )


class Dispatcher:
    def __init__(
        self,
        bot_config: Dict[str, Any],
        channel_config: Dict[str, Any],
        channel,
        fetcher,
        pipeline: SummaryPipeline,
        client: CompletionClient,
        templates: SummaryTemplates
    ):
        """
        Route inbound messages to the URL-summary path or the command path.

        Holds only read-only collaborators, so concurrent ``handle`` calls are
        independent of each other.
        """
        self.channel = channel
        self.fetcher = fetcher
        self.pipeline = pipeline
        self.client = client
        self.templates = templates
        self.reply_max_tokens = bot_config.get('reply_max_tokens', 256)
        self.rules = build_rules(bot_config.get('trigger_prefix', 'private'))
        self.raw_destination = channel_config.get('raw_destination')
        self.reply_destination = channel_config.get('reply_destination')
        self.summary_destination = channel_config.get('summary_destination')

    def classify(self, text: str) -> RuleKind:
        for rule in self.rules:
            if rule.matches(text):
                return rule.kind
        return RuleKind.NOOP

    async def handle(self, message: InboundMessage) -> None:
        """
        Handle one inbound message.

        Failures are logged and never posted back to the channel.
        """
        kind = self.classify(message.text)
        log = relay_logger(logger, channel=message.source_channel, rule=kind.value)
        try:
            if kind is RuleKind.URL:
                await self._handle_url(message, log)
            elif kind is RuleKind.PREFIX:
                await self._handle_command(message, log)
            else:
                log.debug("No trigger matched")
        except Exception as e:
            log.error(f"Error handling message: {str(e)}", exc_info=e)

    async def _handle_url(self, message: InboundMessage, log: RelayLogAdapter) -> None:
        url = message.text.strip()
        try:
            page_text = await self.fetcher.fetch(url)
        except FetchError as e:
            log.warning(f"Skipping URL message: {str(e)}")
            return

        await self.channel.post(self._destination(self.raw_destination, message), page_text)

        destination = self._destination(self.summary_destination, message)
        posted = 0
        async for summary in self.pipeline.summarize(page_text):
            await self.channel.post(destination, summary)
            posted += 1
        log.info(f"Posted {posted} summaries for {url}")

    async def _handle_command(self, message: InboundMessage, log: RelayLogAdapter) -> None:
        # The first word carries the trigger prefix
        content = " ".join(message.text.split()[1:])
        request = self.client.build_request(
            self.templates.chat_prompt(content),
            self.reply_max_tokens
        )
        result = await self.client.complete(request)
        log.info(
            f"Command reply ready, finish_reason={result.finish_reason}, "
            f"total_tokens={result.usage.total_tokens}"
        )
        await self.channel.post(self._destination(self.reply_destination, message), result.text)

    @staticmethod
    def _destination(configured: Optional[str], message: InboundMessage) -> str:
        return configured or message.source_channel
