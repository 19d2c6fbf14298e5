from types import SimpleNamespace
from typing import List, Sequence

import httpx
import openai
import pytest

from relaybot.core.exceptions import FetchError
from relaybot.handlers.completion_client import CompletionClient
from relaybot.handlers.dispatcher import Dispatcher
from relaybot.summarizer.chunker import TokenChunker
from relaybot.summarizer.pipeline import SummaryPipeline
from relaybot.summarizer.summary_templates import SummaryTemplates
from relaybot.summarizer.tokenizer import TokenCodec

API_URL = "https://api.openai.com/v1/chat/completions"


class WhitespaceCodec(TokenCodec):
    """One token per whitespace-delimited word"""

    def __init__(self):
        self.vocab = {}
        self.words = []

    def encode(self, text: str) -> List[int]:
        ids = []
        for word in text.split():
            if word not in self.vocab:
                self.vocab[word] = len(self.words)
                self.words.append(word)
            ids.append(self.vocab[word])
        return ids

    def decode(self, token_ids: Sequence[int]) -> str:
        return " ".join(self.words[i] for i in token_ids)


class BrokenCodec(TokenCodec):
    def encode(self, text: str) -> List[int]:
        return [1, 2, 3]

    def decode(self, token_ids: Sequence[int]) -> str:
        raise KeyError("unknown token id")


def make_response(content="ok", finish_reason="stop", prompt_tokens=10, completion_tokens=5, usage=True):
    return SimpleNamespace(
        choices=[SimpleNamespace(
            index=0,
            message=SimpleNamespace(role="assistant", content=content),
            finish_reason=finish_reason
        )],
        usage=SimpleNamespace(
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            total_tokens=prompt_tokens + completion_tokens
        ) if usage else None
    )


def connection_error():
    return openai.APIConnectionError(request=httpx.Request("POST", API_URL))


def status_error(error_cls, status):
    request = httpx.Request("POST", API_URL)
    return error_cls(f"HTTP {status}", response=httpx.Response(status, request=request), body=None)


class FakeCompletions:
    """Stands in for ``AsyncOpenAI().chat.completions``"""

    def __init__(self, outcomes=None, responder=None):
        self.outcomes = list(outcomes or [])
        self.responder = responder
        self.calls = []

    async def create(self, **params):
        self.calls.append(params)
        if self.responder is not None:
            outcome = self.responder(params)
        elif self.outcomes:
            outcome = self.outcomes.pop(0)
        else:
            outcome = make_response()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeOpenAI:
    def __init__(self, completions: FakeCompletions):
        self.chat = SimpleNamespace(completions=completions)
        self.closed = False

    async def close(self):
        self.closed = True


class FakeChannel:
    def __init__(self):
        self.posts = []

    async def post(self, destination: str, text: str) -> None:
        self.posts.append((destination, text))

    async def stop(self) -> None:
        pass


class FakeFetcher:
    def __init__(self, text=None, error=False):
        self.text = text
        self.error = error
        self.calls = []

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        if self.error:
            raise FetchError(url, "HTTP 404")
        return self.text

    async def close(self) -> None:
        pass


@pytest.fixture
def openai_config():
    return {
        'api_key': 'test-key',
        'base_url': None,
        'model': 'gpt-3.5-turbo',
        'temperature': 0.7,
        'top_p': 1.0,
        'stop': None,
        'timeout': 5.0,
        'retry_times': 3,
        'retry_delay': 0.0
    }


@pytest.fixture
def bot_config():
    return {
        'trigger_prefix': 'ping',
        'chat_persona': "You're a chatbot.",
        'summary_persona': 'As a news reporter AI,',
        'reply_max_tokens': 256,
        'summary_max_tokens': 256,
        'chunk_max_tokens': 2000,
        'encoding': 'cl100k_base'
    }


@pytest.fixture
def channel_config():
    return {
        'type': 'console',
        'raw_destination': None,
        'reply_destination': None,
        'summary_destination': None
    }


@pytest.fixture
def codec():
    return WhitespaceCodec()


@pytest.fixture
def templates(bot_config):
    return SummaryTemplates(bot_config['chat_persona'], bot_config['summary_persona'])


@pytest.fixture
def make_client(openai_config):
    def _make(completions: FakeCompletions, **overrides) -> CompletionClient:
        return CompletionClient({**openai_config, **overrides}, client=FakeOpenAI(completions))
    return _make


@pytest.fixture
def make_dispatcher(bot_config, channel_config, codec, templates, make_client):
    def _make(completions: FakeCompletions, fetcher=None, channel=None, **channel_overrides):
        client = make_client(completions)
        pipeline = SummaryPipeline(
            TokenChunker(codec, max_tokens=bot_config['chunk_max_tokens']),
            client,
            templates,
            max_tokens_per_chunk=bot_config['chunk_max_tokens']
        )
        return Dispatcher(
            bot_config,
            {**channel_config, **channel_overrides},
            channel=channel or FakeChannel(),
            fetcher=fetcher or FakeFetcher(text="page"),
            pipeline=pipeline,
            client=client,
            templates=templates
        )
    return _make
