# relaybot/handlers/completion_client.py
import asyncio
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from relaybot.core.exceptions import (
    CompletionError,
    TransportError,
    AuthError,
    MalformedResponseError,
)
from relaybot.core.models import (
    ChatMessage,
    CompletionRequest,
    CompletionResult,
    TokenUsage,
)


class CompletionClient:
    def __init__(self, openai_config: Dict[str, Any], client: Optional[Any] = None):
        """
        Chat-completion client with a bounded retry on transport failures.

        Args:
            openai_config (dict): ``Config.get_openai_config()``; the
                credential is read once here and never re-read.
            client: an ``AsyncOpenAI``-shaped object. Built lazily from the
                configuration when omitted.
        """
        self.api_key = openai_config.get('api_key')
        self.base_url = openai_config.get('base_url')
        self.model = openai_config.get('model', 'gpt-3.5-turbo')
        self.temperature = openai_config.get('temperature', 0.7)
        self.top_p = openai_config.get('top_p', 1.0)
        self.stop = openai_config.get('stop')
        self.timeout = openai_config.get('timeout', 60.0)
        self.retry_times = max(1, int(openai_config.get('retry_times', 3)))
        self.retry_delay = openai_config.get('retry_delay', 0.0)
        self._client = client

    def _get_client(self):
        """Create the SDK client on first use so a missing key fails the call, not startup"""
        if self._client is None:
            if not self.api_key:
                raise AuthError("No API key configured for the completion endpoint")
            # Retries are governed here, not by the SDK
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                timeout=self.timeout,
                max_retries=0
            )
        return self._client

    def build_request(
        self,
        prompt: List[ChatMessage],
        max_output_tokens: int
    ) -> CompletionRequest:
        """Fill model and sampling settings from configuration"""
        return CompletionRequest(
            prompt=tuple(prompt),
            max_output_tokens=max_output_tokens,
            model=self.model,
            temperature=self.temperature,
            top_p=self.top_p,
            stop=self.stop
        )

    async def complete(self, request: CompletionRequest) -> CompletionResult:
        """
        Send the request, retrying only on TransportError.

        At most ``retry_times`` attempts are made, each with the identical
        request. AuthError and MalformedResponseError fail the first attempt.
        """
        last_error = None
        for attempt in range(1, self.retry_times + 1):
            try:
                return await self._send(request)
            except TransportError as e:
                last_error = e
                if attempt < self.retry_times and self.retry_delay:
                    await asyncio.sleep(self.retry_delay)
        raise last_error

    async def ask(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: int = 256
    ) -> Optional[str]:
        """One system + one user message; None when the call fails"""
        request = self.build_request(
            [ChatMessage.system(system_prompt), ChatMessage.user(user_prompt)],
            max_output_tokens
        )
        try:
            result = await self.complete(request)
        except CompletionError:
            return None
        return result.text

    async def close(self) -> None:
        if self._client is not None and hasattr(self._client, 'close'):
            await self._client.close()

    async def _send(self, request: CompletionRequest) -> CompletionResult:
        client = self._get_client()

        params = {
            'model': request.model,
            'messages': request.messages(),
            'temperature': request.temperature,
            'top_p': request.top_p,
            'n': request.sampling_count,
            'stream': False,
            'max_tokens': request.max_output_tokens,
            'presence_penalty': 0,
            'frequency_penalty': 0
        }
        if request.stop is not None:
            params['stop'] = request.stop

        try:
            response = await client.chat.completions.create(**params)
        except openai.APIConnectionError as e:
            # Covers APITimeoutError
            raise TransportError("Could not reach the completion endpoint", e) from e
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise AuthError("Completion endpoint rejected the credential", e) from e
        except (openai.RateLimitError, openai.InternalServerError) as e:
            raise TransportError(f"Completion endpoint returned HTTP {e.status_code}", e) from e
        except openai.APIResponseValidationError as e:
            raise MalformedResponseError("Completion response failed validation", e) from e
        except openai.APIStatusError as e:
            raise CompletionError(f"Completion endpoint returned HTTP {e.status_code}", e) from e

        return self._parse_response(response)

    @staticmethod
    def _parse_response(response: Any) -> CompletionResult:
        """Read the first candidate and the usage block"""
        try:
            choices = getattr(response, 'choices', None)
            if not choices:
                raise MalformedResponseError("Completion response contains no choices")

            choice = choices[0]
            content = choice.message.content
            if content is None:
                raise MalformedResponseError("First choice carries no message content")

            usage = getattr(response, 'usage', None)
            token_usage = TokenUsage(
                prompt_tokens=int(usage.prompt_tokens or 0),
                completion_tokens=int(usage.completion_tokens or 0)
            ) if usage is not None else TokenUsage()

            return CompletionResult(
                text=content,
                finish_reason=CompletionResult.normalize_finish_reason(choice.finish_reason),
                usage=token_usage
            )
        except MalformedResponseError:
            raise
        except (AttributeError, TypeError, ValueError) as e:
            raise MalformedResponseError("Completion response has an unexpected shape", e) from e
