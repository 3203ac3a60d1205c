"""Chat-completion clients for the hosted language model."""

import time
from typing import Callable, Optional, Protocol

import anthropic
import httpx

from symptomrelay.config import Settings
from symptomrelay.errors import ConfigurationError, MalformedUpstreamOutput, UpstreamFailure
from symptomrelay.logger import get_logger

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class CompletionClient(Protocol):
    """Anything that turns chat messages into completion text."""

    def complete(self, messages: list[dict[str, str]]) -> str: ...

    def close(self) -> None: ...


class _RetryableUpstreamFailure(UpstreamFailure):
    """Upstream failure worth one more attempt."""


class OpenAICompletionClient:
    """OpenAI-compatible ``/chat/completions`` client over httpx."""

    def __init__(self, settings: Settings, transport: Optional[httpx.BaseTransport] = None):
        self.api_key = settings.openai_api_key
        if not self.api_key:
            logger.error("OPENAI_API_KEY missing")
            raise ConfigurationError()

        self.model = settings.model
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        self.max_retries = settings.completion_max_retries
        self.retry_backoff = settings.completion_retry_backoff

        self.client = httpx.Client(
            base_url=settings.openai_base_url,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=settings.completion_timeout,
            transport=transport,
        )
        logger.info(f"OpenAICompletionClient initialized with model: {self.model}")

    def complete(self, messages: list[dict[str, str]]) -> str:
        """
        Send messages and return the assistant's text.

        Retries once (by default) on timeouts, transport errors, 429 and 5xx.

        Raises:
            UpstreamFailure: the API could not be reached or returned an error status
            MalformedUpstreamOutput: the response envelope carried no text
        """
        attempt = 0
        while True:
            try:
                return self._complete_once(messages)
            except _RetryableUpstreamFailure:
                if attempt >= self.max_retries:
                    raise
                attempt += 1
                delay = self.retry_backoff * attempt
                logger.warning(f"Retrying completion call in {delay:.1f}s (attempt {attempt + 1})")
                time.sleep(delay)

    def _complete_once(self, messages: list[dict[str, str]]) -> str:
        try:
            response = self.client.post(
                "/chat/completions",
                json={
                    "model": self.model,
                    "messages": messages,
                    "temperature": self.temperature,
                    "max_tokens": self.max_tokens,
                },
            )
        except httpx.TimeoutException as e:
            logger.error(f"Completion call timed out: {e}")
            raise _RetryableUpstreamFailure() from e
        except httpx.TransportError as e:
            logger.error(f"Completion call failed to connect: {e}")
            raise _RetryableUpstreamFailure() from e

        if not response.is_success:
            logger.error(f"Completion API returned status {response.status_code}")
            logger.debug(f"Completion API error body: {response.text[:500]}")
            if response.status_code in RETRYABLE_STATUS_CODES:
                raise _RetryableUpstreamFailure()
            raise UpstreamFailure()

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected completion envelope: {e}")
            raise MalformedUpstreamOutput() from e

        if not isinstance(content, str):
            logger.error("Completion envelope carried no text content")
            raise MalformedUpstreamOutput()

        logger.debug(f"Completion usage: {data.get('usage')}")
        return content

    def close(self):
        """Clean up HTTP client."""
        self.client.close()
        logger.debug("OpenAICompletionClient client closed")


class AnthropicCompletionClient:
    """Claude Messages API client."""

    def __init__(self, settings: Settings, client: Optional[anthropic.Anthropic] = None):
        if client is None:
            if not settings.anthropic_api_key:
                logger.error("ANTHROPIC_API_KEY missing")
                raise ConfigurationError()
            client = anthropic.Anthropic(
                api_key=settings.anthropic_api_key,
                timeout=settings.completion_timeout,
                max_retries=settings.completion_max_retries,
            )
        self.client = client
        self.model = settings.anthropic_model
        self.temperature = settings.temperature
        self.max_tokens = settings.max_tokens
        logger.info(f"AnthropicCompletionClient initialized with model: {self.model}")

    def complete(self, messages: list[dict[str, str]]) -> str:
        """Send messages and return the concatenated text blocks."""
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system")
        conversation = [m for m in messages if m["role"] != "system"]

        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                system=system,
                messages=conversation,
            )
        except anthropic.APIError as e:
            logger.error(f"Claude completion failed: {type(e).__name__}: {e}")
            raise UpstreamFailure() from e

        logger.debug(f"Claude response received, usage: {response.usage}")
        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            logger.error("Claude response carried no text blocks")
            raise MalformedUpstreamOutput()
        return text

    def close(self):
        """Clean up the SDK client."""
        self.client.close()
        logger.debug("AnthropicCompletionClient client closed")


def build_completion_client(settings: Settings) -> CompletionClient:
    """Create the completion client selected by ``completion_provider``."""
    if settings.completion_provider == "anthropic":
        return AnthropicCompletionClient(settings)
    return OpenAICompletionClient(settings)


class LazyCompletionClient:
    """Defer building the real client until a completion is actually needed.

    Requests rejected by validation or answered from the store never touch
    the provider configuration.
    """

    def __init__(self, factory: Callable[[], CompletionClient]):
        self._factory = factory
        self._client: Optional[CompletionClient] = None

    def complete(self, messages: list[dict[str, str]]) -> str:
        if self._client is None:
            self._client = self._factory()
        return self._client.complete(messages)

    def close(self):
        if self._client is not None:
            self._client.close()
