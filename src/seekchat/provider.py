from collections.abc import AsyncIterator
import logging
import os

import httpx
from openai import APIError, APIStatusError, AsyncOpenAI
from pydantic import ValidationError

from seekchat.errors import DecodeError, TransportError
from seekchat.request import ChatCompletionRequest
from seekchat.response import UserBalance

logger = logging.getLogger(__name__)

BASE_URL = "https://api.deepseek.com"

# Request fields the OpenAI SDK does not know about; sent via extra_body.
_EXTRA_BODY_FIELDS = ("thinking",)


class ModelProvider:
    """Transport seam between the runner and the service.

    Providers move bytes only: decoding and validation of chat responses
    happen in the runner.
    """

    async def complete(self, request: ChatCompletionRequest) -> str:
        """Send a ``stream=false`` request and return the raw JSON body."""
        raise NotImplementedError

    def stream(self, request: ChatCompletionRequest) -> AsyncIterator[bytes]:
        """Send a ``stream=true`` request and yield raw body chunks.

        Must be an async generator: the runner closes it with
        ``aclose()`` to abort the request when the consumer stops early.
        """
        raise NotImplementedError

    async def user_balance(self) -> UserBalance:
        raise NotImplementedError


def _transport_error(e: Exception) -> TransportError:
    status_code = e.status_code if isinstance(e, APIStatusError) else None
    logger.error(f"Request to DeepSeek failed: {e}")
    return TransportError(f"Request to DeepSeek failed: {e}", status_code=status_code)


class DeepSeekProvider(ModelProvider):
    """DeepSeek API over the OpenAI SDK's HTTP client.

    Args:
        api_key: Defaults to ``DEEPSEEK_API_KEY``.
        base_url: Defaults to ``DEEPSEEK_BASE_URL``, then the public endpoint.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float = 600.0,
    ):
        if not api_key:
            api_key = os.getenv("DEEPSEEK_API_KEY")
        if not base_url:
            base_url = os.getenv("DEEPSEEK_BASE_URL", BASE_URL)
        self.client = AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            max_retries=0,
            timeout=timeout,
        )

    @staticmethod
    def _create_kwargs(request: ChatCompletionRequest) -> dict:
        body = request.to_wire()
        extra_body = {k: body.pop(k) for k in _EXTRA_BODY_FIELDS if k in body}
        if extra_body:
            body["extra_body"] = extra_body
        return body

    async def complete(self, request: ChatCompletionRequest) -> str:
        kwargs = self._create_kwargs(request)
        logger.debug(f"POST /chat/completions with {len(request.messages)} messages")
        try:
            async with self.client.chat.completions.with_streaming_response.create(
                **kwargs
            ) as response:
                return await response.text()
        except (APIError, httpx.HTTPError) as e:
            raise _transport_error(e) from e

    async def stream(self, request: ChatCompletionRequest) -> AsyncIterator[bytes]:
        kwargs = self._create_kwargs(request)
        logger.debug(
            f"POST /chat/completions (stream) with {len(request.messages)} messages"
        )
        try:
            async with self.client.chat.completions.with_streaming_response.create(
                **kwargs
            ) as response:
                async for chunk in response.iter_bytes():
                    yield chunk
        except (APIError, httpx.HTTPError) as e:
            raise _transport_error(e) from e

    async def user_balance(self) -> UserBalance:
        try:
            response = await self.client.get("/user/balance", cast_to=httpx.Response)
        except (APIError, httpx.HTTPError) as e:
            raise _transport_error(e) from e
        try:
            return UserBalance.model_validate_json(response.text)
        except ValidationError as e:
            raise DecodeError(f"Invalid balance response: {e}", payload=response.text) from e
