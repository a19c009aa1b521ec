"""Stateful chat builder and the buffered and streaming sends."""

from __future__ import annotations

import logging
import math
from collections.abc import Awaitable
from typing import Any

import httpx
from pydantic import ValidationError

from groq_chat.decoding import decode_response
from groq_chat.errors import InvalidParameterError
from groq_chat.streaming import ChatStream
from groq_chat.transport import ChatTransport
from groq_chat.types import (
    ChatRequest,
    ChatResponse,
    Message,
    ResponseFormat,
    ServiceTier,
    Tool,
    ToolChoice,
)

DEFAULT_API_URL = "https://api.groq.com/openai/v1/chat/completions"

logger = logging.getLogger(__name__)


def _check_range(name: str, value: float, low: float, high: float) -> float:
    valid = isinstance(value, (int, float)) and not isinstance(value, bool)
    if not (valid and math.isfinite(value) and low <= value <= high):
        raise InvalidParameterError(name, f"{name} must be between {low} and {high}, got {value!r}")
    return float(value)


class Chat:
    """Owns one conversation and its request configuration.

    Mutators only touch in-memory state. `send()` and `stream()` snapshot
    the configuration when called, so later changes do not leak into a
    request already in flight. Instances are not safe for concurrent
    mutation; use `copy()` to fan out parallel requests.
    """

    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        api_url: str = DEFAULT_API_URL,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._api_url = api_url
        self._timeout_s = timeout_s
        self._poster = ChatTransport(api_key, timeout_s=timeout_s, transport=transport)
        self._transport = transport
        self._request = ChatRequest(model=model)

    def copy(self) -> Chat:
        """Return an independent builder with the same configuration."""
        clone = Chat(
            self._api_key,
            self._request.model,
            api_url=self._api_url,
            timeout_s=self._timeout_s,
            transport=self._transport,
        )
        clone._request = self._request.model_copy(deep=True)
        return clone

    @property
    def request(self) -> ChatRequest:
        """Deep copy of the current request configuration."""
        return self._request.model_copy(deep=True)

    def _assign(self, name: str, value: Any) -> None:
        try:
            setattr(self._request, name, value)
        except ValidationError as exc:
            raise InvalidParameterError(name, f"invalid {name}: {value!r}") from exc

    # conversation

    def add_message(self, message: Message) -> None:
        self._request.messages.append(message)

    def set_messages(self, messages: list[Message]) -> None:
        self._assign("messages", list(messages))

    def get_messages(self) -> list[Message]:
        return [m.model_copy(deep=True) for m in self._request.messages]

    def clear_messages(self) -> None:
        self._request.messages.clear()

    def remove_first_message(self) -> None:
        self.remove_first_messages(1)

    def remove_last_message(self) -> None:
        self.remove_last_messages(1)

    def remove_first_messages(self, n: int) -> None:
        """Drop the `n` oldest messages; removes everything if `n` exceeds the count."""
        if n < 0:
            raise InvalidParameterError("n", f"cannot remove a negative number of messages: {n}")
        del self._request.messages[:n]

    def remove_last_messages(self, n: int) -> None:
        """Drop the `n` newest messages; removes everything if `n` exceeds the count."""
        if n < 0:
            raise InvalidParameterError("n", f"cannot remove a negative number of messages: {n}")
        if n:
            del self._request.messages[-n:]

    def message_count(self) -> int:
        return len(self._request.messages)

    # generation parameters

    def set_temperature(self, temperature: float) -> None:
        self._request.temperature = _check_range("temperature", temperature, 0.0, 2.0)

    def get_temperature(self) -> float:
        return self._request.temperature

    def set_top_p(self, top_p: float) -> None:
        self._request.top_p = _check_range("top_p", top_p, 0.0, 1.0)

    def get_top_p(self) -> float:
        return self._request.top_p

    def set_frequency_penalty(self, frequency_penalty: float) -> None:
        self._request.frequency_penalty = _check_range("frequency_penalty", frequency_penalty, -2.0, 2.0)

    def get_frequency_penalty(self) -> float:
        return self._request.frequency_penalty

    def set_presence_penalty(self, presence_penalty: float) -> None:
        self._request.presence_penalty = _check_range("presence_penalty", presence_penalty, -2.0, 2.0)

    def get_presence_penalty(self) -> float:
        return self._request.presence_penalty

    def set_max_completion_tokens(self, max_completion_tokens: int | None) -> None:
        self._assign("max_completion_tokens", max_completion_tokens)

    def set_seed(self, seed: int | None) -> None:
        self._assign("seed", seed)

    def set_parallel_tool_calls(self, parallel_tool_calls: bool) -> None:
        self._assign("parallel_tool_calls", parallel_tool_calls)

    def set_reasoning_format(self, reasoning_format: str | None) -> None:
        self._assign("reasoning_format", reasoning_format)

    def set_response_format(self, response_format: ResponseFormat | None) -> None:
        self._assign("response_format", response_format)

    def set_service_tier(self, service_tier: ServiceTier | None) -> None:
        self._assign("service_tier", service_tier)

    # tools

    def set_tool_choice(self, tool_choice: ToolChoice | None) -> None:
        self._assign("tool_choice", tool_choice)

    def add_tool(self, tool: Tool) -> None:
        # duplicate names are passed through to the service unchanged
        self._request.tools.append(tool)

    def clear_tools(self) -> None:
        self._request.tools.clear()

    def get_tools(self) -> list[Tool]:
        return [t.model_copy(deep=True) for t in self._request.tools]

    # target

    def set_model(self, model: str) -> None:
        self._assign("model", model)

    def get_model(self) -> str:
        return self._request.model

    def set_api_url(self, api_url: str) -> None:
        self._api_url = api_url

    def get_api_url(self) -> str:
        return self._api_url

    # sends

    def send(self) -> Awaitable[ChatResponse]:
        """Send the conversation and return the complete response."""
        payload = self._build_payload(stream=False)
        return self._send(self._api_url, payload)

    def stream(self) -> Awaitable[ChatStream]:
        """Send the conversation and return a stream of response chunks.

        Failed statuses raise when awaited, before any chunk is produced.
        """
        payload = self._build_payload(stream=True)
        return self._open_stream(self._api_url, payload)

    def _build_payload(self, *, stream: bool) -> dict[str, Any]:
        return self._request.model_copy(update={"stream": stream}).to_payload()

    async def _send(self, url: str, payload: dict[str, Any]) -> ChatResponse:
        logger.debug("Sending chat request to %s with %d messages", url, len(payload["messages"]))
        async with self._poster.open_client() as client:
            response = await self._poster.post(client, url, payload, stream=False)
            return decode_response(response.text)

    async def _open_stream(self, url: str, payload: dict[str, Any]) -> ChatStream:
        logger.debug("Opening chat stream to %s with %d messages", url, len(payload["messages"]))
        client = self._poster.open_client()
        try:
            response = await self._poster.post(client, url, payload, stream=True)
        except BaseException:
            await client.aclose()
            raise
        return ChatStream.from_response(response, client)
