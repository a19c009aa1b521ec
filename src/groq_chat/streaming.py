"""Incremental decoding of streamed chat completions."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from types import TracebackType

import httpx

from groq_chat.decoding import decode_response
from groq_chat.types import ChatResponse

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


def frame_payload(line: str) -> str | None:
    """Return the payload carried by one stream line, or None for a blank line.

    Lines may be bare JSON or prefixed with ``data:``.
    """
    text = line.strip()
    if text.startswith(DATA_PREFIX):
        text = text[len(DATA_PREFIX) :].strip()
    return text or None


class ChatStream:
    """Forward-only async iterator over the chunks of a streamed completion.

    Each pull reads lines until one carries a payload. The ``[DONE]``
    sentinel ends iteration without decoding. A line that fails to decode
    raises `ResponseDecodeError` from that pull only; the stream stays open
    and the next pull continues with the following line.

    The underlying connection is released when iteration ends, on the
    sentinel, or on `aclose()`. Use ``async with`` when the stream may be
    abandoned before it is drained.
    """

    def __init__(
        self,
        lines: AsyncIterator[str],
        close: Callable[[], Awaitable[None]] | None = None,
    ) -> None:
        self._lines = lines
        self._close = close
        self._closed = False

    @classmethod
    def from_response(cls, response: httpx.Response, client: httpx.AsyncClient) -> ChatStream:
        """Wrap an open streaming response; closing the stream closes both."""

        async def _close() -> None:
            try:
                await response.aclose()
            finally:
                await client.aclose()

        return cls(response.aiter_lines(), _close)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> ChatStream:
        return self

    async def __anext__(self) -> ChatResponse:
        if self._closed:
            raise StopAsyncIteration
        while True:
            try:
                line = await anext(self._lines)
            except StopAsyncIteration:
                logger.debug("Stream closed by transport before sentinel")
                await self.aclose()
                raise
            payload = frame_payload(line)
            if payload is None:
                continue
            if payload == DONE_SENTINEL:
                logger.debug("Stream sentinel received")
                await self.aclose()
                raise StopAsyncIteration
            return decode_response(payload)

    async def aclose(self) -> None:
        """Release the underlying transport. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            aclose_lines = getattr(self._lines, "aclose", None)
            if aclose_lines is not None:
                await aclose_lines()
        finally:
            if self._close is not None:
                await self._close()

    async def collect(self) -> list[ChatResponse]:
        """Drain the stream into a list."""
        async with self:
            return [chunk async for chunk in self]

    async def __aenter__(self) -> ChatStream:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
