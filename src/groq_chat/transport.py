"""HTTP transport shared by buffered and streaming sends."""

from __future__ import annotations

import logging
import os
from typing import Any

import httpx

from groq_chat.decoding import decode_error

PROXY_ENV_VAR = "HTTPS_PROXY"


class ChatTransport:
    """Issues authenticated chat-completion POSTs.

    A fresh `httpx.AsyncClient` is opened for every send so the proxy
    setting is looked up per request and the client's lifetime can be tied
    to a stream.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        api_key: str,
        *,
        timeout_s: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        self._timeout_s = timeout_s
        self._transport = transport

    def open_client(self) -> httpx.AsyncClient:
        """Return a new client, routed through `HTTPS_PROXY` when it is set."""
        if self._transport is not None:
            return httpx.AsyncClient(transport=self._transport, timeout=self._timeout_s, trust_env=False)

        proxy = os.environ.get(PROXY_ENV_VAR) or None
        if proxy:
            self._logger.debug("Routing chat request through proxy %s", proxy)
        return httpx.AsyncClient(proxy=proxy, timeout=self._timeout_s, trust_env=False)

    async def post(
        self,
        client: httpx.AsyncClient,
        url: str,
        payload: dict[str, Any],
        *,
        stream: bool,
    ) -> httpx.Response:
        """POST `payload` and return the response, raising for failed statuses.

        With `stream=True` the body is left unread for the caller to consume.
        """
        request = client.build_request("POST", url, headers=self._headers, json=payload)
        response = await client.send(request, stream=stream)
        if response.status_code >= 400:
            try:
                body = (await response.aread()).decode(errors="replace")
            finally:
                await response.aclose()
            self._logger.warning("Chat request failed with status %s: %s", response.status_code, body)
            raise decode_error(response.status_code, body)
        return response
