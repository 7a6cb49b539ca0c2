"""Streamable HTTP side of the bridge."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from mcp_bridge.lib import oj
from mcp_bridge.log import trace
from mcp_bridge.transport.base import (
    Transport,
    TransportError,
    TimeoutError,
    NoStreamDataError,
    ServerUnreachableError,
)
from mcp_bridge.transport.types import (
    BridgeConfig,
    BridgeEvent,
    BridgeEventType,
    SessionState,
)

logger = logging.getLogger(__name__)

SSE_DATA_PREFIX = "data: "


def decode_sse_body(text: str) -> Any:
    """
    Pull one JSON-RPC message out of a complete SSE body.

    Lines are scanned top to bottom and the first ``data: `` payload that
    parses as JSON is returned. Later events are ignored, malformed ones
    are skipped.

    Raises:
        NoStreamDataError: If no data line holds valid JSON.
    """
    for line in text.split("\n"):
        if not line.startswith(SSE_DATA_PREFIX):
            continue

        data = line[len(SSE_DATA_PREFIX):].strip()
        if not data:
            continue

        try:
            parsed = oj.loads(data)
        except oj.JSONDecodeError as e:
            logger.warning(f"Failed to parse SSE data {data!r}: {e}")
            continue

        trace(logger, f"Parsed SSE data: {data}")
        return parsed

    logger.error("Streaming response parsing failed: no valid data event")
    raise NoStreamDataError()


class StreamableHTTPTransport(Transport):
    """
    Forwards JSON-RPC envelopes to an MCP server over HTTP POST.

    This transport supports:
    - Plain JSON replies and single-message SSE replies
    - Session propagation via the Mcp-Session-Id header
    - A per-request timeout that cancels only that request
    - A health probe used to gate bridge startup

    The session is stored in a SessionState owned by the caller, so the
    bridge controller keeps the token while this class reads and updates it.
    """

    MCP_SESSION_HEADER = "Mcp-Session-Id"

    def __init__(
        self,
        config: BridgeConfig,
        session: SessionState | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(config)
        self._session = session if session is not None else SessionState()
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        """Return the HTTP client, creating it on first use."""
        if self._client is None:
            # Disable HTTP/2 as some MCP servers have compatibility issues
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.config.timeout),
                http2=False,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    @property
    def session_id(self) -> str | None:
        """Current MCP session ID."""
        return self._session.session_id

    async def check_health(self) -> bool:
        """Probe the health endpoint with a fixed deadline."""
        health_url = self.config.health_url
        logger.debug(f"Checking server health at {health_url}")

        try:
            response = await asyncio.wait_for(
                self._get_client().get(health_url),
                timeout=self.config.health_check_timeout,
            )
        except asyncio.TimeoutError as e:
            timeout_ms = round(self.config.health_check_timeout * 1000)
            raise self._unreachable(TimeoutError(timeout_ms, cause=e)) from e
        except Exception as e:
            raise self._unreachable(e) from e

        if not response.is_success:
            raise self._unreachable(
                TransportError(f"Server returned {response.status_code}")
            )

        logger.debug("Server health check passed")
        return True

    def _unreachable(self, cause: Exception) -> ServerUnreachableError:
        logger.error(f"Health check failed: {cause}")
        return ServerUnreachableError(self.config.url, cause)

    async def forward(self, message: dict) -> dict:
        """
        POST a JSON-RPC envelope and decode the reply.

        Returns:
            The decoded JSON-RPC response.
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json, text/event-stream",
        }

        if self._session.session_id:
            headers[self.MCP_SESSION_HEADER] = self._session.session_id

        body = oj.dumps(message)
        trace(logger, f"Sending HTTP request to {self.config.url}: {body}")

        try:
            response = await asyncio.wait_for(
                self._get_client().post(
                    self.config.url,
                    content=body,
                    headers=headers,
                ),
                timeout=self.config.timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            logger.error(f"Request timeout after {self.config.timeout_ms}ms")
            raise TimeoutError(self.config.timeout_ms, cause=e) from e
        except httpx.HTTPError as e:
            raise TransportError(f"HTTP error: {e}", cause=e) from e

        self._capture_session(response)

        content_type = response.headers.get("Content-Type", "")

        if "text/event-stream" in content_type:
            logger.debug("Handling streaming response")
            return decode_sse_body(response.text)

        try:
            result = oj.loads(response.content)
        except oj.JSONDecodeError as e:
            if response.status_code >= 400:
                raise TransportError(
                    f"HTTP {response.status_code}: {response.text}", cause=e
                ) from e
            raise TransportError(f"Failed to parse response: {e}", cause=e) from e

        trace(logger, f"Received JSON response: {response.text}")
        return result

    def _capture_session(self, response: httpx.Response) -> None:
        """Store the response's session header if it changed."""
        new_session = response.headers.get(self.MCP_SESSION_HEADER)
        if self._session.update(new_session):
            logger.info(f"Session ID captured: {new_session}")
            self._emit_event(
                BridgeEvent(
                    type=BridgeEventType.SESSION_ESTABLISHED,
                    timestamp=time.time(),
                    data={"session_id": new_session},
                )
            )
