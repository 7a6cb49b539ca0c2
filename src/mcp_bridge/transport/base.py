"""Abstract base transport and error types."""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from mcp_bridge.transport.types import BridgeConfig, BridgeEvent

logger = logging.getLogger(__name__)


class BridgeError(Exception):
    """Base exception for bridge errors."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.cause = cause


class AlreadyRunningError(BridgeError):
    """start() was called while the bridge is running."""

    def __init__(self) -> None:
        super().__init__("Bridge is already running")


class ServerUnreachableError(BridgeError):
    """The MCP server failed its health check."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"MCP server not reachable at {url}: {cause}", cause=cause)
        self.url = url


class TransportError(BridgeError):
    """Forwarding a message over HTTP failed."""

    pass


class TimeoutError(TransportError):
    """Request exceeded the configured timeout."""

    def __init__(self, timeout_ms: int, cause: Exception | None = None):
        super().__init__(f"Request timeout after {timeout_ms}ms", cause=cause)
        self.timeout_ms = timeout_ms


class NoStreamDataError(TransportError):
    """An SSE response carried no decodable data event."""

    def __init__(self) -> None:
        super().__init__("No valid data in streaming response")


class Transport(ABC):
    """
    Abstract base class for the HTTP side of the bridge.

    A transport turns one JSON-RPC envelope into one JSON-RPC envelope.
    It never writes to the bridge's output stream.
    """

    def __init__(self, config: BridgeConfig):
        self.config = config
        self._event_handlers: list[Callable[[BridgeEvent], None]] = []

    def on_event(self, handler: Callable[[BridgeEvent], None]) -> None:
        """
        Register an event handler for transport events.

        Args:
            handler: Callback invoked when transport events occur.
        """
        self._event_handlers.append(handler)

    def _emit_event(self, event: BridgeEvent) -> None:
        """Emit an event to all registered handlers."""
        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Event handler failed for {event.type.name}")

    @abstractmethod
    async def forward(self, message: dict) -> dict:
        """
        Send a JSON-RPC message to the server and return its reply.

        Raises:
            TimeoutError: If the configured timeout elapses.
            NoStreamDataError: If an SSE reply holds no usable data.
            TransportError: For any other HTTP failure.
        """
        pass

    @abstractmethod
    async def check_health(self) -> bool:
        """
        Probe the server's health endpoint.

        Raises:
            ServerUnreachableError: If the server is not healthy.
        """
        pass

    @abstractmethod
    async def aclose(self) -> None:
        """
        Release network resources.

        This method should be safe to call multiple times.
        """
        pass

    @property
    @abstractmethod
    def session_id(self) -> str | None:
        """Current MCP session ID, or None if not yet assigned."""
        pass

    async def __aenter__(self) -> "Transport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
