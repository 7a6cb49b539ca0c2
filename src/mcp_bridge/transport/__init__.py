"""
HTTP transport layer.

Forwards JSON-RPC envelopes to a Streamable HTTP MCP server.
"""

from mcp_bridge.transport.types import (
    BridgeConfig,
    BridgeEvent,
    BridgeEventType,
    SessionState,
)
from mcp_bridge.transport.base import (
    Transport,
    BridgeError,
    AlreadyRunningError,
    ServerUnreachableError,
    TransportError,
    TimeoutError,
    NoStreamDataError,
)
from mcp_bridge.transport.http import StreamableHTTPTransport, decode_sse_body

__all__ = [
    "Transport",
    "BridgeConfig",
    "BridgeEvent",
    "BridgeEventType",
    "SessionState",
    "BridgeError",
    "AlreadyRunningError",
    "ServerUnreachableError",
    "TransportError",
    "TimeoutError",
    "NoStreamDataError",
    "StreamableHTTPTransport",
    "decode_sse_body",
]
