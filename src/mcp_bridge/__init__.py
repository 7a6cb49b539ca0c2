"""
Stdio to Streamable HTTP bridge for MCP.

Lets MCP clients that only speak line-delimited JSON-RPC over stdio talk
to MCP servers that only speak HTTP.

Submodules:
- bridge: lifecycle and per-line message pipeline
- transport: HTTP forwarding, session propagation and SSE decoding
- protocol: JSON-RPC error responses and lifecycle states
- config: configuration loading from arguments and environment
- cli: the ``mcp-bridge`` command
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("mcp-stdio-http-bridge")
except PackageNotFoundError:
    __version__ = "0.0.0"

from mcp_bridge.bridge import MCPBridge
from mcp_bridge.config import load_bridge_config
from mcp_bridge.protocol import JSONRPCError, LifecycleState
from mcp_bridge.transport import (
    BridgeConfig,
    BridgeEvent,
    BridgeEventType,
    SessionState,
    StreamableHTTPTransport,
    BridgeError,
    AlreadyRunningError,
    ServerUnreachableError,
    TransportError,
    TimeoutError,
    NoStreamDataError,
)

__all__ = [
    "__version__",
    "MCPBridge",
    "load_bridge_config",
    "JSONRPCError",
    "LifecycleState",
    "BridgeConfig",
    "BridgeEvent",
    "BridgeEventType",
    "SessionState",
    "StreamableHTTPTransport",
    "BridgeError",
    "AlreadyRunningError",
    "ServerUnreachableError",
    "TransportError",
    "TimeoutError",
    "NoStreamDataError",
]
