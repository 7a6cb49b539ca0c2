"""
JSON-RPC protocol pieces owned by the bridge.

The bridge forwards envelopes without interpreting them, so this package
only covers locally synthesized errors and the bridge lifecycle.
"""

from mcp_bridge.protocol.errors import (
    JSONRPCError,
    PARSE_ERROR,
    INTERNAL_ERROR,
    ERROR_MESSAGES,
)
from mcp_bridge.protocol.state import (
    LifecycleState,
    LifecycleStateMachine,
    InvalidStateTransition,
)

__all__ = [
    "JSONRPCError",
    "PARSE_ERROR",
    "INTERNAL_ERROR",
    "ERROR_MESSAGES",
    "LifecycleState",
    "LifecycleStateMachine",
    "InvalidStateTransition",
]
