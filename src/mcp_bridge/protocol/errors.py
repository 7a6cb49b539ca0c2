"""JSON-RPC error codes and locally synthesized error responses."""

from dataclasses import dataclass
from typing import Any

# JSON-RPC 2.0 error codes the bridge synthesizes
PARSE_ERROR = -32700
INTERNAL_ERROR = -32603

ERROR_MESSAGES = {
    PARSE_ERROR: "Parse error",
    INTERNAL_ERROR: "Internal error",
}


@dataclass
class JSONRPCError:
    """
    JSON-RPC 2.0 error produced by the bridge itself.

    The bridge only ever answers with two kinds of error: a parse error
    for input it could not decode, and an internal error wrapping whatever
    went wrong while forwarding to the HTTP server.
    """

    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to JSON-RPC error object."""
        error: dict[str, Any] = {
            "code": self.code,
            "message": self.message,
        }
        if self.data is not None:
            error["data"] = self.data
        return error

    def to_response(self, request_id: Any = None) -> dict[str, Any]:
        """
        Wrap in a full JSON-RPC response envelope.

        A missing or null request id is echoed back as null.
        """
        return {
            "jsonrpc": "2.0",
            "error": self.to_dict(),
            "id": request_id,
        }

    @classmethod
    def parse_error(cls) -> "JSONRPCError":
        """Create a parse error for an undecodable input line."""
        return cls(code=PARSE_ERROR, message=ERROR_MESSAGES[PARSE_ERROR])

    @classmethod
    def bridge_error(cls, cause: Exception | str) -> "JSONRPCError":
        """Create an internal error describing a forwarding failure."""
        return cls(code=INTERNAL_ERROR, message=f"Bridge error: {cause}")

    def __str__(self) -> str:
        return f"JSONRPCError({self.code}): {self.message}"
