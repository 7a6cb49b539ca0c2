"""Bridge configuration, session and event types."""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, ClassVar
from urllib.parse import urlparse

from mcp_bridge.log import LOG_LEVELS

DEFAULT_URL = "http://localhost:3200/mcp"
DEFAULT_TIMEOUT = 30.0


class BridgeEventType(Enum):
    """Types of bridge events for observers."""

    STARTED = auto()
    STOPPED = auto()
    SESSION_ESTABLISHED = auto()
    ERROR = auto()


@dataclass
class BridgeEvent:
    """Event emitted by the bridge and its transport."""

    type: BridgeEventType
    timestamp: float
    data: dict[str, Any] | None = None
    error: Exception | None = None

    def __str__(self) -> str:
        base = f"[{self.type.name}]"
        if self.data:
            base += f" {self.data}"
        if self.error:
            base += f" error={self.error}"
        return base


@dataclass(frozen=True)
class BridgeConfig:
    """Immutable configuration for one bridge instance."""

    url: str = DEFAULT_URL
    """MCP server message endpoint."""

    timeout: float = DEFAULT_TIMEOUT
    """Per-request timeout in seconds."""

    log_level: str = "info"
    """One of trace/debug/info/warn/error/fatal."""

    skip_health_check: bool = False
    """Start without probing the server's health endpoint."""

    HEALTH_CHECK_TIMEOUT: ClassVar[float] = 5.0

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.url:
            raise ValueError("url is required")
        if urlparse(self.url).scheme not in ("http", "https"):
            raise ValueError("url must use http:// or https://")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}"
            )

    @property
    def health_check_timeout(self) -> float:
        return self.HEALTH_CHECK_TIMEOUT

    @property
    def timeout_ms(self) -> int:
        """Request timeout in whole milliseconds, as shown to users."""
        return round(self.timeout * 1000)

    @property
    def health_url(self) -> str:
        """
        Health endpoint on the same server.

        The last segment of the message endpoint path is swapped for
        ``health``, so ``http://host:3200/mcp`` probes
        ``http://host:3200/health``.
        """
        parsed = urlparse(self.url)
        base = parsed.path.rstrip("/").rsplit("/", 1)[0]
        return parsed._replace(
            path=f"{base}/health", params="", query="", fragment=""
        ).geturl()


@dataclass
class SessionState:
    """MCP session token assigned by the server, if any."""

    session_id: str | None = None

    def update(self, session_id: str | None) -> bool:
        """
        Store a session id taken from a response header.

        Last write wins. Returns True if the stored value changed.
        """
        if not session_id or session_id == self.session_id:
            return False
        self.session_id = session_id
        return True
