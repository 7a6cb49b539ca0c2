"""Bridge configuration loading."""

import os

from mcp_bridge.transport.types import DEFAULT_TIMEOUT, DEFAULT_URL, BridgeConfig

# Environment variables consulted when no explicit value is given
URL_ENV_VAR = "MCP_HTTP_URL"
LOG_LEVEL_ENV_VAR = "LOG_LEVEL"


def load_bridge_config(
    url: str | None = None,
    timeout: float | None = None,
    log_level: str | None = None,
    skip_health_check: bool = False,
) -> BridgeConfig:
    """Build a validated config from explicit values, environment and defaults.

    Explicit arguments win over ``MCP_HTTP_URL`` / ``LOG_LEVEL``, which win
    over the built-in defaults.

    Args:
        url: MCP server message endpoint.
        timeout: Request timeout in seconds.
        log_level: One of trace/debug/info/warn/error/fatal.
        skip_health_check: Start without the health probe.

    Raises:
        ValueError: If the resulting config is invalid.
    """
    return BridgeConfig(
        url=url or os.environ.get(URL_ENV_VAR) or DEFAULT_URL,
        timeout=timeout if timeout is not None else DEFAULT_TIMEOUT,
        log_level=(log_level or os.environ.get(LOG_LEVEL_ENV_VAR) or "info").lower(),
        skip_health_check=skip_health_check,
    )
