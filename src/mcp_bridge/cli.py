"""Command-line entry point for the MCP stdio bridge."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from contextlib import suppress

import httpx

from mcp_bridge import __version__
from mcp_bridge.bridge import LineReader, LineWriter, MCPBridge
from mcp_bridge.config import load_bridge_config
from mcp_bridge.log import LOG_LEVELS, configure_logging
from mcp_bridge.transport import BridgeConfig, BridgeError, BridgeEvent, BridgeEventType

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-bridge",
        description="Bridge between stdio-based MCP clients and HTTP-based MCP servers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
  MCP_HTTP_URL   default for --url
  LOG_LEVEL      default for --log-level

Examples:
  %(prog)s --url http://localhost:3200/mcp
  %(prog)s --url http://127.0.0.1:9000/mcp --timeout 60000 --no-health-check
""",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-u", "--url", help="MCP server URL")
    parser.add_argument(
        "-t",
        "--timeout",
        type=int,
        default=30000,
        metavar="MS",
        help="Request timeout in milliseconds (default: 30000)",
    )
    parser.add_argument(
        "-l",
        "--log-level",
        choices=LOG_LEVELS,
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--no-health-check",
        dest="health_check",
        action="store_false",
        help="Skip health check on startup",
    )
    return parser


def _log_event(event: BridgeEvent) -> None:
    if event.type == BridgeEventType.STARTED:
        logger.debug("Bridge started event received")
    elif event.type == BridgeEventType.SESSION_ESTABLISHED:
        logger.info(f"Session established: {event.data['session_id']}")
    elif event.type == BridgeEventType.ERROR:
        logger.error(f"Bridge error event: {event.error}")


def _shutdown(bridge: MCPBridge, sig: signal.Signals) -> None:
    logger.info(f"Shutdown signal received: {sig.name}")
    bridge.stop()


async def run_bridge(
    config: BridgeConfig,
    input_stream: LineReader | None = None,
    output_stream: LineWriter | None = None,
    client: httpx.AsyncClient | None = None,
) -> int:
    """
    Run a bridge until its input closes or a shutdown signal arrives.

    Returns:
        Process exit code: 0 on clean shutdown, 1 if startup failed.
    """
    bridge = MCPBridge(config, client=client)
    bridge.on_event(_log_event)

    loop = asyncio.get_running_loop()
    signals = (signal.SIGINT, signal.SIGTERM)
    for sig in signals:
        # Not available on Windows event loops
        with suppress(NotImplementedError):
            loop.add_signal_handler(sig, _shutdown, bridge, sig)

    try:
        try:
            await bridge.start(input_stream, output_stream)
        except BridgeError as e:
            logger.critical(f"Failed to start bridge: {e}")
            return 1

        await bridge.wait_closed()
        return 0
    finally:
        for sig in signals:
            with suppress(NotImplementedError):
                loop.remove_signal_handler(sig)
        await bridge.aclose()


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_bridge_config(
            url=args.url,
            timeout=args.timeout / 1000,
            log_level=args.log_level,
            skip_health_check=not args.health_check,
        )
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.log_level)
    return asyncio.run(run_bridge(config))


if __name__ == "__main__":
    sys.exit(main())
