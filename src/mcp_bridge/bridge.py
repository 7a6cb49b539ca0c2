"""Stdio to Streamable HTTP bridge controller."""

from __future__ import annotations

import asyncio
import logging
import sys
import time
from typing import Any, Callable, Protocol

import httpx

from mcp_bridge.lib import oj
from mcp_bridge.log import trace
from mcp_bridge.protocol import JSONRPCError, LifecycleState, LifecycleStateMachine
from mcp_bridge.transport import (
    AlreadyRunningError,
    BridgeConfig,
    BridgeEvent,
    BridgeEventType,
    SessionState,
    StreamableHTTPTransport,
)

# Lines longer than asyncio's 64KiB default are common for tool results
STDIN_LIMIT = 16 * 1024 * 1024


class LineReader(Protocol):
    async def readline(self) -> bytes | str: ...


class LineWriter(Protocol):
    def write(self, data: str) -> Any: ...


EventHandler = Callable[[BridgeEvent], None]


async def open_stdin_reader(limit: int = STDIN_LIMIT) -> asyncio.StreamReader:
    """Return a non-blocking StreamReader attached to stdin."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader(limit=limit)
    protocol = asyncio.StreamReaderProtocol(reader)
    await loop.connect_read_pipe(lambda: protocol, sys.stdin.buffer)
    return reader


class MCPBridge:
    """
    Bridges a line-delimited JSON-RPC stream to a Streamable HTTP MCP server.

    Each non-blank input line is parsed, POSTed to the server and answered
    with exactly one output line: the server's reply, or a JSON-RPC error
    synthesized by the bridge. Lines are processed in independent tasks, so
    a slow request never holds up the ones read after it.

    Usage:
        bridge = MCPBridge(BridgeConfig(url="http://localhost:3200/mcp"))
        bridge.on_event(print)
        await bridge.start()
        await bridge.wait_closed()
    """

    def __init__(
        self,
        config: BridgeConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize the bridge.

        Args:
            config: Bridge configuration, defaults to BridgeConfig().
            client: HTTP client to use instead of a bridge-owned one.
            logger: Logger for bridge activity, defaults to the module logger.
        """
        self.config = config or BridgeConfig()
        self.logger = logger or logging.getLogger(__name__)

        self._session = SessionState()
        self._transport = StreamableHTTPTransport(
            self.config, session=self._session, client=client
        )
        self._transport.on_event(self._emit_event)

        self._state = LifecycleStateMachine()
        self._event_handlers: list[EventHandler] = []
        self._starting = False
        self._stop_requested = False
        self._reader_task: asyncio.Task | None = None
        self._line_tasks: set[asyncio.Task] = set()
        self._closed: asyncio.Event | None = None

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def state(self) -> LifecycleState:
        return self._state.state

    @property
    def is_running(self) -> bool:
        return self._state.is_running

    @property
    def session_id(self) -> str | None:
        """Session token assigned by the server, if any."""
        return self._session.session_id

    @property
    def transport(self) -> StreamableHTTPTransport:
        return self._transport

    # =========================================================================
    # Events
    # =========================================================================

    def on_event(self, handler: EventHandler) -> None:
        """
        Register an observer for bridge events.

        Handlers receive STARTED, STOPPED, SESSION_ESTABLISHED and ERROR
        events. A failing handler is logged and never affects the bridge.
        """
        self._event_handlers.append(handler)

    def _emit_event(self, event: BridgeEvent) -> None:
        for handler in self._event_handlers:
            try:
                handler(event)
            except Exception:
                self.logger.exception(f"Event handler failed for {event.type.name}")

    def _emit(
        self,
        event_type: BridgeEventType,
        data: dict[str, Any] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._emit_event(
            BridgeEvent(type=event_type, timestamp=time.time(), data=data, error=error)
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def start(
        self,
        input_stream: LineReader | None = None,
        output_stream: LineWriter | None = None,
    ) -> None:
        """
        Start reading lines and forwarding them.

        Returns once the read loop is attached; use wait_closed() to block
        until the bridge stops. If stop() is called while the health check
        is still pending, start() returns without attaching the loop and the
        bridge is left in its previous state.

        Args:
            input_stream: Source with async readline(), defaults to stdin.
            output_stream: Sink with write(str), defaults to stdout.

        Raises:
            AlreadyRunningError: If the bridge is already running.
            ServerUnreachableError: If the startup health check fails.
        """
        if self._state.is_running or self._starting:
            error = AlreadyRunningError()
            self.logger.error(f"Failed to start bridge: {error}")
            raise error

        self._starting = True
        self._stop_requested = False
        try:
            self.logger.info(f"Starting MCP bridge for {self.config.url}")

            if not self.config.skip_health_check:
                await self.check_health()

            if input_stream is None and not self._stop_requested:
                input_stream = await open_stdin_reader()
            if output_stream is None:
                output_stream = sys.stdout

            if self._stop_requested:
                self.logger.info("Stop requested during startup, not starting bridge")
                return

            self._closed = asyncio.Event()
            self._state.transition(LifecycleState.RUNNING)
        finally:
            self._starting = False
            self._stop_requested = False

        self._reader_task = asyncio.create_task(self._read_loop(input_stream, output_stream))

        self.logger.info("MCP bridge started successfully")
        self._emit(BridgeEventType.STARTED, data={"url": self.config.url})

    def stop(self) -> None:
        """
        Stop reading input.

        Safe to call multiple times. Requests already sent are left to
        finish or time out, but their replies are dropped. Called while
        start() is still running, it makes that start() give up.
        """
        if self._starting:
            self._stop_requested = True
            return

        if not self._state.is_running:
            return

        self.logger.info("Stopping MCP bridge")
        self._state.transition(LifecycleState.STOPPED)

        if self._reader_task is not None:
            self._reader_task.cancel()
            self._reader_task = None

        if self._closed is not None:
            self._closed.set()

        self._emit(BridgeEventType.STOPPED)

    async def wait_closed(self) -> None:
        """Wait until the bridge has stopped."""
        if self._closed is not None:
            await self._closed.wait()

    async def aclose(self) -> None:
        """Stop the bridge and release its HTTP client."""
        self.stop()
        await self._transport.aclose()

    async def __aenter__(self) -> "MCPBridge":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def check_health(self) -> bool:
        """
        Check that the MCP server answers on its health endpoint.

        Raises:
            ServerUnreachableError: If the probe fails or times out.
        """
        return await self._transport.check_health()

    # =========================================================================
    # Message pipeline
    # =========================================================================

    async def _read_loop(self, reader: LineReader, output: LineWriter) -> None:
        """Schedule every non-blank input line, then drain and stop on EOF."""
        try:
            while True:
                raw = await reader.readline()
                if not raw:
                    break

                line = raw.decode("utf-8") if isinstance(raw, bytes) else raw
                line = line.strip()
                if not line:
                    continue

                task = asyncio.create_task(self._handle_line(line, output))
                self._line_tasks.add(task)
                task.add_done_callback(self._line_tasks.discard)
        except ValueError as e:
            self.logger.error(f"Failed to read input: {e}")
            self._emit(BridgeEventType.ERROR, error=e)

        self.logger.debug("Input stream closed")
        if self._line_tasks:
            await asyncio.wait(set(self._line_tasks))

        # The loop is finishing on its own, stop() must not cancel it
        self._reader_task = None
        self.stop()

    async def _handle_line(self, line: str, output: LineWriter) -> None:
        try:
            await self.process_message(line, output)
        except Exception as e:
            self.logger.exception(f"Error processing message: {e}")
            self._emit(BridgeEventType.ERROR, error=e)

    async def process_message(self, line: str, output: LineWriter) -> None:
        """
        Forward one JSON-RPC line and write exactly one reply line.

        Args:
            line: A single JSON-RPC message.
            output: Sink the reply is written to.
        """
        try:
            message = oj.loads(line)
        except oj.JSONDecodeError as e:
            self.logger.error(f"Failed to parse JSON-RPC message {line!r}: {e}")
            self._write(output, JSONRPCError.parse_error().to_response(None))
            return

        if isinstance(message, dict):
            method, request_id = message.get("method"), message.get("id")
        else:
            method, request_id = None, None

        self.logger.debug(f"Processing message: method={method}, id={request_id}")

        try:
            response = await self._transport.forward(message)
        except Exception as e:
            self.logger.error(
                f"Failed to forward message to HTTP server "
                f"(method={method}, id={request_id}): {e}"
            )
            self._write(output, JSONRPCError.bridge_error(e).to_response(request_id))
            return

        self._write(output, response)
        trace(self.logger, f"Message processed: method={method}, id={request_id}")

    def _write(self, output: LineWriter, message: Any) -> None:
        """Write one message as a single line."""
        if self._state.is_stopped:
            self.logger.debug("Bridge stopped, dropping reply")
            return

        output.write(oj.dumps(message) + "\n")
        flush = getattr(output, "flush", None)
        if flush is not None:
            flush()
