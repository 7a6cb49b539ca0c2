"""Tests for the mcp-bridge command."""

import asyncio
import io
import json
import os
import signal
import sys

import httpx
import pytest

from mcp_bridge import __version__, cli
from mcp_bridge.bridge import MCPBridge
from mcp_bridge.cli import build_parser, main, run_bridge
from mcp_bridge.protocol import LifecycleState
from mcp_bridge.transport import BridgeConfig


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.url is None
        assert args.timeout == 30000
        assert args.log_level is None
        assert args.health_check is True

    def test_options(self):
        args = build_parser().parse_args(
            ["-u", "http://example.com/mcp", "-t", "100", "-l", "debug", "--no-health-check"]
        )
        assert args.url == "http://example.com/mcp"
        assert args.timeout == 100
        assert args.log_level == "debug"
        assert args.health_check is False

    def test_rejects_unknown_log_level(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--log-level", "loud"])
        assert exc_info.value.code == 2

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["--help"])
        assert exc_info.value.code == 0
        out = capsys.readouterr().out
        assert "usage:" in out
        assert "--no-health-check" in out


def test_main_rejects_invalid_timeout(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--timeout", "0"])
    assert exc_info.value.code == 2
    assert "timeout must be positive" in capsys.readouterr().err


class TestRunBridge:
    @pytest.mark.asyncio
    async def test_unreachable_server_exits_non_zero(self):
        def fail(request):
            raise httpx.ConnectError("Connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(fail))
        config = BridgeConfig(url="http://localhost:9/mcp", timeout=0.1)

        assert await run_bridge(config, None, io.StringIO(), client=client) == 1

    @pytest.mark.asyncio
    async def test_bridges_until_input_closes(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(200, json={"jsonrpc": "2.0", "result": "pong", "id": body["id"]})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        config = BridgeConfig(url="http://localhost:3000/mcp", skip_health_check=True)

        reader = asyncio.StreamReader()
        reader.feed_data(b'{"jsonrpc":"2.0","method":"ping","id":5}\n')
        reader.feed_eof()
        output = io.StringIO()

        code = await asyncio.wait_for(run_bridge(config, reader, output, client=client), timeout=2)

        assert code == 0
        assert json.loads(output.getvalue()) == {"jsonrpc": "2.0", "result": "pong", "id": 5}


@pytest.fixture
def bridges(monkeypatch):
    """Record the bridges run_bridge creates."""
    created = []

    class RecordedBridge(MCPBridge):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            created.append(self)

    monkeypatch.setattr(cli, "MCPBridge", RecordedBridge)
    return created


@pytest.mark.skipif(sys.platform == "win32", reason="needs loop signal handlers")
class TestShutdownSignals:
    @pytest.mark.asyncio
    async def test_sigterm_stops_bridge_and_exits_zero(self, bridges):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        config = BridgeConfig(url="http://localhost:3000/mcp", skip_health_check=True)

        running = asyncio.create_task(
            run_bridge(config, asyncio.StreamReader(), io.StringIO(), client=client)
        )
        await asyncio.sleep(0.05)
        assert bridges[0].is_running

        os.kill(os.getpid(), signal.SIGTERM)

        assert await asyncio.wait_for(running, timeout=2) == 0
        assert bridges[0].state == LifecycleState.STOPPED

    @pytest.mark.asyncio
    async def test_sigint_during_health_check_exits_zero(self, bridges):
        release = asyncio.Event()
        posts = []

        async def handler(request):
            if request.method == "GET":
                await release.wait()
                return httpx.Response(200)
            posts.append(request)
            return httpx.Response(200, json={"jsonrpc": "2.0", "result": {}, "id": 1})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        config = BridgeConfig(url="http://localhost:3000/mcp")
        reader = asyncio.StreamReader()
        reader.feed_data(b'{"jsonrpc":"2.0","method":"ping","id":1}\n')

        running = asyncio.create_task(run_bridge(config, reader, io.StringIO(), client=client))
        await asyncio.sleep(0.05)

        os.kill(os.getpid(), signal.SIGINT)
        await asyncio.sleep(0.01)
        release.set()

        assert await asyncio.wait_for(running, timeout=2) == 0
        assert not bridges[0].is_running
        assert posts == []
