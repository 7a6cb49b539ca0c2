"""Pytest configuration and fixtures."""

import io
import json

import httpx
import pytest

from mcp_bridge.transport import BridgeConfig

# Provides the asyncio marker used by the async tests
pytest_plugins = ["pytest_asyncio"]

TEST_URL = "http://localhost:3000/mcp"


class RecordingServer:
    """
    Stub MCP server for httpx.MockTransport.

    Records every request and answers with whatever the test's handler
    returns. The default handler serves the health endpoint and answers
    POSTs with an empty result echoing the request id.
    """

    def __init__(self, handler=None):
        self.requests: list[httpx.Request] = []
        self.handler = handler or self.default_handler

    @staticmethod
    def default_handler(request: httpx.Request):
        if request.method == "GET":
            return httpx.Response(200, json={"status": "ok"})
        body = json.loads(request.content)
        return httpx.Response(
            200, json={"jsonrpc": "2.0", "result": {}, "id": body.get("id")}
        )

    async def __call__(self, request: httpx.Request):
        self.requests.append(request)
        response = self.handler(request)
        if not isinstance(response, httpx.Response):
            response = await response
        return response

    @property
    def posts(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]


@pytest.fixture
def server():
    return RecordingServer()


@pytest.fixture
def client(server):
    return httpx.AsyncClient(transport=httpx.MockTransport(server))


@pytest.fixture
def config():
    return BridgeConfig(url=TEST_URL)


@pytest.fixture
def output():
    return io.StringIO()
