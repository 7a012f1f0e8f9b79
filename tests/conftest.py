"""
alpacabridge Test Fixtures

Shared fixtures for unit and integration tests. The Alpaca simulator is a
small aiohttp.web application that answers every device member with either a
scripted reply or a stored property value, and records each request so tests
can assert on the exact wire format.

Usage:
    @pytest.mark.asyncio
    async def test_something(alpaca_simulator, fast_config):
        alpaca_simulator.set_value("telescope", "tracking", True)
        client = AlpacaClient(alpaca_simulator.base_url, "telescope", config=fast_config)
"""

import asyncio
import json
from collections import defaultdict, deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional, Tuple, Union

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

from alpacabridge.config import ClientConfig, RequestOptions

ERROR_NOT_IMPLEMENTED = 0x400


# =============================================================================
# Simulator
# =============================================================================

@dataclass
class Reply:
    """One scripted HTTP reply."""
    status: int = 200
    body: Union[dict, list, str, bytes, None] = None
    content_type: str = "application/json"
    delay: float = 0.0


@dataclass
class RecordedRequest:
    """What the simulator received."""
    method: str
    path: str
    member: str
    query: Dict[str, str]
    form: Dict[str, str]
    content_type: str
    headers: Dict[str, str] = field(default_factory=dict)


def envelope(value: Any = None, error_number: int = 0, error_message: str = "", **extra) -> dict:
    """Standard Alpaca response envelope."""
    include_value = extra.pop("include_value", False)
    body = {
        "ClientTransactionID": 0,
        "ServerTransactionID": 0,
        "ErrorNumber": error_number,
        "ErrorMessage": error_message,
    }
    if value is not None or include_value:
        body["Value"] = value
    body.update(extra)
    return body


class AlpacaSimulator:
    """Scriptable Alpaca device server."""

    def __init__(self):
        self.base_url = ""
        self.requests: List[RecordedRequest] = []
        self._values: Dict[Tuple[str, str], Any] = {}
        self._scripts: Dict[Tuple[str, str], Deque[Reply]] = defaultdict(deque)
        self._server_transaction_id = 0

    def make_app(self) -> web.Application:
        app = web.Application()
        app.router.add_route("*", "/{path:.*}", self.handle)
        return app

    # -------------------------------------------------------------------------
    # Scripting
    # -------------------------------------------------------------------------

    def set_value(self, device_type: str, member: str, value: Any) -> None:
        """Store a property value answered by GET until overridden."""
        self._values[(device_type.lower(), member.lower())] = value

    def script(self, method: str, member: str, *replies: Reply) -> None:
        """Queue replies for the next requests to one member."""
        self._scripts[(method.upper(), member.lower())].extend(replies)

    def requests_for(self, member: str, method: Optional[str] = None) -> List[RecordedRequest]:
        return [
            r for r in self.requests
            if r.member == member.lower() and (method is None or r.method == method.upper())
        ]

    # -------------------------------------------------------------------------
    # Request handling
    # -------------------------------------------------------------------------

    async def handle(self, request: web.Request) -> web.StreamResponse:
        parts = request.path.strip("/").split("/")
        member = parts[-1].lower()
        device_type = parts[-3].lower() if len(parts) >= 3 else ""
        form = {}
        if request.method == "PUT":
            form = {key: str(value) for key, value in (await request.post()).items()}

        self.requests.append(RecordedRequest(
            method=request.method,
            path=request.path,
            member=member,
            query=dict(request.query),
            form=form,
            content_type=request.content_type,
            headers=dict(request.headers),
        ))

        queue = self._scripts.get((request.method, member))
        if queue:
            reply = queue.popleft()
        else:
            reply = self._default_reply(request.method, device_type, member, form)

        if reply.delay:
            await asyncio.sleep(reply.delay)

        self._server_transaction_id += 1
        body = reply.body
        if isinstance(body, dict) and "ErrorNumber" in body:
            params = form if request.method == "PUT" else request.query
            body = dict(body)
            body["ClientTransactionID"] = int(params.get("ClientTransactionID", 0))
            body["ServerTransactionID"] = self._server_transaction_id
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if body is None:
            body = b""
        if isinstance(body, str):
            body = body.encode("utf-8")
        return web.Response(status=reply.status, body=body, content_type=reply.content_type)

    def _default_reply(self, method: str, device_type: str, member: str, form: Dict[str, str]) -> Reply:
        if method == "PUT":
            # Setting a property makes it readable
            for key, value in form.items():
                if key.lower() == member:
                    self._values[(device_type, member)] = _parse_form_value(value)
            return Reply(body=envelope())
        key = (device_type, member)
        if key in self._values:
            return Reply(body=envelope(self._values[key], include_value=True))
        return Reply(body=envelope(error_number=ERROR_NOT_IMPLEMENTED, error_message=f"{member} is not implemented"))


def _parse_form_value(value: str) -> Any:
    if value in ("True", "False"):
        return value == "True"
    for parser in (int, float):
        try:
            return parser(value)
        except ValueError:
            continue
    return value


# =============================================================================
# Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def alpaca_simulator():
    """Running simulator; its base_url points at the server root."""
    simulator = AlpacaSimulator()
    server = TestServer(simulator.make_app())
    await server.start_server()
    simulator.base_url = f"http://{server.host}:{server.port}"
    yield simulator
    await server.close()


@pytest.fixture
def fast_options() -> RequestOptions:
    """Request options with short timeouts and no retry delay."""
    return RequestOptions(timeout=2.0, max_retries=2, retry_delay=0.0)


@pytest.fixture
def fast_config(fast_options) -> ClientConfig:
    return ClientConfig(request_options=fast_options)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove ALPACABRIDGE_* variables for the duration of a test."""
    import os

    for name in list(os.environ):
        if name.startswith("ALPACABRIDGE_"):
            monkeypatch.delenv(name, raising=False)
    return monkeypatch
