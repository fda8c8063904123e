"""Shared pytest fixtures for git-http-gate tests."""

import base64
from collections.abc import Callable
from typing import Any

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse
from starlette.types import Receive, Scope, Send


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def basic_auth() -> Callable[[str, str], str]:
    """Build an ``Authorization`` header value for Basic-Auth.

    Returns a callable that accepts a username and password.
    """

    def _create(username: str, password: str) -> str:
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        return f"Basic {token}"

    return _create


class _SpyApp:
    """Downstream ASGI app recording every request it receives."""

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            self.calls.append({"type": scope["type"]})
            return

        request = Request(scope, receive)
        body = await request.body()
        self.calls.append(
            {
                "type": "http",
                "scope": scope,
                "path": scope["path"],
                "query_string": scope["query_string"],
                "headers": dict(request.headers),
                "body": body,
            }
        )
        response = PlainTextResponse(f"downstream:{scope['path']}")
        await response(scope, receive, send)


@pytest.fixture
def spy_app() -> _SpyApp:
    """Return a downstream app that records the requests reaching it."""
    return _SpyApp()


class _RecordingAuthorizer:
    """Sync decision function returning a fixed verdict and recording its input."""

    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.calls: list[Any] = []

    def __call__(self, info: Any) -> bool:
        self.calls.append(info)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def make_authorizer() -> Callable[..., _RecordingAuthorizer]:
    """Create a recording decision function.

    Returns a callable that accepts:
    - result: verdict to return (defaults to True)
    - error: exception to raise instead of returning
    """

    def _create(result: bool = True, error: Exception | None = None) -> _RecordingAuthorizer:
        return _RecordingAuthorizer(result=result, error=error)

    return _create


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a Starlette Request from raw parts without a server.

    Returns a callable that accepts:
    - path: URL path (defaults to "/")
    - query_string: raw query string
    - headers: dict of request headers
    - method: HTTP method (defaults to GET)
    - body: request body delivered in a single message
    """

    def _create(
        path: str = "/",
        query_string: str = "",
        headers: dict[str, str] | None = None,
        method: str = "GET",
        body: bytes = b"",
    ) -> Request:
        scope: dict[str, Any] = {
            "type": "http",
            "method": method,
            "scheme": "http",
            "server": ("testserver", 80),
            "root_path": "",
            "path": path,
            "query_string": query_string.encode(),
            "headers": [
                (key.lower().encode("latin-1"), value.encode("latin-1"))
                for key, value in (headers or {}).items()
            ],
        }

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _create
