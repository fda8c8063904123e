"""Authentication gate for Git Smart-HTTP requests.

Reads Basic-Auth credentials, extracts the repository and operation from
the request, and asks an external decision function whether the request
may proceed. Provides the gate as a pure ASGI middleware class and as a
``(request, call_next)`` middleware function.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from starlette import status
from starlette.concurrency import run_in_threadpool
from starlette.requests import ClientDisconnect, Request
from starlette.responses import PlainTextResponse, Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from git_http_gate.core.credentials import parse_basic_auth
from git_http_gate.core.extractor import extract_context
from git_http_gate.exceptions import (
    AccessDeniedError,
    GateConfigurationError,
    error_message,
    status_code_of,
)

logger = logging.getLogger(__name__)

DEFAULT_REALM = "git server"
UNAUTHORIZED_MESSAGE = "request header has no authorization header"
FORBIDDEN_MESSAGE = "Forbidden"

SERVICE_PARAM = "service"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
FORM_METHODS = frozenset({"POST", "PUT", "PATCH"})
# Largest urlencoded body the gate reads to look for a service parameter
MAX_FORM_BODY = 10 << 20


@dataclass(frozen=True)
class AuthInfo:
    """Everything a decision function needs to authorize one request.

    Attributes:
        username: Username or email from Basic-Auth.
        password: Plaintext password or token from Basic-Auth.
        repo: Repository from the URL path, usually "owner/name" but
            possibly "some_repo.git". Empty if the path is not a
            Smart-HTTP route.
        push: Whether the request looks like a push (receive-pack).
        fetch: Whether the request looks like a fetch (upload-pack).
        request: The original inbound request, for headers, client
            address and anything else a policy may need.
    """

    username: str
    password: str = field(repr=False)
    repo: str
    push: bool
    fetch: bool
    request: Request = field(repr=False, compare=False)


Authorizer = Callable[[AuthInfo], bool | Awaitable[bool]]
CallNext = Callable[[Request], Awaitable[Response]]


def validate_gate_config(authorize: Any, realm: Any) -> None:
    """Raise GateConfigurationError for a non-callable authorizer or bad realm."""
    if not callable(authorize):
        raise GateConfigurationError(
            f"authorize must be callable, got {type(authorize).__name__}"
        )
    if not isinstance(realm, str) or not realm:
        raise GateConfigurationError("realm must be a non-empty string")
    if '"' in realm:
        raise GateConfigurationError(f"realm must not contain double quotes: {realm!r}")


def _has_form_body(request: Request) -> bool:
    """Check whether the request body may carry form-encoded parameters."""
    if request.method not in FORM_METHODS:
        return False
    content_type = request.headers.get("content-type", "")
    if content_type.split(";", 1)[0].strip().lower() != FORM_CONTENT_TYPE:
        return False
    content_length = request.headers.get("content-length", "")
    return content_length.isdigit() and int(content_length) <= MAX_FORM_BODY


async def read_service_param(request: Request) -> str | None:
    """Return the ``service`` parameter of a request.

    A urlencoded body takes precedence over the query string.
    """
    if _has_form_body(request):
        body = await request.body()
        for key, value in parse_qsl(body.decode("utf-8", "replace"), keep_blank_values=True):
            if key == SERVICE_PARAM:
                return value
    values = request.query_params.getlist(SERVICE_PARAM)
    return values[0] if values else None


async def _call_authorizer(authorize: Authorizer, info: AuthInfo) -> bool:
    # Sync decision functions may block on a credential store
    if inspect.iscoroutinefunction(authorize):
        result = await authorize(info)
    else:
        result = await run_in_threadpool(authorize, info)
        if inspect.isawaitable(result):
            result = await result
    return bool(result)


async def authenticate(
    request: Request,
    authorize: Authorizer,
    *,
    realm: str = DEFAULT_REALM,
) -> AuthInfo:
    """Run the decision function for a request.

    Args:
        request: The inbound request.
        authorize: Decision function; returns truthy to grant, falsy to
            deny, or raises to fail with the error's status code.
        realm: Realm advertised in the ``WWW-Authenticate`` challenge.

    Returns:
        The AuthInfo the decision function granted.

    Raises:
        AccessDeniedError: 401 when credentials are missing or malformed,
            the decision error's status (default 500) when the decision
            function raises, 403 when it denies.
    """
    path = request.scope["path"]
    credentials = parse_basic_auth(request.headers.get("authorization"))
    if credentials is None:
        logger.debug("Missing or malformed basic auth", extra={"path": path})
        raise AccessDeniedError(
            UNAUTHORIZED_MESSAGE,
            status_code=status.HTTP_401_UNAUTHORIZED,
            headers={"WWW-Authenticate": f'Basic realm="{realm}"'},
        )

    context = extract_context(path, await read_service_param(request))
    info = AuthInfo(
        username=credentials.username,
        password=credentials.password,
        repo=context.repo,
        push=context.push,
        fetch=context.fetch,
        request=request,
    )
    log_context = {
        "username": info.username,
        "repo": info.repo,
        "push": info.push,
        "fetch": info.fetch,
    }

    try:
        authorized = await _call_authorizer(authorize, info)
    except Exception as exc:
        status_code = status_code_of(exc)
        logger.info(
            "Authorization failed with error",
            extra={**log_context, "status_code": status_code, "error": type(exc).__name__},
        )
        headers = getattr(exc, "headers", None)
        raise AccessDeniedError(
            error_message(exc),
            status_code=status_code,
            headers=dict(headers) if isinstance(headers, dict) else None,
        ) from exc

    if not authorized:
        logger.debug("Access denied", extra=log_context)
        raise AccessDeniedError(FORBIDDEN_MESSAGE, status_code=status.HTTP_403_FORBIDDEN)

    logger.debug("Access granted", extra=log_context)
    return info


def rejection_response(error: AccessDeniedError) -> Response:
    """Build the plain-text response for a rejected request."""
    return PlainTextResponse(
        error.message,
        status_code=error.status_code,
        headers={"X-Content-Type-Options": "nosniff", **error.headers},
    )


async def check_request(
    request: Request,
    authorize: Authorizer,
    *,
    realm: str = DEFAULT_REALM,
) -> Response | None:
    """Return the rejection response for a request, or None if granted."""
    try:
        await authenticate(request, authorize, realm=realm)
    except AccessDeniedError as exc:
        return rejection_response(exc)
    return None


def _replay_body(body: bytes, receive: Receive) -> Receive:
    """Wrap ``receive`` so a body already read by the gate is sent again."""
    replayed = False

    async def wrapped() -> Message:
        nonlocal replayed
        if not replayed:
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}
        return await receive()

    return wrapped


class GitAuthMiddleware:
    """ASGI middleware gating a Git Smart-HTTP app behind a decision function.

    Example:
        from starlette.applications import Starlette
        from git_http_gate import AuthInfo, GitAuthMiddleware

        def authorize(info: AuthInfo) -> bool:
            return info.fetch or info.username == "admin"

        app = Starlette()
        app.add_middleware(GitAuthMiddleware, authorize=authorize)
    """

    def __init__(
        self,
        app: ASGIApp,
        authorize: Authorizer,
        *,
        realm: str = DEFAULT_REALM,
    ) -> None:
        validate_gate_config(authorize, realm)
        self.app = app
        self.authorize = authorize
        self.realm = realm

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        try:
            response = await check_request(request, self.authorize, realm=self.realm)
        except ClientDisconnect:
            logger.debug("Client disconnected during authorization", extra={"path": scope["path"]})
            return

        if response is None:
            if _has_form_body(request):
                receive = _replay_body(await request.body(), receive)
            await self.app(scope, receive, send)
            return

        try:
            await response(scope, receive, send)
        except (OSError, ClientDisconnect) as exc:
            logger.debug(
                "Failed to send rejection response",
                extra={
                    "path": scope["path"],
                    "status_code": response.status_code,
                    "error": str(exc),
                },
            )


def git_auth(
    authorize: Authorizer,
    *,
    realm: str = DEFAULT_REALM,
) -> Callable[[Request, CallNext], Awaitable[Response]]:
    """Create a ``(request, call_next)`` middleware running the gate.

    Works with FastAPI's ``@app.middleware("http")`` and any other
    pipeline of ``(request, call_next)`` middleware.

    Args:
        authorize: Decision function, sync or async.
        realm: Realm advertised in the ``WWW-Authenticate`` challenge.

    Returns:
        An async middleware function.

    Raises:
        GateConfigurationError: If authorize is not callable or realm is invalid.

    Example:
        app = FastAPI()
        app.middleware("http")(git_auth(authorize))
    """
    validate_gate_config(authorize, realm)

    async def middleware(request: Request, call_next: CallNext) -> Response:
        try:
            response = await check_request(request, authorize, realm=realm)
        except ClientDisconnect:
            logger.debug(
                "Client disconnected during authorization", extra={"path": request.scope["path"]}
            )
            # Nobody is left to read it
            return Response(status_code=status.HTTP_400_BAD_REQUEST)
        if response is None:
            return await call_next(request)
        return response

    name = getattr(authorize, "__name__", type(authorize).__name__)
    middleware.__name__ = f"git_auth({name})"
    middleware.__qualname__ = middleware.__name__
    return middleware
