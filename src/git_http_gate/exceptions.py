"""Exception hierarchy and the status-code capability for gate errors."""

from typing import Any, Protocol, runtime_checkable

DEFAULT_ERROR_STATUS = 500


class GitHttpGateError(Exception):
    """Base exception for all git-http-gate errors.

    Catching this exception will catch every error raised by the
    git-http-gate package itself. Decision functions are free to raise
    any exception; they do not need to derive from this class.

    Example:
        try:
            app.add_middleware(GitAuthMiddleware, authorize=check)
        except GitHttpGateError as e:
            logger.error(f"Failed to configure gate: {e}")
    """


class StatusError(GitHttpGateError):
    """An error carrying the HTTP status code the gate should respond with.

    Raise it from a decision function to control the response status.
    The message becomes the response body.

    Example:
        def authorize(info: AuthInfo) -> bool:
            if not store.is_available():
                raise StatusError("credential store unavailable", status_code=503)
            return store.check(info.username, info.password)
    """

    def __init__(self, message: str, status_code: int = DEFAULT_ERROR_STATUS) -> None:
        super().__init__(message)
        self.status_code = status_code


class GateConfigurationError(GitHttpGateError, ValueError):
    """Raised when the gate is constructed with invalid arguments.

    This exception is raised at construction time, never per request:
        - The decision function is not callable
        - The realm is empty or contains a double quote

    Example:
        GateConfigurationError("authorize must be callable, got str")
    """


class AccessDeniedError(StatusError):
    """Raised by the gate when a request must not reach the wrapped app.

    Carries everything needed to build the rejection response: status
    code, message body and any extra response headers (such as the
    ``WWW-Authenticate`` challenge on 401).

    Example:
        AccessDeniedError("Forbidden", status_code=403)
    """

    def __init__(
        self,
        message: str,
        status_code: int = DEFAULT_ERROR_STATUS,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.message = message
        self.headers = dict(headers or {})


@runtime_checkable
class HasStatusCode(Protocol):
    """An error value exposing an HTTP status code."""

    status_code: int


def status_code_of(error: BaseException, default: int = DEFAULT_ERROR_STATUS) -> int:
    """Return the HTTP status code an error exposes, or ``default``.

    Any exception with an integer ``status_code`` attribute in the
    100-599 range qualifies, including Starlette's and FastAPI's
    ``HTTPException``. Booleans are not accepted as status codes.

    Examples:
        StatusError("nope", status_code=418) -> 418
        HTTPException(status_code=404) -> 404
        RuntimeError("boom") -> 500
    """
    code: Any = getattr(error, "status_code", None)
    if isinstance(code, int) and not isinstance(code, bool) and 100 <= code <= 599:
        return code
    return default


def error_message(error: BaseException) -> str:
    """Return the text used as the response body for an error.

    ``HTTPException`` renders as "<status>: <detail>", so a string
    ``detail`` attribute is preferred over ``str(error)``.
    """
    detail = getattr(error, "detail", None)
    if isinstance(detail, str):
        return detail
    return str(error)
