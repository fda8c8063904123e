"""Basic-Auth gate for Git Smart-HTTP servers."""

# Primary API — the middleware
from git_http_gate.core.gate import (
    DEFAULT_REALM,
    AuthInfo,
    Authorizer,
    GitAuthMiddleware,
    authenticate,
    check_request,
    git_auth,
)

# Request context and credentials — for decision functions and testing
from git_http_gate.core.credentials import BasicCredentials, parse_basic_auth
from git_http_gate.core.extractor import (
    RequestContext,
    extract_context,
    is_fetch,
    is_push,
    repo_name,
    service_type,
)

# Exceptions — for decision functions and error handling
from git_http_gate.exceptions import (
    AccessDeniedError,
    GateConfigurationError,
    GitHttpGateError,
    HasStatusCode,
    StatusError,
    error_message,
    status_code_of,
)

__all__ = [
    # Primary API
    "GitAuthMiddleware",
    "git_auth",
    "authenticate",
    "check_request",
    "AuthInfo",
    "Authorizer",
    "DEFAULT_REALM",
    # Request context and credentials
    "BasicCredentials",
    "RequestContext",
    "extract_context",
    "is_fetch",
    "is_push",
    "parse_basic_auth",
    "repo_name",
    "service_type",
    # Exceptions
    "AccessDeniedError",
    "GateConfigurationError",
    "GitHttpGateError",
    "HasStatusCode",
    "StatusError",
    "error_message",
    "status_code_of",
]

__version__ = "0.1.0"
