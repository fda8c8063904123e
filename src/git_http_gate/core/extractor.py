"""Request context extraction for Git Smart-HTTP URLs.

Recovers the repository name from the URL path and classifies the request:
- <repo>/info/refs?service=git-upload-pack -> fetch
- <repo>/git-upload-pack -> fetch
- <repo>/info/refs?service=git-receive-pack -> push
- <repo>/git-receive-pack -> push

Classification is a heuristic over the ``service`` parameter and the path
suffix. Both flags may be set at once, and any path ending in
``receive-pack`` or ``upload-pack`` is classified by its suffix alone.
"""

import re
from dataclasses import dataclass

REPO_NAME_PATTERN = re.compile(
    r"^/?(.*?)/(HEAD|git-upload-pack|git-receive-pack|info/refs|objects/.*)\Z"
)

SERVICE_PREFIX = "git-"
UPLOAD_PACK = "upload-pack"
RECEIVE_PACK = "receive-pack"


@dataclass(frozen=True)
class RequestContext:
    """Repository and operation recovered from a request."""

    repo: str
    push: bool
    fetch: bool


def repo_name(path: str) -> str:
    """Extract the repository name from a URL path.

    Args:
        path: URL path without query string.

    Returns:
        Everything before the Smart-HTTP endpoint, or an empty string
        if the path has no recognized endpoint.

    Examples:
        "/org/project/info/refs" -> "org/project"
        "/some_repo.git/git-upload-pack" -> "some_repo.git"
        "repo/objects/pack/pack-1.pack" -> "repo"
        "/foo/bar" -> ""
    """
    match = REPO_NAME_PATTERN.match(path)
    if match is None:
        return ""
    return match.group(1)


def service_type(value: str | None) -> str:
    """Strip the ``git-`` prefix from a ``service`` parameter value.

    Returns an empty string when the value is missing or not prefixed.
    """
    if not value or not value.startswith(SERVICE_PREFIX):
        return ""
    return value.replace(SERVICE_PREFIX, "", 1)


def is_service(service: str, path: str, service_param: str | None = None) -> bool:
    """Check whether a request targets ``service`` by parameter or path suffix."""
    return service_type(service_param) == service or path.endswith(service)


def is_fetch(path: str, service_param: str | None = None) -> bool:
    return is_service(UPLOAD_PACK, path, service_param)


def is_push(path: str, service_param: str | None = None) -> bool:
    return is_service(RECEIVE_PACK, path, service_param)


def extract_context(path: str, service_param: str | None = None) -> RequestContext:
    """Build the RequestContext for a URL path and ``service`` value.

    Args:
        path: URL path without query string.
        service_param: Raw ``service`` parameter, if the request carried one.

    Returns:
        RequestContext with repository name and push/fetch flags.
    """
    return RequestContext(
        repo=repo_name(path),
        push=is_push(path, service_param),
        fetch=is_fetch(path, service_param),
    )
