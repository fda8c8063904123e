"""HTTP Basic-Auth header parsing."""

import base64
import binascii
from dataclasses import dataclass

BASIC_SCHEME = "basic"


@dataclass(frozen=True)
class BasicCredentials:
    """Username and password (or token) from an Authorization header."""

    username: str
    password: str

    def __repr__(self) -> str:
        return f"BasicCredentials(username={self.username!r}, password='***')"


def parse_basic_auth(header: str | None) -> BasicCredentials | None:
    """Parse an ``Authorization: Basic ...`` header value.

    The scheme is matched case-insensitively. The payload must be standard
    base64 of ``username:password``; the password may itself contain
    colons. Either part may be empty. Bytes that are not valid UTF-8 are
    kept as surrogate escapes rather than rejected.

    Args:
        header: Raw header value, or None if the header is absent.

    Returns:
        BasicCredentials, or None if the header is absent or malformed.

    Examples:
        "Basic YWxpY2U6c2VjcmV0" -> BasicCredentials("alice", "secret")
        "Bearer abc" -> None
        "Basic !!!" -> None
    """
    if not header:
        return None

    scheme, _, payload = header.partition(" ")
    if scheme.lower() != BASIC_SCHEME or not payload:
        return None

    try:
        decoded = base64.b64decode(payload, validate=True).decode("utf-8", "surrogateescape")
    except binascii.Error:
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None

    return BasicCredentials(username=username, password=password)
