"""FastAPI dependency for gating individual routes.

Use it when only some routes of an app serve Git traffic:

    gate = GitAuth(authorize)

    @app.get("/{repo:path}/info/refs")
    async def info_refs(info: AuthInfo = Depends(gate)): ...
"""

from fastapi import HTTPException, Request

from git_http_gate.core.gate import (
    DEFAULT_REALM,
    AuthInfo,
    Authorizer,
    authenticate,
    validate_gate_config,
)
from git_http_gate.exceptions import AccessDeniedError


class GitAuth:
    """Callable dependency returning the granted AuthInfo.

    Rejections are raised as ``HTTPException`` with the same status codes
    and headers the middleware uses; FastAPI renders their message as
    ``{"detail": ...}``.
    """

    def __init__(self, authorize: Authorizer, *, realm: str = DEFAULT_REALM) -> None:
        validate_gate_config(authorize, realm)
        self.authorize = authorize
        self.realm = realm

    async def __call__(self, request: Request) -> AuthInfo:
        try:
            return await authenticate(request, self.authorize, realm=self.realm)
        except AccessDeniedError as exc:
            raise HTTPException(
                status_code=exc.status_code,
                detail=exc.message,
                headers=exc.headers or None,
            ) from exc
