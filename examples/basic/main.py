"""Basic example gating a Git Smart-HTTP backend with GitAuthMiddleware.

The backend here is a stand-in that only echoes the request; in a real
deployment it would be a Git Smart-HTTP server (for example an ASGI
wrapper around git-http-backend).

Run with:
    uvicorn main:app --reload

Try it:
    curl -u alice:secret "http://localhost:8000/org/project/info/refs?service=git-upload-pack"
    curl -u bob:hunter2 "http://localhost:8000/org/project/info/refs?service=git-receive-pack"
"""

import logging

from fastapi import FastAPI, Request

from git_http_gate import AuthInfo, GitAuthMiddleware, StatusError

logging.basicConfig(level=logging.DEBUG)

USERS = {"alice": "secret", "bob": "hunter2"}
WRITERS = {"alice"}


def authorize(info: AuthInfo) -> bool:
    if not info.repo:
        raise StatusError("not a git repository", status_code=404)
    if USERS.get(info.username) != info.password:
        raise StatusError("invalid credentials", status_code=401)
    if info.push:
        return info.username in WRITERS
    return True


backend = FastAPI(title="Git Backend Stand-in")


@backend.api_route("/{path:path}", methods=["GET", "POST"])
async def serve(path: str, request: Request) -> dict:
    return {"path": path, "query": str(request.query_params)}


app = GitAuthMiddleware(backend, authorize=authorize)
