"""Integration tests for git_auth() mounted as FastAPI HTTP middleware.

The gate sits in front of a small FastAPI app standing in for a Git
Smart-HTTP backend.
"""

from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from git_http_gate import AuthInfo, StatusError, git_auth

READERS = {"alice", "bob"}
WRITERS = {"alice"}


def _authorize(info: AuthInfo) -> bool:
    if info.repo == "":
        raise StatusError("not a git repository", status_code=404)
    if info.push:
        return info.username in WRITERS
    return info.username in READERS


def _make_app() -> FastAPI:
    app = FastAPI()
    app.middleware("http")(git_auth(_authorize))

    @app.get("/{repo:path}/info/refs")
    async def info_refs(repo: str, service: str = "") -> dict:
        return {"repo": repo, "service": service}

    @app.post("/{repo:path}/git-upload-pack")
    async def upload_pack(repo: str, request: Request) -> dict:
        body = await request.body()
        return {"repo": repo, "received": len(body)}

    @app.post("/{repo:path}/git-receive-pack")
    async def receive_pack(repo: str, request: Request) -> dict:
        body = await request.body()
        return {"repo": repo, "received": len(body)}

    return app


class TestGitAuthMiddleware:
    """git_auth() gates every route of the app."""

    def test_reader_can_fetch(self) -> None:
        client = TestClient(_make_app())

        response = client.get(
            "/org/project/info/refs",
            params={"service": "git-upload-pack"},
            auth=("bob", "pw"),
        )

        assert response.status_code == 200
        assert response.json() == {"repo": "org/project", "service": "git-upload-pack"}

    def test_reader_cannot_push(self) -> None:
        client = TestClient(_make_app())

        response = client.get(
            "/org/project/info/refs",
            params={"service": "git-receive-pack"},
            auth=("bob", "pw"),
        )

        assert response.status_code == 403
        assert response.text == "Forbidden"

    def test_writer_can_push_with_body(self) -> None:
        client = TestClient(_make_app())

        response = client.post(
            "/org/project/git-receive-pack",
            content=b"0000" * 8,
            headers={"Content-Type": "application/x-git-receive-pack-request"},
            auth=("alice", "pw"),
        )

        assert response.status_code == 200
        assert response.json() == {"repo": "org/project", "received": 32}

    def test_stranger_cannot_fetch(self) -> None:
        client = TestClient(_make_app())

        response = client.post(
            "/org/project/git-upload-pack",
            content=b"0000",
            auth=("mallory", "pw"),
        )

        assert response.status_code == 403

    def test_missing_credentials_challenged(self) -> None:
        client = TestClient(_make_app())

        response = client.get("/org/project/info/refs")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="git server"'

    def test_decision_error_status_and_message(self) -> None:
        client = TestClient(_make_app())

        response = client.get("/about", auth=("alice", "pw"))

        assert response.status_code == 404
        assert response.text == "not a git repository"
