"""Example gating only the Git routes of a FastAPI app with the GitAuth dependency.

Run with:
    uvicorn main:app --reload
"""

from fastapi import Depends, FastAPI

from git_http_gate import AuthInfo
from git_http_gate.fastapi import GitAuth

TOKENS = {"ci-bot": "tok_123"}


async def authorize(info: AuthInfo) -> bool:
    return TOKENS.get(info.username) == info.password and not info.push


gate = GitAuth(authorize, realm="example git")
app = FastAPI(title="Dependency Example")


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}


@app.get("/{repo:path}/info/refs")
async def info_refs(info: AuthInfo = Depends(gate)) -> dict:
    return {"repo": info.repo, "fetch": info.fetch}
