"""FastAPI adapter for the Git Smart-HTTP gate."""

from git_http_gate.fastapi.dependency import GitAuth

__all__ = ["GitAuth"]
