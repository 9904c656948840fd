"""API routes."""

from fastapi import FastAPI

from scriptvault.api import actions, fetch, health


def include_routes(app: FastAPI, prefix: str) -> None:
    """Mount all routers under prefix (GET/POST on the prefix itself)."""
    app.include_router(health.router, prefix=prefix, tags=["health"])
    app.include_router(actions.router, prefix=prefix, tags=["actions"])
    app.include_router(fetch.router, prefix=f"{prefix}/fetch", tags=["scripts"])
