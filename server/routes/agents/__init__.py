"""
Agent route registration.
"""

from fastapi import FastAPI

from . import conversation, create, delete, diff, get, instruct, list, merge, model, retry, start, stop


def register_routes(app: FastAPI) -> None:
    """Register all agent routes."""
    app.include_router(list.router)
    app.include_router(create.router)
    app.include_router(get.router)
    app.include_router(delete.router)
    app.include_router(start.router)
    app.include_router(stop.router)
    app.include_router(instruct.router)
    app.include_router(model.router)
    app.include_router(diff.router)
    app.include_router(merge.router)
    app.include_router(retry.router)
    app.include_router(conversation.router)
