"""
Route registration for the swarm API.
"""

from fastapi import FastAPI

from . import agents, files, health, models, websocket


def register_routes(app: FastAPI) -> None:
    """Register all routes with the FastAPI application."""
    app.include_router(health.router)
    app.include_router(models.router)
    app.include_router(files.router)
    app.include_router(websocket.router)
    agents.register_routes(app)
