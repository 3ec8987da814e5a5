"""
Agent swarm API server.

Serves the WebSocket command and event channel at /ws plus a REST mirror
of the agent commands under /api.
"""

from .app import app
from .routes import register_routes
from .state import get_agent_service, set_agent_service

# Register all routes with the app
register_routes(app)

__all__ = ["app", "set_agent_service", "get_agent_service"]
