"""
Server-side state management.

This module holds the agent service used by the route handlers.
Agent storage itself lives in core/state.py.
"""

from core import AgentService


# =============================================================================
# Agent Service
# =============================================================================

_agent_service: AgentService | None = None


def set_agent_service(service: AgentService | None) -> None:
    """Set the agent service. Called from the application lifespan."""
    global _agent_service
    _agent_service = service


def get_agent_service() -> AgentService:
    """
    Get the current agent service.

    Raises:
        RuntimeError: If the server has not been started
    """
    if _agent_service is None:
        raise RuntimeError("Agent service is not configured")
    return _agent_service
