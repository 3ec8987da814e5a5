"""
List agents endpoint.
"""

import logging

from fastapi import APIRouter

from core import CoreError

from ...state import get_agent_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/agents")
async def list_agents_route() -> dict:
    """List all agents with their modified files refreshed."""
    service = get_agent_service()
    agents = []
    for agent in service.list_agents():
        try:
            agents.append(await service.fetch_agent(agent.id))
        except CoreError as e:
            logger.debug("Skipping agent %s: %s", agent.id, e)
    return {"agents": agents}
