"""
Stop agent endpoint.
"""

from fastapi import APIRouter

from core import Agent, CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.post("/api/agents/{agentID}/stop")
async def stop_agent_route(agentID: str) -> Agent:
    """Abort the agent's session. The agent can be resumed later."""
    try:
        return await get_agent_service().stop_agent(agentID)
    except CoreError as e:
        raise to_http_exception(e)
