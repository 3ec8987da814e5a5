"""
Retry agent endpoint.
"""

from fastapi import APIRouter

from core import Agent, CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.post("/api/agents/{agentID}/retry")
async def retry_agent_route(agentID: str) -> Agent:
    """Clear the agent's output and run its instruction again."""
    try:
        return await get_agent_service().retry_agent(agentID)
    except CoreError as e:
        raise to_http_exception(e)
