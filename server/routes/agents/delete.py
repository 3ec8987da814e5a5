"""
Delete agent endpoint.
"""

from fastapi import APIRouter

from core import CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.delete("/api/agents/{agentID}")
async def delete_agent_route(agentID: str) -> dict:
    """Delete an agent, its workspace and its saved state."""
    try:
        await get_agent_service().delete_agent(agentID)
    except CoreError as e:
        raise to_http_exception(e)
    return {"success": True}
