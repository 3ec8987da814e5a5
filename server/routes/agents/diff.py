"""
Agent diff endpoint.
"""

from fastapi import APIRouter

from core import CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.get("/api/agents/{agentID}/diff")
async def get_agent_diff_route(agentID: str) -> dict:
    """Git-style diff of the agent's workspace against the default branch."""
    try:
        return {"diff": await get_agent_service().get_diff(agentID)}
    except CoreError as e:
        raise to_http_exception(e)
