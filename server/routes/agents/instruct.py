"""
Instruct agent endpoint.
"""

from fastapi import APIRouter

from core import CoreError

from ...requests import InstructRequest
from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.post("/api/agents/{agentID}/instruct")
async def instruct_agent_route(agentID: str, request: InstructRequest) -> dict:
    """Send a follow-up instruction, resuming or restarting the agent as needed."""
    try:
        agent = await get_agent_service().instruct_agent(agentID, request.instruction)
    except CoreError as e:
        raise to_http_exception(e)
    return {"success": True, "agent": agent}
