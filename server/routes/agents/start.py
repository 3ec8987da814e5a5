"""
Start agent endpoint.
"""

from fastapi import APIRouter

from core import Agent, CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.post("/api/agents/{agentID}/start")
async def start_agent_route(agentID: str) -> Agent:
    try:
        return await get_agent_service().start_agent(agentID)
    except CoreError as e:
        raise to_http_exception(e)
