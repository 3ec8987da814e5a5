"""
Create agent endpoint.
"""

from fastapi import APIRouter

from core import Agent, CoreError

from ...requests import CreateAgentRequest
from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.post("/api/agents")
async def create_agent_route(request: CreateAgentRequest) -> Agent:
    """Create an agent with its own workspace. The agent starts idle."""
    try:
        return await get_agent_service().create_agent(
            name=request.name,
            instruction=request.instruction,
            provider=request.provider,
            model=request.model,
        )
    except CoreError as e:
        raise to_http_exception(e)
