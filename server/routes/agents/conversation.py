"""
Agent conversation endpoint.
"""

from fastapi import APIRouter

from core import ConversationEvent, CoreError

from ...state import get_agent_service
from ..errors import to_http_exception


router = APIRouter()


@router.get("/api/agents/{agentID}/conversation")
async def get_agent_conversation_route(agentID: str) -> dict[str, list[ConversationEvent]]:
    """Display events derived from the agent's output, including partial text."""
    try:
        return {"events": get_agent_service().get_conversation(agentID)}
    except CoreError as e:
        raise to_http_exception(e)
