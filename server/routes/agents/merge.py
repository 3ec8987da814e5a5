"""
Merge agent endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from core import CoreError

from ...state import get_agent_service
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/agents/{agentID}/merge")
async def merge_agent_route(agentID: str) -> dict:
    """Rebase the agent's change onto the default branch."""
    try:
        result = await get_agent_service().merge_agent(agentID)
    except CoreError as e:
        raise to_http_exception(e)

    if not result.success:
        raise HTTPException(
            status_code=500,
            detail={"error": "Merge failed", "details": result.error},
        )
    return {"success": True, "message": "Changes merged"}
