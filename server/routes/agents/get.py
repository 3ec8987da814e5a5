"""
Get agent endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from core import Agent, CoreError, NotFoundError

from ...state import get_agent_service
from ..errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/api/agents/{agentID}")
async def get_agent_route(agentID: str) -> Agent:
    """Get agent details with its modified files and diff stat."""
    try:
        return await get_agent_service().fetch_agent(agentID)
    except NotFoundError:
        logger.debug("Agent not found: %s", agentID)
        raise HTTPException(status_code=404, detail="Agent not found")
    except CoreError as e:
        raise to_http_exception(e)
