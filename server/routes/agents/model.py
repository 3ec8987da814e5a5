"""
Set agent model endpoint.
"""

import logging

from fastapi import APIRouter, HTTPException

from core import CoreError, NotFoundError

from ...requests import SetModelRequest
from ...state import get_agent_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/api/agents/{agentID}/model")
async def set_agent_model_route(agentID: str, request: SetModelRequest) -> dict:
    """Switch the model an agent runs on."""
    service = get_agent_service()
    try:
        service.get_agent(agentID)
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Agent not found")

    try:
        agent = await service.set_agent_model(agentID, request.provider, request.model)
    except CoreError as e:
        logger.debug("Model change rejected for %s: %s", agentID, e)
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "agent": agent}
