"""
Models endpoint - list the models agents can run on.
"""

from fastapi import APIRouter

from ..protocol import format_models_info
from ..state import get_agent_service


router = APIRouter()


@router.get("/api/models")
async def list_models() -> dict:
    """List models whose provider is configured."""
    return {"models": format_models_info(get_agent_service().get_available_models())}
