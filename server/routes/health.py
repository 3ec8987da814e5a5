"""
Health check endpoint.
"""

from fastapi import APIRouter

from ..state import get_agent_service


router = APIRouter()


@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "agents": len(get_agent_service().list_agents())}
