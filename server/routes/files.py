"""
Workspace files endpoint.
"""

from fastapi import APIRouter

from ..protocol import format_workspace_files
from ..state import get_agent_service


router = APIRouter()


@router.get("/api/files")
async def list_workspace_files(agentId: str | None = None) -> dict:
    """List files in an agent's workspace, or in the base repository."""
    files = await get_agent_service().get_workspace_files(agentId)
    return {"files": format_workspace_files(files)}
