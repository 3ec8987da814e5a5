"""
WebSocket wire formats.

Responses echo the request id for correlation:
    {"id": ..., "type": "response", "success": true, "data": ...}
    {"id": ..., "type": "response", "success": false, "error": "..."}

A newly attached observer first receives an init snapshot:
    {"type": "init", "cwd": ..., "agents": [...], "models": [...]}
"""

import json
from typing import Any, Literal

from pydantic import BaseModel

from core import Agent, ModelInfo


class WsResponse(BaseModel):
    id: str
    type: Literal["response"] = "response"
    success: bool
    data: Any = None
    error: str | None = None


def create_success_response(request_id: str, data: Any = None) -> dict[str, Any]:
    response = WsResponse(id=request_id, success=True, data=data)
    return response.model_dump(mode="json", exclude_none=True)


def create_error_response(request_id: str, error: str) -> dict[str, Any]:
    response = WsResponse(id=request_id, success=False, error=error)
    return response.model_dump(mode="json", exclude_none=True)


def format_response(response: dict[str, Any]) -> str:
    return json.dumps(response)


def serialize_agent(agent: Agent) -> dict[str, Any]:
    return agent.model_dump(mode="json")


def format_models_info(models: list[ModelInfo]) -> list[dict[str, Any]]:
    return [model.model_dump() for model in models]


def format_workspace_files(paths: list[str]) -> list[dict[str, str]]:
    return [{"name": path, "source": "file", "path": path} for path in paths]


def create_init_message(agents: list[Agent], models: list[ModelInfo], cwd: str) -> dict[str, Any]:
    """Snapshot sent to an observer when it attaches."""
    return {
        "type": "init",
        "cwd": cwd,
        "agents": [serialize_agent(agent) for agent in agents],
        "models": format_models_info(models),
    }
