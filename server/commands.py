"""
WebSocket command routing.

route_command() validates a request envelope, resolves the target agent and
extracts typed parameters. It performs no side effects; the handlers module
executes the routed command against the agent service.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

from core import Agent

# =============================================================================
# Commands
# =============================================================================

VALID_COMMANDS = (
    "create_agent",
    "start_agent",
    "stop_agent",
    "resume_agent",
    "instruct_agent",
    "interrupt_agent",
    "set_model",
    "get_diff",
    "merge_agent",
    "delete_agent",
    "fetch_agent",
    "retry_agent",
    "complete_agent",
    "get_conversation",
    "get_workspace_files",
)

# Commands that carry an instruction parameter
INSTRUCTION_COMMANDS = ("instruct_agent", "resume_agent", "interrupt_agent")


class CommandContext(Protocol):
    def get(self, agent_id: str) -> Agent | None:
        ...


# =============================================================================
# Route Results
# =============================================================================


@dataclass(frozen=True)
class RouteSuccess:
    agent: Agent | None = None
    params: dict[str, Any] = field(default_factory=dict)
    valid: Literal[True] = True


@dataclass(frozen=True)
class RouteFailure:
    error: str
    valid: Literal[False] = False


RouteResult = RouteSuccess | RouteFailure


# =============================================================================
# Validation and Extraction
# =============================================================================


def is_valid_command(command_type: Any) -> bool:
    return isinstance(command_type, str) and command_type in VALID_COMMANDS


def is_valid_ws_request(message: Any) -> bool:
    return (
        isinstance(message, dict)
        and isinstance(message.get("id"), str)
        and isinstance(message.get("type"), str)
    )


def parse_ws_message(raw: str | Any) -> dict[str, Any]:
    """
    Parse an inbound frame into a request envelope.

    Returns the request dict, or ``{"error": ...}`` if the frame is not JSON
    or lacks a string id and type.
    """
    try:
        data = json.loads(raw) if isinstance(raw, (str, bytes)) else raw
    except ValueError as e:
        return {"error": f"Failed to parse message: {e}"}
    if is_valid_ws_request(data):
        return data
    return {"error": "Invalid message format: missing id or type"}


def _string(message: dict[str, Any], key: str) -> str | None:
    value = message.get(key)
    return value if isinstance(value, str) else None


def extract_agent_id(message: dict[str, Any]) -> str | None:
    return _string(message, "agentId") or None


def extract_instruction(message: dict[str, Any]) -> str:
    return _string(message, "instruction") or ""


def extract_model_params(message: dict[str, Any]) -> dict[str, str] | None:
    provider = _string(message, "provider")
    model = _string(message, "model")
    if provider is None or model is None:
        return None
    return {"provider": provider, "model": model}


def extract_create_agent_params(message: dict[str, Any]) -> dict[str, Any]:
    name = _string(message, "name")
    return {
        "name": name if name is not None else "unnamed",
        "instruction": extract_instruction(message),
        "provider": _string(message, "provider"),
        "model": _string(message, "model"),
    }


# =============================================================================
# Router
# =============================================================================


def route_command(command_type: str, message: dict[str, Any], context: CommandContext) -> RouteResult:
    if not is_valid_command(command_type):
        return RouteFailure(f"Unknown command: {command_type}")

    if command_type == "create_agent":
        return RouteSuccess(params=extract_create_agent_params(message))

    # The agent is optional; without one the base repository is listed
    if command_type == "get_workspace_files":
        return RouteSuccess(params={"agentId": extract_agent_id(message)})

    agent_id = extract_agent_id(message)
    if agent_id is None:
        return RouteFailure("Missing agent ID")

    agent = context.get(agent_id)
    if agent is None:
        return RouteFailure("Agent not found")

    if command_type in INSTRUCTION_COMMANDS:
        return RouteSuccess(agent=agent, params={"instruction": extract_instruction(message)})

    if command_type == "set_model":
        model_params = extract_model_params(message)
        if model_params is None:
            return RouteFailure("Missing provider or model")
        return RouteSuccess(agent=agent, params=model_params)

    return RouteSuccess(agent=agent)
