"""
WebSocket command dispatch.

Routes a request envelope with route_command() and executes it against the
agent service, returning the response envelope for the caller to send.
"""

import logging
from typing import Any, Awaitable, Callable

from core import AgentService, CoreError

from .commands import RouteFailure, RouteSuccess, is_valid_ws_request, parse_ws_message, route_command
from .logging_config import log_timing
from .protocol import (
    create_error_response,
    create_success_response,
    format_workspace_files,
    serialize_agent,
)

logger = logging.getLogger(__name__)

# Commands slower than this are logged at WARNING
SLOW_COMMAND_MS = 5000

CommandHandler = Callable[[AgentService, RouteSuccess], Awaitable[dict[str, Any] | None]]


# =============================================================================
# Command Handlers
# =============================================================================
# Each handler returns the response data; a failed merge raises CoreError.


async def _create_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    agent = await service.create_agent(**route.params)
    return serialize_agent(agent)


async def _start_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return serialize_agent(await service.start_agent(route.agent.id))


async def _stop_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return serialize_agent(await service.stop_agent(route.agent.id))


async def _resume_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    agent = await service.resume_agent(route.agent.id, route.params["instruction"])
    return serialize_agent(agent)


async def _instruct_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    agent = await service.instruct_agent(route.agent.id, route.params["instruction"])
    return serialize_agent(agent)


async def _interrupt_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    agent = await service.interrupt_agent(route.agent.id, route.params["instruction"])
    return serialize_agent(agent)


async def _set_model(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    agent = await service.set_agent_model(
        route.agent.id, route.params["provider"], route.params["model"]
    )
    return serialize_agent(agent)


async def _get_diff(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return {"diff": await service.get_diff(route.agent.id)}


async def _merge_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    result = await service.merge_agent(route.agent.id)
    if not result.success:
        raise CoreError(result.error or "Merge failed")
    return {"message": "Changes merged"}


async def _delete_agent(service: AgentService, route: RouteSuccess) -> None:
    await service.delete_agent(route.agent.id)
    return None


async def _fetch_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return serialize_agent(await service.fetch_agent(route.agent.id))


async def _retry_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return serialize_agent(await service.retry_agent(route.agent.id))


async def _complete_agent(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    return serialize_agent(await service.complete_agent(route.agent.id))


async def _get_conversation(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    events = service.get_conversation(route.agent.id)
    return {"events": [event.model_dump(mode="json") for event in events]}


async def _get_workspace_files(service: AgentService, route: RouteSuccess) -> dict[str, Any]:
    files = await service.get_workspace_files(route.params["agentId"])
    return {"files": format_workspace_files(files)}


COMMAND_HANDLERS: dict[str, CommandHandler] = {
    "create_agent": _create_agent,
    "start_agent": _start_agent,
    "stop_agent": _stop_agent,
    "resume_agent": _resume_agent,
    "instruct_agent": _instruct_agent,
    "interrupt_agent": _interrupt_agent,
    "set_model": _set_model,
    "get_diff": _get_diff,
    "merge_agent": _merge_agent,
    "delete_agent": _delete_agent,
    "fetch_agent": _fetch_agent,
    "retry_agent": _retry_agent,
    "complete_agent": _complete_agent,
    "get_conversation": _get_conversation,
    "get_workspace_files": _get_workspace_files,
}


# =============================================================================
# Dispatch
# =============================================================================


async def handle_command(service: AgentService, message: dict[str, Any]) -> dict[str, Any]:
    """Execute one validated request envelope and build its response."""
    request_id = message["id"]
    command_type = message["type"]

    route = route_command(command_type, message, service.store)
    if isinstance(route, RouteFailure):
        logger.debug("Rejected %s: %s", command_type, route.error)
        return create_error_response(request_id, route.error)

    try:
        with log_timing(logger, f"Command {command_type}", slow_ms=SLOW_COMMAND_MS):
            data = await COMMAND_HANDLERS[command_type](service, route)
    except CoreError as e:
        logger.info("Command %s failed: %s", command_type, e)
        return create_error_response(request_id, str(e))
    except Exception as e:
        logger.exception("Unexpected error handling %s", command_type)
        return create_error_response(request_id, str(e) or type(e).__name__)

    return create_success_response(request_id, data)


async def handle_message(service: AgentService, raw: str) -> dict[str, Any] | None:
    """
    Parse and dispatch one inbound frame.

    Returns the response envelope, or None for frames that carry no request
    id to answer.
    """
    message = parse_ws_message(raw)
    if not is_valid_ws_request(message):
        logger.warning("Ignoring WebSocket message: %s", message["error"])
        return None
    return await handle_command(service, message)
