"""
Tests for WebSocket command routing and message parsing.
"""
import json

import pytest

from core import AgentStore
from core.lifecycle import create_agent_record
from server.commands import (
    VALID_COMMANDS,
    RouteFailure,
    RouteSuccess,
    extract_agent_id,
    extract_create_agent_params,
    extract_instruction,
    extract_model_params,
    is_valid_command,
    is_valid_ws_request,
    parse_ws_message,
    route_command,
)


@pytest.fixture
def context() -> AgentStore:
    store = AgentStore()
    store.put(create_agent_record(
        "agent001", "fixer", "Fix it", "/ws", "/repo", "anthropic", "claude-sonnet-4-20250514"
    ))
    return store


def request(command_type: str, **params) -> dict:
    return {"id": "req-1", "type": command_type, **params}


class TestValidation:
    """Test envelope validation helpers."""

    def test_valid_commands(self):
        for command in VALID_COMMANDS:
            assert is_valid_command(command)
        assert not is_valid_command("launch_missiles")
        assert not is_valid_command(None)

    def test_valid_ws_request(self):
        assert is_valid_ws_request({"id": "1", "type": "start_agent"})
        assert not is_valid_ws_request({"id": 1, "type": "start_agent"})
        assert not is_valid_ws_request({"type": "start_agent"})
        assert not is_valid_ws_request(["id", "type"])
        assert not is_valid_ws_request(None)

    def test_parse_ws_message(self):
        message = {"id": "1", "type": "fetch_agent", "agentId": "a"}
        assert parse_ws_message(json.dumps(message)) == message
        assert parse_ws_message(message) == message

    def test_parse_invalid_json(self):
        result = parse_ws_message("{not json")
        assert result["error"].startswith("Failed to parse message:")

    def test_parse_missing_fields(self):
        assert parse_ws_message('{"type": "start_agent"}') == {
            "error": "Invalid message format: missing id or type"
        }


class TestExtraction:
    """Test parameter extraction."""

    def test_agent_id(self):
        assert extract_agent_id({"agentId": "abc"}) == "abc"
        assert extract_agent_id({"agentId": ""}) is None
        assert extract_agent_id({"agentId": 5}) is None
        assert extract_agent_id({}) is None

    def test_instruction_defaults_to_empty(self):
        assert extract_instruction({"instruction": "go"}) == "go"
        assert extract_instruction({"instruction": ["go"]}) == ""
        assert extract_instruction({}) == ""

    def test_model_params(self):
        assert extract_model_params({"provider": "ollama", "model": "llama3.2"}) == {
            "provider": "ollama",
            "model": "llama3.2",
        }
        assert extract_model_params({"provider": "ollama"}) is None

    def test_create_params(self):
        assert extract_create_agent_params({}) == {
            "name": "unnamed",
            "instruction": "",
            "provider": None,
            "model": None,
        }
        assert extract_create_agent_params({"name": "x", "provider": 3})["provider"] is None


class TestRouteCommand:
    """Test command routing."""

    def test_unknown_command(self, context):
        result = route_command("explode", request("explode"), context)
        assert result == RouteFailure("Unknown command: explode")
        assert result.valid is False

    def test_create_needs_no_agent(self, context):
        result = route_command("create_agent", request("create_agent", name="n"), context)
        assert isinstance(result, RouteSuccess)
        assert result.valid is True
        assert result.agent is None
        assert result.params["name"] == "n"

    @pytest.mark.parametrize("command", [
        "start_agent", "stop_agent", "get_diff", "merge_agent", "delete_agent", "fetch_agent",
    ])
    def test_agent_commands(self, context, command):
        result = route_command(command, request(command, agentId="agent001"), context)
        assert isinstance(result, RouteSuccess)
        assert result.agent.id == "agent001"
        assert result.params == {}

    def test_missing_agent_id(self, context):
        assert route_command("start_agent", request("start_agent"), context) == RouteFailure("Missing agent ID")

    def test_unknown_agent(self, context):
        result = route_command("start_agent", request("start_agent", agentId="ghost"), context)
        assert result == RouteFailure("Agent not found")

    def test_instruct_params(self, context):
        result = route_command(
            "instruct_agent", request("instruct_agent", agentId="agent001", instruction="more"), context
        )
        assert result.params == {"instruction": "more"}

    def test_instruct_without_instruction(self, context):
        result = route_command("instruct_agent", request("instruct_agent", agentId="agent001"), context)
        assert result.params == {"instruction": ""}

    def test_set_model(self, context):
        result = route_command(
            "set_model", request("set_model", agentId="agent001", provider="ollama", model="llama3.2"), context
        )
        assert result.params == {"provider": "ollama", "model": "llama3.2"}

    def test_set_model_missing_params(self, context):
        result = route_command("set_model", request("set_model", agentId="agent001", provider="ollama"), context)
        assert result == RouteFailure("Missing provider or model")

    def test_workspace_files_agent_is_optional(self, context):
        without_agent = route_command("get_workspace_files", request("get_workspace_files"), context)
        with_unknown = route_command("get_workspace_files", request("get_workspace_files", agentId="ghost"), context)

        assert without_agent == RouteSuccess(params={"agentId": None})
        assert with_unknown == RouteSuccess(params={"agentId": "ghost"})

    def test_routing_has_no_side_effects(self, context):
        before = dict(context.agents)
        route_command("delete_agent", request("delete_agent", agentId="agent001"), context)
        assert context.agents == before
