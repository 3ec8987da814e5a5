"""
Tests for WebSocket wire formats.
"""
import json

from core import ModelInfo
from core.lifecycle import create_agent_record
from server.protocol import (
    create_error_response,
    create_init_message,
    create_success_response,
    format_models_info,
    format_response,
    serialize_agent,
)


def test_success_response():
    assert create_success_response("r1", {"diff": ""}) == {
        "id": "r1",
        "type": "response",
        "success": True,
        "data": {"diff": ""},
    }


def test_success_response_without_data():
    assert create_success_response("r1") == {"id": "r1", "type": "response", "success": True}


def test_error_response():
    assert create_error_response("r2", "Agent not found") == {
        "id": "r2",
        "type": "response",
        "success": False,
        "error": "Agent not found",
    }


def test_format_response_is_json():
    response = create_error_response("r3", "nope")
    assert json.loads(format_response(response)) == response


def test_init_message():
    agent = create_agent_record("a1", "n", "i", "/ws", "/repo", "ollama", "llama3.2")
    model = ModelInfo(provider="ollama", modelId="llama3.2", name="ollama/llama3.2")

    message = create_init_message([agent], [model], "/repo")

    assert message["type"] == "init"
    assert message["cwd"] == "/repo"
    assert message["agents"] == [serialize_agent(agent)]
    assert message["models"] == [{"provider": "ollama", "modelId": "llama3.2", "name": "ollama/llama3.2"}]
    assert format_models_info([]) == []


def test_serialized_agent_has_wire_fields():
    agent = create_agent_record("a1", "n", "i", "/ws", "/repo", "ollama", "llama3.2")
    data = serialize_agent(agent)

    assert set(data) == {
        "id", "name", "status", "instruction", "workspace", "basePath", "createdAt",
        "updatedAt", "output", "modifiedFiles", "diffStat", "model", "provider",
    }
