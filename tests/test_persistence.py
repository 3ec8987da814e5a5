"""
Tests for file-based agent persistence.
"""
import json
from pathlib import Path

import pytest

from core import FilePersistence
from core.lifecycle import build_agent_metadata_path, create_agent_record, transition_to_running


def make_agent(base_path: str, agent_id: str, created_at: str = "2026-01-01T00:00:00.000Z"):
    agent = create_agent_record(
        agent_id, "fixer", "Fix it", f"{base_path}/.pi/swarm/workspaces/{agent_id}",
        base_path, "anthropic", "claude-sonnet-4-20250514",
    )
    return agent.model_copy(update={"createdAt": created_at, "updatedAt": created_at})


@pytest.fixture
def persistence(temp_dir: Path) -> FilePersistence:
    return FilePersistence(str(temp_dir))


class TestFilePersistence:
    """Test saving, loading and deleting agents."""

    @pytest.mark.asyncio
    async def test_save_writes_metadata(self, persistence, temp_dir):
        agent = make_agent(str(temp_dir), "agent001")

        await persistence.save(agent)

        path = Path(build_agent_metadata_path(str(temp_dir), "agent001"))
        assert json.loads(path.read_text())["id"] == "agent001"

    @pytest.mark.asyncio
    async def test_round_trip(self, persistence, temp_dir):
        first = make_agent(str(temp_dir), "agent001")
        second = make_agent(str(temp_dir), "agent002")
        await persistence.save(first)
        await persistence.save(second)

        assert await persistence.load() == [first, second]

    @pytest.mark.asyncio
    async def test_running_agents_load_stopped(self, persistence, temp_dir):
        agent = transition_to_running(make_agent(str(temp_dir), "agent001"))
        await persistence.save(agent)

        loaded = await persistence.load()

        assert loaded[0].status == "stopped"

    @pytest.mark.asyncio
    async def test_demotion_restamps_updated_at(self, persistence, temp_dir):
        agent = make_agent(str(temp_dir), "agent001").model_copy(update={"status": "running"})
        await persistence.save(agent)

        loaded = await persistence.load()

        assert loaded[0].status == "stopped"
        assert loaded[0].updatedAt > agent.updatedAt
        assert loaded[0].createdAt == agent.createdAt

    @pytest.mark.asyncio
    async def test_unreadable_metadata_skipped(self, persistence, temp_dir):
        await persistence.save(make_agent(str(temp_dir), "agent001"))
        broken = Path(persistence.session_dir("broken01"))
        broken.mkdir(parents=True)
        (broken / "agent.json").write_text("{not json")
        Path(persistence.session_dir("partial1")).mkdir()
        (Path(persistence.session_dir("partial1")) / "agent.json").write_text('{"id": "partial1"}')

        loaded = await persistence.load()

        assert [agent.id for agent in loaded] == ["agent001"]

    @pytest.mark.asyncio
    async def test_load_without_sessions_dir(self, persistence):
        assert await persistence.load() == []

    @pytest.mark.asyncio
    async def test_delete(self, persistence, temp_dir):
        await persistence.save(make_agent(str(temp_dir), "agent001"))

        await persistence.delete("agent001")
        await persistence.delete("agent001")

        assert await persistence.load() == []
