"""
File-based agent persistence.

Each agent is stored as ``agent.json`` in its own session directory under
``<base>/.pi/swarm/sessions``. The same directory holds the session's
message history, so deleting an agent removes both.
"""

import asyncio
import json
import logging
import shutil
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .lifecycle import (
    build_agent_metadata_path,
    build_agent_session_dir,
    build_sessions_dir,
    transition_to_stopped,
)
from .models import Agent

logger = logging.getLogger(__name__)

METADATA_FILENAME = "agent.json"


class FilePersistence:
    """Persistence collaborator writing one JSON document per agent."""

    def __init__(self, base_path: str) -> None:
        self.base_path = base_path
        self.sessions_dir = build_sessions_dir(base_path)

    def session_dir(self, agent_id: str) -> str:
        return build_agent_session_dir(self.base_path, agent_id)

    def metadata_path(self, agent_id: str) -> str:
        return build_agent_metadata_path(self.base_path, agent_id)

    async def save(self, agent: Agent) -> None:
        await asyncio.to_thread(self._save, agent)

    async def load(self) -> list[Agent]:
        return await asyncio.to_thread(self._load)

    async def delete(self, agent_id: str) -> None:
        await asyncio.to_thread(shutil.rmtree, self.session_dir(agent_id), True)

    def _save(self, agent: Agent) -> None:
        Path(self.session_dir(agent.id)).mkdir(parents=True, exist_ok=True)
        Path(self.metadata_path(agent.id)).write_text(
            json.dumps(agent.model_dump(), indent=2), encoding="utf-8"
        )

    def _load(self) -> list[Agent]:
        sessions_dir = Path(self.sessions_dir)
        if not sessions_dir.is_dir():
            return []

        agents: list[Agent] = []
        for entry in sorted(sessions_dir.iterdir()):
            path = entry / METADATA_FILENAME
            if not path.is_file():
                continue
            try:
                data = json.loads(path.read_text(encoding="utf-8"))
                agent = Agent.model_validate(data)
            except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
                logger.warning("Skipping unreadable agent metadata %s: %s", path, e)
                continue
            # Live sessions never survive a restart
            if agent.status == "running":
                agent = transition_to_stopped(agent)
            agents.append(agent)

        logger.info("Loaded %d agents from %s", len(agents), sessions_dir)
        return agents
