"""
In-memory agent storage.

AgentStore holds the agent roster for one server process together with the
state that must never be persisted: live session handles, session worker
tasks and the derived conversation view. Access to a single agent is
serialized through its lock; different agents are independent.
"""

import asyncio
from typing import TYPE_CHECKING

from .conversation import ConversationState, create_conversation_state, parse_output_to_state
from .exceptions import NotFoundError
from .models import Agent

if TYPE_CHECKING:
    from .agents import AgentSession


class AgentStore:
    """Agents plus their transient side tables, keyed by agent id."""

    def __init__(self) -> None:
        self.agents: dict[str, Agent] = {}
        self.sessions: dict[str, "AgentSession"] = {}
        self.workers: dict[str, asyncio.Task[None]] = {}
        self.conversations: dict[str, ConversationState] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    # =========================================================================
    # Agents
    # =========================================================================

    def get(self, agent_id: str) -> Agent | None:
        return self.agents.get(agent_id)

    def require(self, agent_id: str) -> Agent:
        """
        Get an agent by ID.

        Raises:
            NotFoundError: If the agent is not found
        """
        agent = self.agents.get(agent_id)
        if agent is None:
            raise NotFoundError("Agent", agent_id)
        return agent

    def put(self, agent: Agent) -> Agent:
        self.agents[agent.id] = agent
        return agent

    def remove(self, agent_id: str) -> Agent | None:
        self.sessions.pop(agent_id, None)
        self.workers.pop(agent_id, None)
        self.conversations.pop(agent_id, None)
        self._locks.pop(agent_id, None)
        return self.agents.pop(agent_id, None)

    def list_agents(self) -> list[Agent]:
        """All agents, oldest first."""
        return sorted(self.agents.values(), key=lambda a: a.createdAt)

    def lock(self, agent_id: str) -> asyncio.Lock:
        if agent_id not in self._locks:
            self._locks[agent_id] = asyncio.Lock()
        return self._locks[agent_id]

    # =========================================================================
    # Conversations
    # =========================================================================

    def conversation(self, agent_id: str) -> ConversationState:
        """Current conversation view, hydrated from the output log on first use."""
        if agent_id not in self.conversations:
            agent = self.agents.get(agent_id)
            self.conversations[agent_id] = (
                parse_output_to_state(agent.output) if agent else create_conversation_state()
            )
        return self.conversations[agent_id]

    def reset_conversation(self, agent_id: str) -> None:
        self.conversations[agent_id] = create_conversation_state()

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def load(self, agents: list[Agent]) -> None:
        for agent in agents:
            self.agents[agent.id] = agent

    def clear(self) -> None:
        self.agents.clear()
        self.sessions.clear()
        self.workers.clear()
        self.conversations.clear()
        self._locks.clear()
