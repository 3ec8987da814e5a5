"""
Event types and EventBus protocol.

The EventBus is an abstract interface that core uses to publish events.
The server layer provides a WebSocket-based implementation.
"""

from typing import Any, Protocol

from pydantic import BaseModel

from .models import Agent

AGENT_CREATED = "agent_created"
AGENT_UPDATED = "agent_updated"
AGENT_DELETED = "agent_deleted"
AGENT_EVENT = "agent_event"


class Event(BaseModel):
    """Domain event that can be published to subscribers."""

    type: str
    properties: dict[str, Any]

    def to_wire(self) -> dict[str, Any]:
        """Flatten into the broadcast envelope ``{type, ...properties}``."""
        return {"type": self.type, **self.properties}


class EventBus(Protocol):
    """Abstract interface for publishing events."""

    async def publish(self, event: Event) -> None:
        """Publish an event to all subscribers."""
        ...


def agent_created(agent: Agent) -> Event:
    return Event(type=AGENT_CREATED, properties={"agent": agent.model_dump()})


def agent_updated(agent: Agent) -> Event:
    return Event(type=AGENT_UPDATED, properties={"agent": agent.model_dump()})


def agent_deleted(agent_id: str) -> Event:
    return Event(type=AGENT_DELETED, properties={"agentId": agent_id})


def agent_event(agent_id: str, event: dict[str, Any]) -> Event:
    """Wrap a raw session event for observers."""
    return Event(type=AGENT_EVENT, properties={"agentId": agent_id, "event": event})
