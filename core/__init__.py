"""
Core business logic package.

This package contains transport-agnostic logic for the agent swarm: the
agent lifecycle, the conversation reducer, broadcast fan-out and the agent
service. The server package provides WebSocket and HTTP bindings around it.
"""

from .agents import (
    DEFAULT_RESUME_INSTRUCTION,
    AgentService,
    AgentSession,
    MergeResult,
    ModelSource,
    Persistence,
    SessionFactory,
    Workspace,
)
from .broadcast import BroadcastResult, Observer, broadcast_to_clients
from .conversation import (
    ConversationState,
    create_conversation_state,
    extract_text_from_conversation,
    extract_tool_result,
    get_display_events,
    is_processing_message,
    parse_output,
    parse_output_to_state,
    process_event,
)
from .events import Event, EventBus
from .exceptions import (
    CoreError,
    GuardViolationError,
    InvalidOperationError,
    NotFoundError,
    SessionError,
    WorkspaceError,
)
from .models import (
    AGENT_STATUSES,
    Agent,
    AgentStatus,
    ConversationEvent,
    ModelInfo,
    ProcessingEvent,
    TextEvent,
    ThinkingEvent,
    ToolEvent,
    generate_id,
    now_ts,
)
from .persistence import FilePersistence
from .state import AgentStore
from .workspace import JujutsuWorkspace

__all__ = [
    # Exceptions
    "CoreError",
    "NotFoundError",
    "InvalidOperationError",
    "GuardViolationError",
    "SessionError",
    "WorkspaceError",
    # Events
    "Event",
    "EventBus",
    # Models
    "Agent",
    "AgentStatus",
    "AGENT_STATUSES",
    "ModelInfo",
    "ConversationEvent",
    "TextEvent",
    "ThinkingEvent",
    "ToolEvent",
    "ProcessingEvent",
    "generate_id",
    "now_ts",
    # Conversation
    "ConversationState",
    "create_conversation_state",
    "process_event",
    "parse_output_to_state",
    "get_display_events",
    "parse_output",
    "is_processing_message",
    "extract_text_from_conversation",
    "extract_tool_result",
    # Broadcast
    "BroadcastResult",
    "Observer",
    "broadcast_to_clients",
    # Agents
    "AgentStore",
    "AgentService",
    "AgentSession",
    "SessionFactory",
    "Persistence",
    "Workspace",
    "ModelSource",
    "MergeResult",
    "DEFAULT_RESUME_INSTRUCTION",
    # Collaborators
    "FilePersistence",
    "JujutsuWorkspace",
]
