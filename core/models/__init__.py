"""
Domain models for the agent swarm.

These are the core data structures used throughout the application.
"""

from .agent import AGENT_STATUSES, Agent, AgentStatus
from .conversation_event import (
    ConversationEvent,
    ProcessingEvent,
    TextEvent,
    ThinkingEvent,
    ToolEvent,
    ToolState,
)
from .model_info import ModelInfo
from .session_event import (
    AgentEnd,
    AgentStart,
    AssistantMessageEvent,
    ErrorRecord,
    InterruptRecord,
    MessageEnd,
    MessageUpdate,
    Reasoning,
    SessionEvent,
    TextDelta,
    ThinkingDelta,
    ThinkingEnd,
    ThinkingStart,
    ToolExecutionEnd,
    ToolExecutionStart,
    ToolExecutionUpdate,
    parse_assistant_message_event,
    parse_session_event,
)
from .utils import generate_id, now_ts, parse_ts

__all__ = [
    # Utils
    "generate_id",
    "now_ts",
    "parse_ts",
    # Agent
    "Agent",
    "AgentStatus",
    "AGENT_STATUSES",
    # Provider info
    "ModelInfo",
    # Display events
    "TextEvent",
    "ThinkingEvent",
    "ToolEvent",
    "ToolState",
    "ProcessingEvent",
    "ConversationEvent",
    # Raw session events
    "SessionEvent",
    "AgentStart",
    "AgentEnd",
    "MessageUpdate",
    "MessageEnd",
    "ThinkingStart",
    "ThinkingEnd",
    "ToolExecutionStart",
    "ToolExecutionUpdate",
    "ToolExecutionEnd",
    "ErrorRecord",
    "InterruptRecord",
    "AssistantMessageEvent",
    "TextDelta",
    "ThinkingDelta",
    "Reasoning",
    "parse_session_event",
    "parse_assistant_message_event",
]
