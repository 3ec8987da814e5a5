"""
Raw session event models.

Sessions push plain JSON mappings. These models give the reducer a closed
set of event types to dispatch on; anything that does not validate against
one of them is treated as unknown and ignored rather than raised.
"""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError


class _RawEvent(BaseModel):
    model_config = ConfigDict(extra="allow")


class AgentStart(_RawEvent):
    type: Literal["agent_start"]


class AgentEnd(_RawEvent):
    type: Literal["agent_end"]


class MessageUpdate(_RawEvent):
    type: Literal["message_update"]
    assistantMessageEvent: dict[str, Any] | None = None


class MessageEnd(_RawEvent):
    type: Literal["message_end"]


class ThinkingStart(_RawEvent):
    type: Literal["thinking_start", "reasoning_start"]


class ThinkingEnd(_RawEvent):
    type: Literal["thinking_end", "reasoning_end"]


class ToolExecutionStart(_RawEvent):
    type: Literal["tool_execution_start"]
    toolCallId: str
    toolName: str
    args: Any = None


class ToolExecutionUpdate(_RawEvent):
    type: Literal["tool_execution_update"]
    toolCallId: str
    partialResult: Any = None


class ToolExecutionEnd(_RawEvent):
    type: Literal["tool_execution_end"]
    toolCallId: str
    result: Any = None
    isError: Any = None


class ErrorRecord(_RawEvent):
    type: Literal["error"]
    message: str = ""


class InterruptRecord(_RawEvent):
    type: Literal["interrupt"]
    message: str = ""


SessionEvent = Annotated[
    AgentStart
    | AgentEnd
    | MessageUpdate
    | MessageEnd
    | ThinkingStart
    | ThinkingEnd
    | ToolExecutionStart
    | ToolExecutionUpdate
    | ToolExecutionEnd
    | ErrorRecord
    | InterruptRecord,
    Field(discriminator="type"),
]


# Nested events carried by message_update


class TextDelta(_RawEvent):
    type: Literal["text_delta"]
    delta: str = ""


class ThinkingDelta(_RawEvent):
    type: Literal["thinking_delta"]
    delta: str = ""


class Reasoning(_RawEvent):
    type: Literal["reasoning"]
    text: str = ""


AssistantMessageEvent = Annotated[
    TextDelta | ThinkingDelta | Reasoning,
    Field(discriminator="type"),
]


_session_event_adapter: TypeAdapter[SessionEvent] = TypeAdapter(SessionEvent)
_assistant_event_adapter: TypeAdapter[AssistantMessageEvent] = TypeAdapter(AssistantMessageEvent)


def parse_session_event(raw: Any) -> SessionEvent | None:
    """Validate a raw session event, returning None for unknown or malformed input."""
    if not isinstance(raw, dict):
        return None
    try:
        return _session_event_adapter.validate_python(raw)
    except ValidationError:
        return None


def parse_assistant_message_event(raw: Any) -> AssistantMessageEvent | None:
    """Validate the nested event of a message_update."""
    if not isinstance(raw, dict):
        return None
    try:
        return _assistant_event_adapter.validate_python(raw)
    except ValidationError:
        return None
