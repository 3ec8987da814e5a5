"""Display event models produced by the conversation reducer."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

ToolState = Literal["streaming-input", "streaming-output", "output-available", "output-error"]


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    content: str
    role: Literal["user", "assistant"] = "assistant"


class ThinkingEvent(BaseModel):
    type: Literal["thinking"] = "thinking"
    content: str


class ToolEvent(BaseModel):
    type: Literal["tool"] = "tool"
    toolCallId: str
    toolName: str
    args: dict[str, Any] = Field(default_factory=dict)
    result: Any = None
    isError: bool | None = None
    state: ToolState = "streaming-input"


class ProcessingEvent(BaseModel):
    """Placeholder shown while an agent has produced no output yet."""

    type: Literal["processing"] = "processing"
    content: str


ConversationEvent = Annotated[
    TextEvent | ThinkingEvent | ToolEvent | ProcessingEvent,
    Field(discriminator="type"),
]
