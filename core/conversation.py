"""
Conversation reducer.

Folds raw session events into a ConversationState of display events. The
same fold drives both live updates, one event at a time as a session
streams, and hydration, replaying an agent's whole output log. Both paths
produce identical event sequences.

Streamed text and thinking accumulate in pending buffers and are flushed
into finalized events at boundaries (tool calls, thinking blocks, message
and agent ends). Thinking is always flushed before text.
"""

import json
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from .models import (
    AgentEnd,
    ConversationEvent,
    MessageEnd,
    MessageUpdate,
    ProcessingEvent,
    Reasoning,
    TextDelta,
    TextEvent,
    ThinkingDelta,
    ThinkingEnd,
    ThinkingEvent,
    ThinkingStart,
    ToolEvent,
    ToolExecutionEnd,
    ToolExecutionStart,
    ToolExecutionUpdate,
    parse_assistant_message_event,
    parse_session_event,
)

logger = logging.getLogger(__name__)

PROCESSING_MESSAGES = ("⏳ Processing...", "⏳ Waiting...", "⏳ Starting...")
DEFAULT_PROCESSING_CONTENT = "Waiting..."


@dataclass(frozen=True)
class ConversationState:
    """Derived view over an agent's output log."""

    events: list[ConversationEvent] = field(default_factory=list)
    tools_by_id: dict[str, ToolEvent] = field(default_factory=dict)
    pending_text: str = ""
    pending_thinking: str = ""


def create_conversation_state() -> ConversationState:
    return ConversationState()


# =============================================================================
# Flushing
# =============================================================================


def _flush_thinking(state: ConversationState) -> ConversationState:
    if not state.pending_thinking:
        return state
    events = state.events
    content = state.pending_thinking.strip()
    if content:
        events = [*events, ThinkingEvent(content=content)]
    return replace(state, events=events, pending_thinking="")


def _flush_text(state: ConversationState) -> ConversationState:
    if not state.pending_text:
        return state
    events = state.events
    content = state.pending_text.strip()
    if content:
        events = [*events, TextEvent(content=content, role="assistant")]
    return replace(state, events=events, pending_text="")


def _flush_all(state: ConversationState) -> ConversationState:
    return _flush_text(_flush_thinking(state))


# =============================================================================
# Tool Updates
# =============================================================================


def _update_tool(
    conversation: ConversationState, tool_call_id: str, changes: dict[str, Any]
) -> ConversationState:
    existing = conversation.tools_by_id.get(tool_call_id)
    if existing is None:
        logger.debug("Ignoring update for unknown tool call: %s", tool_call_id)
        return conversation

    updated = existing.model_copy(update=changes)
    events = [
        updated if isinstance(event, ToolEvent) and event.toolCallId == tool_call_id else event
        for event in conversation.events
    ]
    return replace(
        conversation, events=events, tools_by_id={**conversation.tools_by_id, tool_call_id: updated}
    )


def _start_tool(state: ConversationState, event: ToolExecutionStart) -> ConversationState:
    state = _flush_all(state)
    tool = ToolEvent(
        toolCallId=event.toolCallId,
        toolName=event.toolName,
        args=event.args if isinstance(event.args, dict) else {},
        state="streaming-input",
    )
    return replace(
        state,
        events=[*state.events, tool],
        tools_by_id={**state.tools_by_id, tool.toolCallId: tool},
    )


def _end_tool(state: ConversationState, event: ToolExecutionEnd) -> ConversationState:
    # Only a literal true marks a failed tool call
    is_error = None if event.isError is None else event.isError is True
    return _update_tool(
        state,
        event.toolCallId,
        {
            "result": event.result,
            "isError": is_error,
            "state": "output-error" if is_error else "output-available",
        },
    )


def _apply_message_update(state: ConversationState, event: MessageUpdate) -> ConversationState:
    nested = parse_assistant_message_event(event.assistantMessageEvent)
    if isinstance(nested, TextDelta):
        if nested.delta:
            return replace(state, pending_text=state.pending_text + nested.delta)
    elif isinstance(nested, ThinkingDelta):
        if nested.delta:
            return replace(state, pending_thinking=state.pending_thinking + nested.delta)
    elif isinstance(nested, Reasoning):
        if nested.text:
            return replace(state, pending_thinking=state.pending_thinking + nested.text)
    return state


# =============================================================================
# Fold
# =============================================================================


def process_event(state: ConversationState, event: Any) -> ConversationState:
    """
    Fold one raw session event into the state.

    Returns a new state; the input is never modified. Unknown, malformed or
    non-mapping events leave the state unchanged, as do updates for tool
    calls that were never started.
    """
    parsed = parse_session_event(event)
    if parsed is None:
        return state

    if isinstance(parsed, ToolExecutionStart):
        return _start_tool(state, parsed)
    if isinstance(parsed, ToolExecutionUpdate):
        return _update_tool(
            state, parsed.toolCallId, {"result": parsed.partialResult, "state": "streaming-output"}
        )
    if isinstance(parsed, ToolExecutionEnd):
        return _end_tool(state, parsed)
    if isinstance(parsed, MessageUpdate):
        return _apply_message_update(state, parsed)
    if isinstance(parsed, ThinkingStart):
        return _flush_text(state)
    if isinstance(parsed, ThinkingEnd):
        return _flush_thinking(state)
    if isinstance(parsed, (MessageEnd, AgentEnd)):
        return _flush_all(state)
    return state


def parse_output_to_state(output: str) -> ConversationState:
    """
    Rebuild conversation state by replaying an output log.

    Lines that are not JSON are kept as literal text. Pending content is
    flushed after the last line, exactly as on ``agent_end``.
    """
    state = create_conversation_state()
    for line in output.split("\n"):
        if not line.strip():
            continue
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            state = replace(state, pending_text=state.pending_text + line + "\n")
            continue
        state = process_event(state, event)
    return _flush_all(state)


def get_display_events(state: ConversationState) -> list[ConversationEvent]:
    """Finalized events followed by any in-progress thinking and text."""
    events = list(state.events)
    if state.pending_thinking.strip():
        events.append(ThinkingEvent(content=state.pending_thinking))
    if state.pending_text.strip():
        events.append(TextEvent(content=state.pending_text, role="assistant"))
    return events


# =============================================================================
# Output Helpers
# =============================================================================


def is_processing_message(output: str) -> bool:
    return not output or output in PROCESSING_MESSAGES


def parse_output(output: str) -> list[ConversationEvent]:
    """
    Display events for a whole output log.

    An empty log or a processing placeholder yields a single
    ProcessingEvent. A log with content but no recognizable events is shown
    verbatim as one text event.
    """
    if is_processing_message(output):
        return [ProcessingEvent(content=output or DEFAULT_PROCESSING_CONTENT)]

    events = parse_output_to_state(output).events
    if not events and output.strip():
        return [TextEvent(content=output, role="assistant")]
    return events


def extract_text_from_conversation(output: str) -> str:
    """Concatenate the assistant's streamed text deltas from an output log."""
    text = ""
    for line in output.split("\n"):
        try:
            event = json.loads(line)
        except json.JSONDecodeError:
            continue
        parsed = parse_session_event(event)
        if isinstance(parsed, MessageUpdate):
            nested = parse_assistant_message_event(parsed.assistantMessageEvent)
            if isinstance(nested, TextDelta):
                text += nested.delta
    return text.strip()


def extract_tool_result(result: Any) -> str:
    """Render a tool result as display text."""
    if not result:
        return ""

    if isinstance(result, dict) and "content" in result:
        content = result["content"]
        if isinstance(content, list):
            return "\n".join(
                item.get("text", "")
                for item in content
                if isinstance(item, dict) and item.get("type") == "text"
            )
        if isinstance(content, str):
            return content

    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2)
