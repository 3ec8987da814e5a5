"""
Agent sessions backed by Pydantic AI.

PydanticAISession runs prompts with run_stream_events() and translates the
stream into the raw session events the agent service records:

    agent_start
    message_update {assistantMessageEvent: text_delta | thinking_delta}
    thinking_start / thinking_end
    tool_execution_start / tool_execution_end
    message_end
    agent_end

Message history is persisted to the agent's session directory after every
run so a stopped agent can be resumed with its context intact.
"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Callable

from pydantic_ai import Agent, AgentRunResultEvent
from pydantic_ai.messages import (
    FunctionToolCallEvent,
    FunctionToolResultEvent,
    ModelMessage,
    ModelMessagesTypeAdapter,
    PartDeltaEvent,
    PartStartEvent,
    RetryPromptPart,
    TextPart,
    TextPartDelta,
    ThinkingPart,
    ThinkingPartDelta,
)

from core import Agent as AgentRecord
from core.exceptions import SessionError

from .agent import create_coding_agent, get_model_settings, resolve_model

logger = logging.getLogger(__name__)

HISTORY_FILENAME = "messages.json"

SessionCallback = Callable[[dict[str, Any]], None]


def load_history(session_dir: Path) -> list[ModelMessage]:
    """Load saved message history, or an empty history if there is none."""
    path = session_dir / HISTORY_FILENAME
    if not path.exists():
        return []
    try:
        return list(ModelMessagesTypeAdapter.validate_json(path.read_bytes()))
    except Exception as e:
        logger.warning("Failed to load message history from %s: %s", path, e)
        return []


def save_history(session_dir: Path, messages: list[ModelMessage]) -> None:
    session_dir.mkdir(parents=True, exist_ok=True)
    path = session_dir / HISTORY_FILENAME
    path.write_bytes(ModelMessagesTypeAdapter.dump_json(messages, indent=2))


def _tool_result_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if hasattr(content, "model_dump_json"):
        return content.model_dump_json()
    return str(content)


class PydanticAISession:
    """A live session for one agent, running one prompt at a time."""

    def __init__(
        self,
        agent: Agent,
        provider: str,
        model_id: str,
        session_dir: Path,
        history: list[ModelMessage] | None = None,
    ) -> None:
        self.agent = agent
        self.provider = provider
        self.model_id = model_id
        self.session_dir = session_dir
        self._history: list[ModelMessage] = list(history or [])
        self._callbacks: list[SessionCallback] = []
        self._task: asyncio.Task[None] | None = None
        self._aborted = False
        self._in_thinking = False

    # ===== Subscription =====

    def subscribe(self, callback: SessionCallback) -> None:
        self._callbacks.append(callback)

    def _emit(self, event: dict[str, Any]) -> None:
        for callback in list(self._callbacks):
            callback(event)

    # ===== Control =====

    async def prompt(self, text: str) -> None:
        """
        Run ``text`` to completion.

        Raises:
            SessionError: If a prompt is already running
        """
        if self._task is not None and not self._task.done():
            raise SessionError("Session is already running a prompt")

        self._aborted = False
        self._task = asyncio.create_task(self._run(text))
        try:
            await self._task
        except asyncio.CancelledError:
            if not self._aborted:
                raise
            logger.info("Prompt aborted in %s", self.session_dir)

    async def abort(self) -> None:
        task = self._task
        if task is None or task.done():
            return
        self._aborted = True
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def set_model(self, provider: str, model: str) -> None:
        self.provider = provider
        self.model_id = model

    def get_history(self) -> list[ModelMessage]:
        return self._history.copy()

    # ===== Streaming =====

    def _end_thinking(self) -> None:
        if self._in_thinking:
            self._in_thinking = False
            self._emit({"type": "thinking_end"})

    def _emit_delta(self, kind: str, delta: str) -> None:
        if delta:
            self._emit({
                "type": "message_update",
                "assistantMessageEvent": {"type": kind, "delta": delta},
            })

    async def _run(self, text: str) -> None:
        self._in_thinking = False
        self._emit({"type": "agent_start"})

        run_kwargs = {
            "model": resolve_model(self.provider, self.model_id),
            "message_history": self._history,
            "model_settings": get_model_settings(self.provider),
        }

        tool_call_count = 0
        final_result = None
        async for event in self.agent.run_stream_events(text, **run_kwargs):
            if isinstance(event, PartStartEvent):
                if isinstance(event.part, ThinkingPart):
                    if not self._in_thinking:
                        self._in_thinking = True
                        self._emit({"type": "thinking_start"})
                    self._emit_delta("thinking_delta", event.part.content)
                else:
                    self._end_thinking()
                    if isinstance(event.part, TextPart):
                        self._emit_delta("text_delta", event.part.content)

            elif isinstance(event, PartDeltaEvent):
                if isinstance(event.delta, TextPartDelta):
                    self._emit_delta("text_delta", event.delta.content_delta)
                elif isinstance(event.delta, ThinkingPartDelta):
                    self._emit_delta("thinking_delta", event.delta.content_delta or "")

            elif isinstance(event, FunctionToolCallEvent):
                self._end_thinking()
                tool_call_count += 1
                logger.debug("Tool call: %s", event.part.tool_name)
                try:
                    args = event.part.args_as_dict()
                except Exception:
                    args = {}
                self._emit({
                    "type": "tool_execution_start",
                    "toolCallId": event.part.tool_call_id,
                    "toolName": event.part.tool_name,
                    "args": args,
                })

            elif isinstance(event, FunctionToolResultEvent):
                result = event.result
                if isinstance(result, RetryPromptPart):
                    output = result.model_response()
                    is_error = True
                else:
                    output = _tool_result_text(result.content)
                    is_error = False
                self._emit({
                    "type": "tool_execution_end",
                    "toolCallId": result.tool_call_id,
                    "result": {"content": [{"type": "text", "text": output}]},
                    "isError": is_error,
                })

            elif isinstance(event, AgentRunResultEvent):
                final_result = event

        self._end_thinking()
        if final_result is not None:
            self._history = list(final_result.result.all_messages())
            await asyncio.to_thread(save_history, self.session_dir, self._history)

        logger.debug("Agent stream complete: %d tool calls", tool_call_count)
        self._emit({"type": "message_end"})
        self._emit({"type": "agent_end"})


class PydanticAISessionFactory:
    """Creates a Pydantic AI session per agent start or resume."""

    async def create(self, agent: AgentRecord, session_dir: str, resume: bool) -> PydanticAISession:
        directory = Path(session_dir)
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)

        history: list[ModelMessage] = []
        if resume:
            history = await asyncio.to_thread(load_history, directory)
            logger.debug("Restored %d messages for agent %s", len(history), agent.id)

        return PydanticAISession(
            agent=create_coding_agent(agent.workspace),
            provider=agent.provider,
            model_id=agent.model,
            session_dir=directory,
            history=history,
        )
