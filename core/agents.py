"""
Agent operations.

AgentService executes commands against the agent store: it checks lifecycle
guards, calls the workspace and session collaborators, applies transitions,
then saves and broadcasts the result. Every operation on one agent runs
under that agent's lock.

Session events arrive through a per-agent channel. The session pushes raw
events into the channel from its callback and a single worker task per
agent folds them into the output log and conversation view, so a streaming
session never races a command handler. A rejected prompt is pushed through
the same channel and moves the agent to error.

An instruction sent while a prompt is still running is queued behind
it. It is dropped if the session ends before its turn.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .conversation import get_display_events, parse_output, process_event
from .events import EventBus, agent_created, agent_deleted, agent_event, agent_updated
from .exceptions import GuardViolationError, NotFoundError
from .lifecycle import (
    build_agent_session_dir,
    can_agent_be_completed,
    can_agent_be_deleted,
    can_agent_be_interrupted,
    can_agent_be_merged,
    can_agent_be_reset,
    can_agent_be_resumed,
    can_agent_be_started,
    can_agent_be_stopped,
    clear_agent_output,
    create_agent_record,
    determine_agent_action,
    record_session_event,
    reset_agent_for_retry,
    transition_to_completed,
    transition_to_error,
    transition_to_running,
    transition_to_stopped,
    transition_to_waiting,
    with_diff_info,
    with_instruction,
    with_model,
)
from .models import Agent, ConversationEvent, ModelInfo, generate_id
from .state import AgentStore

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_RESUME_INSTRUCTION = (
    "Continue where you left off. Review what you've done so far and complete the remaining work."
)
INTERRUPT_RECORD = {"type": "interrupt", "message": "Interrupted by user"}
LOG_INSTRUCTION_PREVIEW = 200


# =============================================================================
# Collaborator Protocols
# =============================================================================

SessionCallback = Callable[[dict[str, Any]], None]


class AgentSession(Protocol):
    """A live model session working inside an agent's workspace."""

    def subscribe(self, callback: SessionCallback) -> None:
        """Register a callback for every raw session event."""
        ...

    async def prompt(self, text: str) -> None:
        """Run one instruction to completion. Raises on failure."""
        ...

    async def abort(self) -> None:
        ...

    async def set_model(self, provider: str, model: str) -> None:
        ...


class SessionFactory(Protocol):
    async def create(self, agent: Agent, session_dir: str, resume: bool) -> AgentSession:
        """Create a session, restoring history from ``session_dir`` when resuming."""
        ...


class Persistence(Protocol):
    async def save(self, agent: Agent) -> None:
        ...

    async def load(self) -> list[Agent]:
        """Load saved agents; agents saved as running come back stopped."""
        ...

    async def delete(self, agent_id: str) -> None:
        ...


@dataclass(frozen=True)
class MergeResult:
    success: bool
    error: str | None = None


class Workspace(Protocol):
    """Version-control workspace operations."""

    async def create(self, base_path: str, agent_id: str, instruction: str) -> str:
        ...

    async def modified_files(self, workspace: str) -> list[str]:
        ...

    async def diff_stat(self, workspace: str) -> str:
        ...

    async def diff(self, workspace: str) -> str:
        ...

    async def merge(self, workspace: str, base_path: str) -> MergeResult:
        ...

    async def delete(self, base_path: str, agent_id: str, workspace: str) -> None:
        ...

    async def describe(self, workspace: str, instruction: str) -> None:
        ...

    async def start_change(self, workspace: str, instruction: str) -> None:
        """Describe the current change if it is empty, otherwise start a new one."""
        ...

    async def list_files(self, workspace: str) -> list[str]:
        ...


class ModelSource(Protocol):
    def get_available(self) -> list[ModelInfo]:
        ...

    def get_default_model(self) -> ModelInfo:
        ...

    def find(self, provider: str, model: str) -> ModelInfo | None:
        ...


# =============================================================================
# Session Channel
# =============================================================================


@dataclass(frozen=True)
class _ChannelItem:
    session: AgentSession
    event: dict[str, Any] | None = None
    error: str | None = None


# =============================================================================
# Service
# =============================================================================


class AgentService:
    """Command execution for agents held in an AgentStore."""

    def __init__(
        self,
        store: AgentStore,
        event_bus: EventBus,
        persistence: Persistence,
        workspace: Workspace,
        sessions: SessionFactory,
        models: ModelSource,
        base_path: str,
    ) -> None:
        self.store = store
        self.event_bus = event_bus
        self.persistence = persistence
        self.workspace = workspace
        self.sessions = sessions
        self.models = models
        self.base_path = base_path
        self._channels: dict[str, asyncio.Queue[_ChannelItem]] = {}
        self._prompt_tasks: set[asyncio.Task[None]] = set()
        self._last_prompts: dict[str, asyncio.Task[None]] = {}

    # =========================================================================
    # Roster
    # =========================================================================

    async def load(self) -> list[Agent]:
        agents = await self.persistence.load()
        self.store.load(agents)
        return agents

    async def close(self) -> None:
        """Abort live sessions and stop all workers."""
        for agent_id, session in list(self.store.sessions.items()):
            await self._abort_quietly(agent_id, session)
        for task in list(self._prompt_tasks):
            task.cancel()
        workers = list(self.store.workers.values())
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*self._prompt_tasks, *workers, return_exceptions=True)
        self._channels.clear()
        self._last_prompts.clear()
        self.store.clear()

    async def drain(self) -> None:
        """Wait until every pending prompt and channel item has been handled."""
        while True:
            pending = [task for task in self._prompt_tasks if not task.done()]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        for channel in list(self._channels.values()):
            await channel.join()

    def list_agents(self) -> list[Agent]:
        return self.store.list_agents()

    def get_agent(self, agent_id: str) -> Agent:
        return self.store.require(agent_id)

    def get_available_models(self) -> list[ModelInfo]:
        return self.models.get_available()

    # =========================================================================
    # Commands
    # =========================================================================

    async def create_agent(
        self,
        name: str,
        instruction: str,
        provider: str | None = None,
        model: str | None = None,
    ) -> Agent:
        if not provider or not model:
            default = self.models.get_default_model()
            provider = provider or default.provider
            model = model or default.modelId

        agent_id = generate_id()
        workspace = await self.workspace.create(self.base_path, agent_id, instruction)
        agent = create_agent_record(
            agent_id, name, instruction, workspace, self.base_path, provider, model
        )

        async with self.store.lock(agent_id):
            self.store.put(agent)
            self.store.reset_conversation(agent_id)
            logger.info("Agent created: %s (%s/%s)", agent_id, provider, model)
            await self.event_bus.publish(agent_created(agent))
            await self.persistence.save(agent)
        return agent

    async def start_agent(self, agent_id: str) -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_started(agent):
                raise GuardViolationError("start", agent.status)
            return await self._start(agent)

    async def stop_agent(self, agent_id: str) -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_stopped(agent):
                raise GuardViolationError("stop", agent.status)

            session = self.store.sessions.get(agent_id)
            if session is not None:
                await self._abort_quietly(agent_id, session)

            agent = transition_to_stopped(agent)
            logger.info("Agent stopped: %s", agent_id)
            return await self._commit(agent)

    async def resume_agent(self, agent_id: str, instruction: str = "") -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_resumed(agent):
                raise GuardViolationError("resume", agent.status)
            return await self._resume(agent, instruction or DEFAULT_RESUME_INSTRUCTION)

    async def instruct_agent(self, agent_id: str, instruction: str) -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            session = self.store.sessions.get(agent_id)
            action = determine_agent_action(session is not None, agent.status)
            logger.debug("Instructing agent %s via %s", agent_id, action)

            if action == "continue_active":
                await self.workspace.start_change(agent.workspace, instruction)
                agent = transition_to_running(with_instruction(agent, instruction))
                agent = await self._commit(agent)
                self._prompt(agent_id, session, instruction)
                return agent

            if action == "resume_session":
                await self.workspace.start_change(agent.workspace, instruction)
                return await self._resume(with_instruction(agent, instruction), instruction)

            return await self._start(with_instruction(agent, instruction))

    async def interrupt_agent(self, agent_id: str, instruction: str = "") -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_interrupted(agent):
                raise GuardViolationError("interrupt", agent.status)

            session = self.store.sessions.get(agent_id)
            if session is not None:
                await self._abort_quietly(agent_id, session)

            instruction = instruction or DEFAULT_RESUME_INSTRUCTION
            agent = self._record(agent, INTERRUPT_RECORD)
            await self.workspace.start_change(agent.workspace, instruction)
            return await self._resume(agent, instruction)

    async def set_agent_model(self, agent_id: str, provider: str, model: str) -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if self.models.find(provider, model) is None:
                raise NotFoundError("Model", f"{provider}/{model}")

            session = self.store.sessions.get(agent_id)
            if session is not None:
                await session.set_model(provider, model)

            agent = with_model(agent, provider, model)
            logger.info("Agent %s model set to %s/%s", agent_id, provider, model)
            return await self._commit(agent)

    async def get_diff(self, agent_id: str) -> str:
        agent = self.store.require(agent_id)
        return await self.workspace.diff(agent.workspace)

    async def merge_agent(self, agent_id: str) -> MergeResult:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_merged(agent):
                raise GuardViolationError("merge", agent.status)
            result = await self.workspace.merge(agent.workspace, agent.basePath)
            if result.success:
                logger.info("Agent merged: %s", agent_id)
            else:
                logger.warning("Merge failed for agent %s: %s", agent_id, result.error)
            return result

    async def delete_agent(self, agent_id: str) -> None:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_deleted(agent):
                raise GuardViolationError("delete", agent.status)

            session = self.store.sessions.get(agent_id)
            if session is not None:
                await self._abort_quietly(agent_id, session)

            try:
                await self.workspace.delete(agent.basePath, agent.id, agent.workspace)
            except Exception as e:
                logger.warning("Failed to remove workspace for agent %s: %s", agent_id, e)

            worker = self.store.workers.get(agent_id)
            if worker is not None:
                worker.cancel()
            self._channels.pop(agent_id, None)
            self._last_prompts.pop(agent_id, None)
            self.store.remove(agent_id)

            await self.persistence.delete(agent_id)
            logger.info("Agent deleted: %s", agent_id)
            await self.event_bus.publish(agent_deleted(agent_id))

    async def fetch_agent(self, agent_id: str) -> Agent:
        """Refresh the agent's modified files and diff stat from its workspace."""
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            files = await self.workspace.modified_files(agent.workspace)
            stat = await self.workspace.diff_stat(agent.workspace)
            return await self._commit(with_diff_info(agent, files, stat))

    async def retry_agent(self, agent_id: str) -> Agent:
        """Reset a finished or failed agent and start its instruction again."""
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_reset(agent):
                raise GuardViolationError("retry", agent.status)

            session = self.store.sessions.pop(agent_id, None)
            if session is not None:
                await self._abort_quietly(agent_id, session)

            agent = reset_agent_for_retry(agent)
            self.store.put(agent)
            self.store.reset_conversation(agent_id)
            return await self._start(agent)

    async def complete_agent(self, agent_id: str) -> Agent:
        async with self.store.lock(agent_id):
            agent = self.store.require(agent_id)
            if not can_agent_be_completed(agent):
                raise GuardViolationError("complete", agent.status)
            return await self._commit(transition_to_completed(agent))

    def get_conversation(self, agent_id: str) -> list[ConversationEvent]:
        """Display events for an agent, including in-progress content."""
        agent = self.store.require(agent_id)
        events = get_display_events(self.store.conversation(agent_id))
        return events or parse_output(agent.output)

    async def get_workspace_files(self, agent_id: str | None = None) -> list[str]:
        """Files in the agent's workspace, or in the base repository for an unknown or absent agent."""
        agent = self.store.get(agent_id) if agent_id else None
        return await self.workspace.list_files(agent.workspace if agent is not None else self.base_path)

    # =========================================================================
    # Internals
    # =========================================================================

    async def _commit(self, agent: Agent) -> Agent:
        self.store.put(agent)
        await self.event_bus.publish(agent_updated(agent))
        await self.persistence.save(agent)
        return agent

    def _record(self, agent: Agent, event: dict[str, Any]) -> Agent:
        state = self.store.conversation(agent.id)
        agent = self.store.put(record_session_event(agent, event))
        self.store.conversations[agent.id] = process_event(state, event)
        return agent

    async def _start(self, agent: Agent) -> Agent:
        agent = clear_agent_output(agent)
        self.store.put(agent)
        self.store.reset_conversation(agent.id)

        session = await self._open_session(agent, resume=False)
        if agent.instruction:
            await self.workspace.describe(agent.workspace, agent.instruction)

        logger.info(
            "Agent %s starting with instruction: %s",
            agent.id,
            agent.instruction[:LOG_INSTRUCTION_PREVIEW],
        )
        agent = await self._commit(transition_to_running(agent))
        self._prompt(agent.id, session, agent.instruction)
        return agent

    async def _resume(self, agent: Agent, instruction: str) -> Agent:
        self.store.put(agent)
        session = await self._open_session(agent, resume=True)
        logger.info(
            "Agent %s resuming with instruction: %s",
            agent.id,
            instruction[:LOG_INSTRUCTION_PREVIEW],
        )
        agent = await self._commit(transition_to_running(agent))
        self._prompt(agent.id, session, instruction)
        return agent

    async def _open_session(self, agent: Agent, resume: bool) -> AgentSession:
        session_dir = build_agent_session_dir(agent.basePath, agent.id)
        session = await self.sessions.create(agent, session_dir, resume)
        channel = self._channel(agent.id)
        session.subscribe(lambda event: channel.put_nowait(_ChannelItem(session, event=event)))
        self.store.sessions[agent.id] = session
        return session

    async def _abort_quietly(self, agent_id: str, session: AgentSession) -> None:
        try:
            await session.abort()
        except Exception as e:
            logger.warning("Abort failed for agent %s: %s", agent_id, e)

    def _prompt(self, agent_id: str, session: AgentSession, text: str) -> None:
        """Run a prompt, queued behind the agent's in-flight prompt if there is one."""
        previous = self._last_prompts.get(agent_id)
        if previous is not None and previous.done():
            previous = None
        task = asyncio.create_task(self._run_prompt(agent_id, session, text, previous))
        self._prompt_tasks.add(task)
        task.add_done_callback(self._prompt_tasks.discard)
        self._last_prompts[agent_id] = task

    async def _run_prompt(
        self,
        agent_id: str,
        session: AgentSession,
        text: str,
        previous: asyncio.Task[None] | None = None,
    ) -> None:
        if previous is not None:
            await asyncio.wait([previous])
            async with self.store.lock(agent_id):
                agent = self.store.get(agent_id)
                if (
                    agent is None
                    or agent.status not in ("running", "waiting")
                    or self.store.sessions.get(agent_id) is not session
                ):
                    logger.info("Dropping queued instruction for agent %s", agent_id)
                    return
            logger.debug("Running queued instruction for agent %s", agent_id)

        try:
            await session.prompt(text)
        except Exception as e:
            logger.error("Session prompt failed for agent %s: %s", agent_id, e)
            channel = self._channels.get(agent_id)
            if channel is not None:
                channel.put_nowait(_ChannelItem(session, error=str(e) or type(e).__name__))

    # =========================================================================
    # Session Worker
    # =========================================================================

    def _channel(self, agent_id: str) -> asyncio.Queue[_ChannelItem]:
        channel = self._channels.get(agent_id)
        if channel is None:
            channel = asyncio.Queue()
            self._channels[agent_id] = channel
            self.store.workers[agent_id] = asyncio.create_task(self._consume(agent_id, channel))
        return channel

    async def _consume(self, agent_id: str, channel: asyncio.Queue[_ChannelItem]) -> None:
        while True:
            item = await channel.get()
            try:
                await self._handle(agent_id, item)
            except Exception:
                logger.exception("Failed to handle session event for agent %s", agent_id)
            finally:
                channel.task_done()

    async def _handle(self, agent_id: str, item: _ChannelItem) -> None:
        async with self.store.lock(agent_id):
            agent = self.store.get(agent_id)
            if agent is None or self.store.sessions.get(agent_id) is not item.session:
                return

            if item.error is not None:
                if agent.status == "error":
                    return
                await self._commit(transition_to_error(agent, item.error))
                return

            event = item.event
            previous_status = agent.status
            agent = self._record(agent, event)
            event_type = event.get("type") if isinstance(event, dict) else None
            if event_type == "agent_end" and agent.status == "running":
                agent = self.store.put(transition_to_waiting(agent))
            elif event_type == "agent_start" and agent.status == "waiting":
                # A queued instruction began after the previous run finished
                agent = self.store.put(transition_to_running(agent))

            await self.event_bus.publish(agent_event(agent_id, event))
            if agent.status != previous_status:
                await self._commit(agent)
