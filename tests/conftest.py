"""
Shared pytest fixtures for all tests.

The agent service is exercised against in-memory fakes for its session,
workspace, persistence and model collaborators.
"""
import asyncio
import tempfile
from pathlib import Path
from typing import Any, Iterator

import pytest
import pytest_asyncio

from core import AgentService, AgentStore, Event, MergeResult, ModelInfo, SessionError
from core.lifecycle import build_workspace_path


BASE_PATH = "/repo"

DEFAULT_SCRIPT = [
    {"type": "agent_start"},
    {"type": "message_update", "assistantMessageEvent": {"type": "text_delta", "delta": "Done."}},
    {"type": "message_end"},
    {"type": "agent_end"},
]


# =============================================================================
# Fakes
# =============================================================================


class FakeSession:
    """Session that replays a fixed script of raw events on every prompt."""

    def __init__(
        self,
        script: list[dict[str, Any]],
        fail: str | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        self.script = script
        self.fail = fail
        self.gate = gate
        self.running = False
        self.callbacks: list = []
        self.prompts: list[str] = []
        self.aborted = False
        self.abort_error: Exception | None = None
        self.model: tuple[str, str] | None = None

    def subscribe(self, callback) -> None:
        self.callbacks.append(callback)

    def emit(self, event: dict[str, Any]) -> None:
        for callback in self.callbacks:
            callback(event)

    async def prompt(self, text: str) -> None:
        if self.running:
            raise SessionError("Session is already running a prompt")
        self.prompts.append(text)
        if self.fail:
            raise SessionError(self.fail)
        self.running = True
        try:
            for event in self.script:
                # A gated session holds agent_end until the gate opens
                if self.gate is not None and event.get("type") == "agent_end":
                    await self.gate.wait()
                self.emit(event)
        finally:
            self.running = False

    async def abort(self) -> None:
        self.aborted = True
        if self.abort_error is not None:
            raise self.abort_error

    async def set_model(self, provider: str, model: str) -> None:
        self.model = (provider, model)


class FakeSessionFactory:
    def __init__(self) -> None:
        self.script: list[dict[str, Any]] = list(DEFAULT_SCRIPT)
        self.fail: str | None = None
        self.gate: asyncio.Event | None = None
        self.created: list[tuple[str, str, bool]] = []
        self.sessions: list[FakeSession] = []

    async def create(self, agent, session_dir: str, resume: bool) -> FakeSession:
        self.created.append((agent.id, session_dir, resume))
        session = FakeSession(self.script, self.fail, self.gate)
        self.sessions.append(session)
        return session

    @property
    def last(self) -> FakeSession:
        return self.sessions[-1]


class FakeWorkspace:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.files: list[str] = ["src/app.py"]
        self.stat = " src/app.py | 2 +-"
        self.diff_text = "diff --git a/src/app.py b/src/app.py"
        self.merge_result = MergeResult(success=True)
        self.delete_error: Exception | None = None

    async def create(self, base_path: str, agent_id: str, instruction: str) -> str:
        self.calls.append(("create", agent_id, instruction))
        return build_workspace_path(base_path, agent_id)

    async def modified_files(self, workspace: str) -> list[str]:
        return list(self.files)

    async def diff_stat(self, workspace: str) -> str:
        return self.stat

    async def diff(self, workspace: str) -> str:
        return self.diff_text

    async def merge(self, workspace: str, base_path: str) -> MergeResult:
        self.calls.append(("merge", workspace))
        return self.merge_result

    async def delete(self, base_path: str, agent_id: str, workspace: str) -> None:
        self.calls.append(("delete", agent_id))
        if self.delete_error is not None:
            raise self.delete_error

    async def describe(self, workspace: str, instruction: str) -> None:
        self.calls.append(("describe", instruction))

    async def start_change(self, workspace: str, instruction: str) -> None:
        self.calls.append(("start_change", instruction))

    async def list_files(self, workspace: str) -> list[str]:
        self.calls.append(("list_files", workspace))
        return ["README.md", "src/app.py"]


class FakePersistence:
    def __init__(self) -> None:
        self.saved: dict[str, Any] = {}
        self.deleted: list[str] = []
        self.stored: list = []

    async def save(self, agent) -> None:
        self.saved[agent.id] = agent

    async def load(self) -> list:
        return list(self.stored)

    async def delete(self, agent_id: str) -> None:
        self.deleted.append(agent_id)
        self.saved.pop(agent_id, None)


class FakeModels:
    def __init__(self) -> None:
        self.models = [
            ModelInfo(provider="anthropic", modelId="claude-sonnet-4-20250514", name="anthropic/claude-sonnet-4-20250514"),
            ModelInfo(provider="ollama", modelId="llama3.2", name="ollama/llama3.2"),
        ]

    def get_available(self) -> list[ModelInfo]:
        return list(self.models)

    def get_default_model(self) -> ModelInfo:
        return self.models[0]

    def find(self, provider: str, model: str) -> ModelInfo | None:
        for info in self.models:
            if info.provider == provider and info.modelId == model:
                return info
        return None


class RecordingEventBus:
    def __init__(self) -> None:
        self.events: list[Event] = []

    async def publish(self, event: Event) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [event.type for event in self.events]


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def temp_dir() -> Iterator[Path]:
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def event_bus() -> RecordingEventBus:
    return RecordingEventBus()


@pytest.fixture
def persistence() -> FakePersistence:
    return FakePersistence()


@pytest.fixture
def workspace() -> FakeWorkspace:
    return FakeWorkspace()


@pytest.fixture
def sessions() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def models() -> FakeModels:
    return FakeModels()


@pytest.fixture
def store() -> AgentStore:
    return AgentStore()


@pytest_asyncio.fixture
async def service(store, event_bus, persistence, workspace, sessions, models):
    """Agent service wired to fakes; live workers are stopped on teardown."""
    agent_service = AgentService(
        store=store,
        event_bus=event_bus,
        persistence=persistence,
        workspace=workspace,
        sessions=sessions,
        models=models,
        base_path=BASE_PATH,
    )
    yield agent_service
    await agent_service.close()


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Set up mock environment variables for testing."""
    # Set a test API key to avoid requiring real credentials
    monkeypatch.setenv("ANTHROPIC_API_KEY", "test-key-123")
    return monkeypatch
