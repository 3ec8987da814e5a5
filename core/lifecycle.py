"""
Agent lifecycle state machine.

Transitions are pure: each takes an Agent record and returns an updated
copy, leaving the input untouched. Transitions do not check guards; callers
pre-check with the ``can_agent_*`` predicates before doing side-effecting
work, and raise GuardViolationError themselves when a guard fails.
"""

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, Literal

from .models import AGENT_STATUSES, Agent, AgentStatus, now_ts, parse_ts

AgentAction = Literal["continue_active", "resume_session", "start_fresh"]

DEFAULT_AGENT_NAME = "unnamed"
DEFAULT_TASK_NAME = "task"
MAX_GENERATED_NAME_LENGTH = 20
GENERATED_NAME_WORDS = 3


# =============================================================================
# Output Log
# =============================================================================


def append_output(output: str, event: Any) -> str:
    """Append one event to a newline-delimited JSON log."""
    return output + json.dumps(event) + "\n"


def parse_output_lines(output: str) -> list[str]:
    """Split a log into its non-empty lines."""
    return [line for line in output.split("\n") if line]


# =============================================================================
# Validation and Guards
# =============================================================================


def is_valid_agent_status(value: Any) -> bool:
    return isinstance(value, str) and value in AGENT_STATUSES


def can_agent_receive_instruction(agent: Agent) -> bool:
    return agent.status in ("running", "waiting")


def can_agent_be_started(agent: Agent) -> bool:
    return agent.status in ("pending", "stopped")


def can_agent_be_stopped(agent: Agent) -> bool:
    return agent.status == "running"


def can_agent_be_merged(agent: Agent) -> bool:
    return agent.status in ("completed", "waiting", "stopped")


def can_agent_be_deleted(agent: Agent) -> bool:
    return agent.status != "running"


def can_agent_be_reset(agent: Agent) -> bool:
    return agent.status in ("error", "stopped", "completed")


def can_agent_be_completed(agent: Agent) -> bool:
    return agent.status == "waiting"


def can_agent_be_resumed(agent: Agent) -> bool:
    return agent.status == "stopped"


def can_agent_be_interrupted(agent: Agent) -> bool:
    return agent.status == "running"


def determine_agent_action(has_session: bool, status: AgentStatus) -> AgentAction:
    """
    Decide how to continue an agent when a new instruction arrives.

    A live session for a running or waiting agent is reused. A stopped agent
    always has its session rebuilt from history, since any handle it still
    holds was aborted. Everything else, including running or waiting agents
    whose session was lost on restart, starts fresh.
    """
    if has_session and status in ("running", "waiting"):
        return "continue_active"
    if status == "stopped":
        return "resume_session"
    return "start_fresh"


# =============================================================================
# Transitions
# =============================================================================


def _stamp(agent: Agent) -> str:
    # Keep updatedAt non-decreasing even if the wall clock steps backwards
    return max(now_ts(), agent.updatedAt)


def _transition(agent: Agent, status: AgentStatus, **changes: Any) -> Agent:
    return agent.model_copy(update={"status": status, "updatedAt": _stamp(agent), **changes})


def transition_to_running(agent: Agent) -> Agent:
    return _transition(agent, "running")


def transition_to_stopped(agent: Agent) -> Agent:
    return _transition(agent, "stopped")


def transition_to_waiting(agent: Agent) -> Agent:
    return _transition(agent, "waiting")


def transition_to_completed(agent: Agent) -> Agent:
    return _transition(agent, "completed")


def transition_to_error(agent: Agent, message: str) -> Agent:
    """Move to error and record the failure in the output log."""
    output = append_output(agent.output, {"type": "error", "message": message})
    return _transition(agent, "error", output=output)


def reset_agent_for_retry(agent: Agent) -> Agent:
    return _transition(agent, "pending", output="", modifiedFiles=[], diffStat="")


# =============================================================================
# Record Updates
# =============================================================================


def record_session_event(agent: Agent, event: Any) -> Agent:
    return agent.model_copy(
        update={"output": append_output(agent.output, event), "updatedAt": _stamp(agent)}
    )


def clear_agent_output(agent: Agent) -> Agent:
    return agent.model_copy(update={"output": "", "updatedAt": _stamp(agent)})


def with_instruction(agent: Agent, instruction: str) -> Agent:
    return agent.model_copy(update={"instruction": instruction, "updatedAt": _stamp(agent)})


def with_model(agent: Agent, provider: str, model: str) -> Agent:
    return agent.model_copy(
        update={"provider": provider, "model": model, "updatedAt": _stamp(agent)}
    )


def with_diff_info(agent: Agent, modified_files: list[str], diff_stat: str) -> Agent:
    return agent.model_copy(
        update={
            "modifiedFiles": list(modified_files),
            "diffStat": diff_stat,
            "updatedAt": _stamp(agent),
        }
    )


def create_agent_record(
    agent_id: str,
    name: str,
    instruction: str,
    workspace: str,
    base_path: str,
    provider: str,
    model: str,
) -> Agent:
    """Build a new pending agent."""
    now = now_ts()
    return Agent(
        id=agent_id,
        name=name or DEFAULT_AGENT_NAME,
        status="pending",
        instruction=instruction,
        workspace=workspace,
        basePath=base_path,
        createdAt=now,
        updatedAt=now,
        provider=provider,
        model=model,
    )


# =============================================================================
# Collection Helpers
# =============================================================================


def filter_agents_by_status(agents: Iterable[Agent], status: AgentStatus) -> list[Agent]:
    return [agent for agent in agents if agent.status == status]


def get_cleanup_candidates(agents: Iterable[Agent]) -> list[Agent]:
    """Agents whose work is finished and could be deleted."""
    return [agent for agent in agents if agent.status in ("completed", "error")]


def get_stale_agents(
    agents: Iterable[Agent], threshold_seconds: float, now: datetime | None = None
) -> list[Agent]:
    """Agents not updated within ``threshold_seconds``."""
    cutoff = (now or datetime.now(timezone.utc)) - timedelta(seconds=threshold_seconds)
    return [agent for agent in agents if parse_ts(agent.updatedAt) < cutoff]


def get_agent_ids(agents: Iterable[Agent]) -> list[str]:
    return [agent.id for agent in agents]


# =============================================================================
# Names and Models
# =============================================================================


def generate_name_from_instruction(instruction: str) -> str:
    """
    Derive a short slug from an instruction.

    Example:
        >>> generate_name_from_instruction("Fix the login bug")
        'fix-the-login'
    """
    cleaned = re.sub(r"[^a-z0-9\s]", "", instruction.strip().lower())
    words = cleaned.split()[:GENERATED_NAME_WORDS]
    return "-".join(words)[:MAX_GENERATED_NAME_LENGTH] or DEFAULT_TASK_NAME


def format_model_name(provider: str, model_id: str) -> str:
    return f"{provider}/{model_id}"


def parse_model_string(value: str) -> tuple[str, str] | None:
    """Split ``provider/model`` into its parts; model ids may contain slashes."""
    provider, sep, model_id = value.partition("/")
    if not sep:
        return None
    return provider, model_id


# =============================================================================
# Paths
# =============================================================================

# Paths are joined with a literal "/" and never normalized, so a base path
# with a trailing slash yields a doubled separator.


def build_workspace_path(base_path: str, agent_id: str) -> str:
    return f"{base_path}/.pi/swarm/workspaces/{agent_id}"


def build_workspaces_dir(base_path: str) -> str:
    return f"{base_path}/.pi/swarm/workspaces"


def build_sessions_dir(base_path: str) -> str:
    return f"{base_path}/.pi/swarm/sessions"


def build_agent_session_dir(base_path: str, agent_id: str) -> str:
    return f"{build_sessions_dir(base_path)}/{agent_id}"


def build_agent_metadata_path(base_path: str, agent_id: str) -> str:
    return f"{build_agent_session_dir(base_path, agent_id)}/agent.json"


