"""Agent model."""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

AgentStatus = Literal["pending", "running", "completed", "waiting", "stopped", "error"]

AGENT_STATUSES: tuple[str, ...] = get_args(AgentStatus)


class Agent(BaseModel):
    """
    One managed coding task.

    Records are frozen: lifecycle functions return updated copies. The live
    session handle is kept by the agent store, never on the record, so a
    dump of this model is always safe to persist or send to observers.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    status: AgentStatus = "pending"
    instruction: str = ""
    workspace: str
    basePath: str
    createdAt: str
    updatedAt: str
    output: str = Field(
        default="",
        description="Append-only newline-delimited JSON log of session events",
    )
    modifiedFiles: list[str] = Field(default_factory=list)
    diffStat: str = ""
    model: str
    provider: str
