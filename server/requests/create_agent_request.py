"""CreateAgentRequest model."""

from pydantic import BaseModel, Field


class CreateAgentRequest(BaseModel):
    name: str = Field(default="unnamed", description="Display name for the agent")
    instruction: str = Field(default="", description="Task the agent works on when started")
    provider: str | None = None
    model: str | None = None
