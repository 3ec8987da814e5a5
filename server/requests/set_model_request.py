"""SetModelRequest model."""

from pydantic import BaseModel


class SetModelRequest(BaseModel):
    provider: str
    model: str
