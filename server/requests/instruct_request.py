"""InstructRequest model."""

from pydantic import BaseModel


class InstructRequest(BaseModel):
    instruction: str = ""
