"""ModelInfo model."""

from pydantic import BaseModel


class ModelInfo(BaseModel):
    provider: str
    modelId: str
    name: str
