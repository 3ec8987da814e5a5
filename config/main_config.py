"""Main Config model."""

from pydantic import BaseModel, Field

from .defaults import (
    DEFAULT_CORS_ORIGINS,
    DEFAULT_HOST,
    DEFAULT_MODEL,
    DEFAULT_OBSERVER_QUEUE_SIZE,
    DEFAULT_PORT,
    DEFAULT_PROVIDER,
)


class Config(BaseModel):
    """Main configuration model."""

    host: str = Field(
        default=DEFAULT_HOST,
        description="Interface the server binds to",
    )
    port: int = Field(
        default=DEFAULT_PORT,
        description="Port the server listens on",
    )
    base_path: str | None = Field(
        default=None,
        description="Repository root that agent workspaces branch from (defaults to cwd)",
    )
    default_provider: str = Field(
        default=DEFAULT_PROVIDER,
        description="Provider of the preferred default model",
    )
    default_model: str = Field(
        default=DEFAULT_MODEL,
        description="Preferred default model when its provider is available",
    )
    observer_queue_size: int = Field(
        default=DEFAULT_OBSERVER_QUEUE_SIZE,
        ge=1,
        description="Outbound messages buffered per WebSocket observer",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CORS_ORIGINS),
        description="Allowed CORS origins",
    )
