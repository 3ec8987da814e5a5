"""
Agent swarm server entry point.
"""
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from agent import PydanticAISessionFactory
from config import ModelRegistry, get_config
from core import AgentService, AgentStore, FilePersistence, JujutsuWorkspace
from server import app, set_agent_service
from server.event_bus import get_event_bus
from server.logging_config import setup_logging

# Initialize logging before anything else
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load saved agents on startup and abort live sessions on shutdown."""
    config = get_config()
    base_path = config.base_path

    logger.info("Starting agent swarm server")
    logger.info("Repository: %s", base_path)
    logger.info("Default model: %s/%s", config.default_provider, config.default_model)

    service = AgentService(
        store=AgentStore(),
        event_bus=get_event_bus(),
        persistence=FilePersistence(base_path),
        workspace=JujutsuWorkspace(),
        sessions=PydanticAISessionFactory(),
        models=ModelRegistry(preferred_model=config.default_model),
        base_path=base_path,
    )
    await service.load()
    set_agent_service(service)
    logger.info("Agent service ready")

    yield

    logger.info("Shutting down agent sessions...")
    await service.close()
    set_agent_service(None)
    logger.info("Agent sessions stopped")


app.router.lifespan_context = lifespan


def main() -> None:
    """Start the swarm server."""
    config = get_config()
    logger.info("Server listening on %s:%d", config.host, config.port)
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
