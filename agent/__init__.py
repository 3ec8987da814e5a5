"""
Pydantic AI coding agents.
Exports the agent builder and the session implementation used by the agent service.
"""
from .agent import SYSTEM_INSTRUCTIONS, build_system_prompt, create_coding_agent, resolve_model
from .session import PydanticAISession, PydanticAISessionFactory, load_history, save_history

__all__ = [
    # Agent creation
    "SYSTEM_INSTRUCTIONS",
    "build_system_prompt",
    "create_coding_agent",
    "resolve_model",
    # Sessions
    "PydanticAISession",
    "PydanticAISessionFactory",
    "load_history",
    "save_history",
]
