"""
Pydantic AI coding agent for a single workspace.

The agent is built without a model; the session passes the agent's current
model on every run so it can be switched between prompts.
"""

from pathlib import Path

from pydantic_ai import Agent
from pydantic_ai.models import Model
from pydantic_ai.models.anthropic import AnthropicModelSettings
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.openai import OpenAIProvider
from pydantic_ai.settings import ModelSettings

from config import load_system_prompt_markdown, provider_registry
from config.defaults import MAX_OUTPUT_TOKENS

from .tools import execute_shell, list_files, read_file, write_file

# Providers pydantic-ai resolves from a "provider:model" string
NATIVE_PROVIDERS = {"anthropic", "openai"}

SYSTEM_INSTRUCTIONS = """You are a coding agent working in your own version-controlled workspace.

Your workspace is a separate checkout of the project. Every change you make
stays in it until a human reviews and merges it, so work freely.

Guidelines:
- Read the relevant files before changing them
- Keep changes focused on the instruction you were given
- Run the project's tests or build when you can to verify your work
- Finish with a short summary of what you changed and anything left to do
"""


def build_system_prompt(workspace: str) -> str:
    """Prepend the workspace's CLAUDE.md or AGENTS.md to the base instructions."""
    markdown_content = load_system_prompt_markdown(workspace)
    if markdown_content:
        return f"{markdown_content}\n\n{SYSTEM_INSTRUCTIONS}"
    return SYSTEM_INSTRUCTIONS


def resolve_model(provider: str, model_id: str) -> Model | str:
    """
    Map a provider and model id to something pydantic-ai can run.

    Hosted providers with native pydantic-ai support resolve from a
    ``provider:model`` string. Other providers are treated as
    OpenAI-compatible endpoints.
    """
    if provider in NATIVE_PROVIDERS:
        return f"{provider}:{model_id}"

    model_provider = provider_registry.get(provider)
    if model_provider is None:
        raise ValueError(f"Unknown provider: {provider}")
    return OpenAIChatModel(
        model_id,
        provider=OpenAIProvider(
            base_url=model_provider.base_url,
            api_key=model_provider.get_api_key() or "local",
        ),
    )


def get_model_settings(provider: str) -> ModelSettings:
    if provider == "anthropic":
        settings: AnthropicModelSettings = {"max_tokens": MAX_OUTPUT_TOKENS}
        return settings
    return {}


def create_coding_agent(workspace: str) -> Agent:
    """
    Create an agent whose tools operate inside ``workspace``.

    Args:
        workspace: Agent workspace directory

    Returns:
        Configured Pydantic AI Agent without a bound model
    """
    root = Path(workspace)
    agent = Agent(system_prompt=build_system_prompt(workspace))

    @agent.tool_plain
    async def read(path: str, offset: int = 0, limit: int = 2000) -> str:
        """Read a text file from the workspace.

        Args:
            path: File path relative to the workspace root
            offset: Line number to start reading from (0-based)
            limit: Maximum number of lines to read
        """
        return await read_file(root, path, offset, limit)

    @agent.tool_plain
    async def write(path: str, content: str) -> str:
        """Create or overwrite a file in the workspace.

        Args:
            path: File path relative to the workspace root
            content: Full new file content
        """
        return await write_file(root, path, content)

    @agent.tool_plain
    async def ls(path: str = ".") -> str:
        """List files below a directory in the workspace.

        Args:
            path: Directory relative to the workspace root
        """
        return await list_files(root, path)

    @agent.tool_plain
    async def bash(command: str) -> str:
        """Run a shell command in the workspace root.

        Args:
            command: Shell command to execute
        """
        return await execute_shell(command, root)

    return agent
