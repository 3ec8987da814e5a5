"""
Configuration module for the agent swarm.

Exports the main configuration classes and functions for use throughout the application.
"""

from .defaults import AVAILABLE_MODELS, DEFAULT_MODEL, DEFAULT_PROVIDER
from .loader import get_config, load_config, load_config_file, merge_configs, strip_jsonc_comments
from .main_config import Config
from .markdown_loader import (
    AGENTS_MD_FILENAME,
    CLAUDE_MD_FILENAME,
    find_markdown_file,
    load_system_prompt_markdown,
)
from .models import ModelRegistry, format_model_info
from .providers import ModelProvider, ProviderRegistry, provider_registry

__all__ = [
    # Constants
    "DEFAULT_MODEL",
    "DEFAULT_PROVIDER",
    "AVAILABLE_MODELS",
    "CLAUDE_MD_FILENAME",
    "AGENTS_MD_FILENAME",
    # Config models
    "Config",
    # Loader functions
    "load_config",
    "get_config",
    "load_config_file",
    "merge_configs",
    "strip_jsonc_comments",
    # Markdown loader functions
    "load_system_prompt_markdown",
    "find_markdown_file",
    # Models and providers
    "ModelRegistry",
    "format_model_info",
    "ModelProvider",
    "ProviderRegistry",
    "provider_registry",
]
