"""Configuration loading utilities."""

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Any

from .defaults import CONFIG_FILENAME, CONFIG_JSON_FILENAME, GLOBAL_CONFIG_DIR
from .main_config import Config

logger = logging.getLogger(__name__)

# Environment variable names
HOST_ENV = "HOST"
PORT_ENV = "PORT"
BASE_PATH_ENV = "SWARM_BASE_PATH"


def strip_jsonc_comments(content: str) -> str:
    """
    Strip comments from JSONC content to convert to valid JSON.

    Handles:
    - Single-line comments: // comment
    - Multi-line comments: /* comment */

    Args:
        content: JSONC content string

    Returns:
        JSON string with comments removed
    """
    content = re.sub(r"/\*.*?\*/", "", content, flags=re.DOTALL)
    # Skip // inside string literals such as URLs
    content = re.sub(r'("(?:\\.|[^"\\])*")|//.*?$', lambda m: m.group(1) or "", content, flags=re.MULTILINE)
    return content


def load_config_file(path: Path) -> dict[str, Any] | None:
    """
    Load a config file from the given path.

    Supports both .json and .jsonc files with comment stripping.

    Returns:
        Parsed config dictionary or None if the file is missing or invalid
    """
    if not path.exists():
        return None

    try:
        content = path.read_text()
        if path.suffix == ".jsonc":
            content = strip_jsonc_comments(content)
        return json.loads(content)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return None


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two configuration dictionaries.

    Args:
        base: Base configuration
        override: Override configuration (takes precedence)

    Returns:
        Merged configuration dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value

    return result


def _env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    if HOST_ENV in os.environ:
        overrides["host"] = os.environ[HOST_ENV]
    if PORT_ENV in os.environ:
        overrides["port"] = os.environ[PORT_ENV]
    if BASE_PATH_ENV in os.environ:
        overrides["base_path"] = os.environ[BASE_PATH_ENV]
    return overrides


def load_config(project_root: Path | None = None) -> Config:
    """
    Load configuration from multiple sources with precedence.

    Sources, lowest precedence first:
    1. Global: ~/.pi/swarm/swarm.jsonc
    2. Project-level: swarm.jsonc or swarm.json in the project root
    3. Environment: HOST, PORT, SWARM_BASE_PATH

    Args:
        project_root: Project root directory (defaults to current working directory)

    Returns:
        Loaded and merged Config model
    """
    if project_root is None:
        project_root = Path.cwd()

    global_config_path = Path.home() / GLOBAL_CONFIG_DIR / CONFIG_FILENAME
    config_data = load_config_file(global_config_path) or {}

    for path in (project_root / CONFIG_FILENAME, project_root / CONFIG_JSON_FILENAME):
        project_config = load_config_file(path)
        if project_config:
            config_data = merge_configs(config_data, project_config)
            break

    config_data = merge_configs(config_data, _env_overrides())
    config = Config(**config_data)
    if config.base_path is None:
        config = config.model_copy(update={"base_path": str(project_root)})
    return config


@lru_cache(maxsize=1)
def get_config(project_root: Path | None = None) -> Config:
    """
    Get cached configuration.

    To reload the config, clear the cache with get_config.cache_clear().
    """
    return load_config(project_root or Path.cwd())
