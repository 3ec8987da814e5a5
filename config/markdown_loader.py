"""Project instruction files for agent system prompts.

Agents working in a workspace pick up CLAUDE.md or AGENTS.md from the
workspace or any of its parent directories.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

# File names to search for (in priority order)
CLAUDE_MD_FILENAME = "CLAUDE.md"
AGENTS_MD_FILENAME = "AGENTS.md"
INSTRUCTION_FILENAMES = (CLAUDE_MD_FILENAME, AGENTS_MD_FILENAME)


def find_markdown_file(starting_dir: Path) -> Path | None:
    """
    Search for an instruction file from ``starting_dir`` up to the filesystem root.

    CLAUDE.md takes priority over AGENTS.md in the same directory.
    """
    current = starting_dir.resolve()

    while True:
        for filename in INSTRUCTION_FILENAMES:
            candidate = current / filename
            if candidate.is_file():
                return candidate

        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_system_prompt_markdown(working_dir: str) -> str:
    """
    Load the nearest instruction file for a workspace.

    Returns:
        Markdown content, or an empty string if none is found or readable
    """
    starting_path = Path(working_dir)
    if not starting_path.is_dir():
        logger.warning("Working directory does not exist: %s", working_dir)
        return ""

    found_path = find_markdown_file(starting_path)
    if found_path is None:
        return ""

    try:
        content = found_path.read_text(encoding="utf-8")
    except OSError as e:
        logger.warning("Failed to load instructions from %s: %s", found_path, e)
        return ""

    logger.debug("Loaded system prompt instructions from %s", found_path)
    return content
