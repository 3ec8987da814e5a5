"""
File operation tools scoped to an agent workspace.

Every path is resolved against the workspace root and rejected if it
escapes it, so an agent can only touch its own checkout.
"""
import asyncio
from pathlib import Path

# Default limits
DEFAULT_LINE_LIMIT = 2000
MAX_LINE_LENGTH = 2000
MAX_LIST_ENTRIES = 500

# Directories never worth listing
IGNORED_DIRS = {".git", ".jj", "node_modules", "__pycache__", ".venv"}


def resolve_workspace_path(root: Path, path: str) -> Path:
    """
    Resolve ``path`` inside ``root``.

    Raises:
        ValueError: If the path points outside the workspace
    """
    root = root.resolve()
    candidate = (root / path).resolve()
    if candidate != root and root not in candidate.parents:
        raise ValueError(f"Path is outside the workspace: {path}")
    return candidate


def _truncate_line(line: str) -> str:
    if len(line) > MAX_LINE_LENGTH:
        return line[:MAX_LINE_LENGTH] + "..."
    return line


def _read_file(root: Path, path: str, offset: int, limit: int) -> str:
    file_path = resolve_workspace_path(root, path)
    if not file_path.is_file():
        return f"Error: file not found: {path}"

    try:
        lines = file_path.read_text(encoding="utf-8").splitlines()
    except UnicodeDecodeError:
        return f"Error: {path} is not a text file"

    selected = lines[offset:offset + limit]
    numbered = [f"{offset + i + 1:6d}\t{_truncate_line(line)}" for i, line in enumerate(selected)]
    result = "\n".join(numbered)
    if offset + limit < len(lines):
        result += f"\n\n(File has {len(lines)} lines; use offset={offset + limit} to read more)"
    return result or "(empty file)"


def _write_file(root: Path, path: str, content: str) -> str:
    file_path = resolve_workspace_path(root, path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.write_text(content, encoding="utf-8")
    return f"Wrote {len(content)} characters to {path}"


def _list_files(root: Path, path: str) -> str:
    directory = resolve_workspace_path(root, path)
    if not directory.is_dir():
        return f"Error: directory not found: {path}"

    workspace_root = root.resolve()
    entries: list[str] = []
    for entry in sorted(directory.rglob("*")):
        if any(part in IGNORED_DIRS for part in entry.relative_to(workspace_root).parts):
            continue
        if entry.is_file():
            entries.append(str(entry.relative_to(workspace_root)))
        if len(entries) >= MAX_LIST_ENTRIES:
            entries.append(f"... (truncated at {MAX_LIST_ENTRIES} entries)")
            break
    return "\n".join(entries) or "(no files)"


async def read_file(root: Path, path: str, offset: int = 0, limit: int = DEFAULT_LINE_LIMIT) -> str:
    """Read a text file with line numbers."""
    try:
        return await asyncio.to_thread(_read_file, root, path, offset, limit)
    except (ValueError, OSError) as e:
        return f"Error: {e}"


async def write_file(root: Path, path: str, content: str) -> str:
    """Create or overwrite a file."""
    try:
        return await asyncio.to_thread(_write_file, root, path, content)
    except (ValueError, OSError) as e:
        return f"Error: {e}"


async def list_files(root: Path, path: str = ".") -> str:
    """List files below a directory, relative to the workspace root."""
    try:
        return await asyncio.to_thread(_list_files, root, path)
    except (ValueError, OSError) as e:
        return f"Error: {e}"
