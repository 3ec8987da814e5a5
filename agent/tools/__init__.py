"""
Workspace tools available to coding agents.
"""
from .code_execution import execute_shell, truncate_output
from .file_operations import list_files, read_file, resolve_workspace_path, write_file

__all__ = [
    "execute_shell",
    "truncate_output",
    "list_files",
    "read_file",
    "resolve_workspace_path",
    "write_file",
]
