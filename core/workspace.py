"""
Jujutsu workspace operations.

Each agent works in its own ``jj`` workspace under the base repository. The
agent's changes are compared against the default workspace's current change
and merged by rebasing onto it.
"""

import asyncio
import logging
import os
import shutil
from pathlib import Path

from .agents import MergeResult
from .exceptions import WorkspaceError
from .lifecycle import build_workspace_path, build_workspaces_dir

logger = logging.getLogger(__name__)

JJ_BINARY = "jj"
WORKSPACE_COMMAND_TIMEOUT_S = 60
DEFAULT_REVISION = "default@"

# Directories skipped when listing files without jj
IGNORED_DIRS = {".jj", ".git", "node_modules"}


class JujutsuWorkspace:
    """Workspace collaborator backed by the ``jj`` command line."""

    def __init__(self, binary: str = JJ_BINARY, timeout: float = WORKSPACE_COMMAND_TIMEOUT_S) -> None:
        self.binary = binary
        self.timeout = timeout

    async def _run(self, cwd: str, *args: str) -> str:
        """
        Run a jj command and return its stdout.

        Raises:
            WorkspaceError: If the command cannot start, times out or exits non-zero
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise WorkspaceError(f"Failed to run {self.binary} {args[0]}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            process.kill()
            await process.wait()
            raise WorkspaceError(f"{self.binary} {args[0]} timed out after {self.timeout}s")

        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            raise WorkspaceError(f"{self.binary} {' '.join(args)} failed: {message}")
        return stdout.decode(errors="replace")

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create(self, base_path: str, agent_id: str, instruction: str) -> str:
        """Add a workspace for the agent whose first change descends from ``default@``."""
        workspace = build_workspace_path(base_path, agent_id)
        Path(build_workspaces_dir(base_path)).mkdir(parents=True, exist_ok=True)
        await self._run(
            base_path,
            "workspace", "add", workspace,
            "--name", agent_id,
            "-m", instruction,
            "-r", DEFAULT_REVISION,
        )
        logger.info("Created workspace %s", workspace)
        return workspace

    async def delete(self, base_path: str, agent_id: str, workspace: str) -> None:
        await self._run(base_path, "workspace", "forget", agent_id)
        await asyncio.to_thread(shutil.rmtree, workspace, True)
        logger.info("Removed workspace %s", workspace)

    async def merge(self, workspace: str, base_path: str) -> MergeResult:
        """Rebase the agent's current change onto the default workspace."""
        try:
            change_id = (await self._run(workspace, "log", "-r", "@", "--no-graph", "-T", "change_id")).strip()
            await self._run(base_path, "rebase", "-r", change_id, "-d", DEFAULT_REVISION)
        except WorkspaceError as e:
            return MergeResult(success=False, error=str(e))
        return MergeResult(success=True)

    # =========================================================================
    # Changes
    # =========================================================================

    async def describe(self, workspace: str, instruction: str) -> None:
        await self._run(workspace, "describe", "-m", instruction)

    async def is_current_change_empty(self, workspace: str) -> bool:
        try:
            output = await self._run(
                workspace, "log", "-r", "@", "--no-graph", "-T", 'if(empty, "empty", "has-changes")'
            )
        except WorkspaceError as e:
            logger.debug("Could not inspect current change in %s: %s", workspace, e)
            return False
        return output.strip() == "empty"

    async def start_change(self, workspace: str, instruction: str) -> None:
        if await self.is_current_change_empty(workspace):
            await self.describe(workspace, instruction)
        else:
            await self._run(workspace, "new", "-m", instruction)

    # =========================================================================
    # Diffs
    # =========================================================================

    async def _diff(self, workspace: str, flag: str) -> str:
        try:
            return await self._run(workspace, "diff", flag, "--from", DEFAULT_REVISION, "--to", "@")
        except WorkspaceError as e:
            logger.warning("Diff failed in %s: %s", workspace, e)
            return ""

    async def modified_files(self, workspace: str) -> list[str]:
        output = await self._diff(workspace, "--name-only")
        return [line for line in output.split("\n") if line]

    async def diff_stat(self, workspace: str) -> str:
        return await self._diff(workspace, "--stat")

    async def diff(self, workspace: str) -> str:
        return await self._diff(workspace, "--git")

    # =========================================================================
    # Files
    # =========================================================================

    async def list_files(self, workspace: str) -> list[str]:
        """
        List the files in a workspace, relative to its root.

        Uses ``jj file list``; if jj cannot run there, walks the directory
        instead. Returns an empty list when neither works.
        """
        try:
            output = await self._run(workspace, "file", "list")
        except WorkspaceError as e:
            logger.debug("jj file list failed in %s, walking the tree: %s", workspace, e)
            return await asyncio.to_thread(walk_files, workspace)
        return sorted(line for line in output.split("\n") if line)


def walk_files(root: str) -> list[str]:
    files = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if d not in IGNORED_DIRS]
        for filename in filenames:
            files.append(os.path.relpath(os.path.join(dirpath, filename), root))
    return sorted(files)
