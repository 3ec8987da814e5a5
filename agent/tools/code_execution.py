"""
Shell execution tool.
"""
import asyncio
from pathlib import Path

from config.defaults import MAX_TOOL_OUTPUT_LENGTH, SHELL_TIMEOUT_SECONDS


def truncate_output(output: str, limit: int = MAX_TOOL_OUTPUT_LENGTH) -> str:
    if len(output) <= limit:
        return output
    return output[:limit] + f"\n... (truncated {len(output) - limit} characters)"


async def execute_shell(command: str, cwd: Path, timeout: int = SHELL_TIMEOUT_SECONDS) -> str:
    """
    Run a shell command in the workspace.

    Args:
        command: Shell command to execute
        cwd: Working directory, the agent's workspace
        timeout: Maximum execution time in seconds

    Returns:
        Combined stdout and stderr, with the exit code when non-zero
    """
    process = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        cwd=str(cwd),
    )

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return f"Command timed out after {timeout} seconds"

    result = stdout.decode(errors="replace")
    if process.returncode != 0:
        result += f"\n(Exit code: {process.returncode})"
    return truncate_output(result) or "Command completed successfully (no output)"
