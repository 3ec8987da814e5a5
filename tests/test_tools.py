"""
Tests for workspace-scoped agent tools.
"""
from pathlib import Path

import pytest

from agent.tools import (
    execute_shell,
    list_files,
    read_file,
    resolve_workspace_path,
    truncate_output,
    write_file,
)


class TestResolveWorkspacePath:
    """Test path confinement."""

    def test_relative_path(self, temp_dir):
        assert resolve_workspace_path(temp_dir, "src/app.py") == temp_dir.resolve() / "src" / "app.py"

    def test_root_itself(self, temp_dir):
        assert resolve_workspace_path(temp_dir, ".") == temp_dir.resolve()

    @pytest.mark.parametrize("path", ["../outside.txt", "/etc/passwd", "src/../../x"])
    def test_escape_rejected(self, temp_dir, path):
        with pytest.raises(ValueError, match="outside the workspace"):
            resolve_workspace_path(temp_dir, path)


class TestFileTools:
    """Test read, write and list."""

    @pytest.mark.asyncio
    async def test_write_then_read(self, temp_dir):
        result = await write_file(temp_dir, "src/app.py", "one\ntwo\n")

        assert result == "Wrote 8 characters to src/app.py"
        content = await read_file(temp_dir, "src/app.py")
        assert content == "     1\tone\n     2\ttwo"

    @pytest.mark.asyncio
    async def test_read_with_offset_and_limit(self, temp_dir):
        (temp_dir / "lines.txt").write_text("\n".join(f"line {i}" for i in range(1, 6)))

        content = await read_file(temp_dir, "lines.txt", offset=1, limit=2)

        assert content.startswith("     2\tline 2\n     3\tline 3")
        assert "use offset=3 to read more" in content

    @pytest.mark.asyncio
    async def test_read_missing_file(self, temp_dir):
        assert await read_file(temp_dir, "nope.txt") == "Error: file not found: nope.txt"

    @pytest.mark.asyncio
    async def test_escape_returns_error(self, temp_dir):
        result = await write_file(temp_dir, "../evil.txt", "x")

        assert result.startswith("Error: Path is outside the workspace")
        assert not (temp_dir.parent / "evil.txt").exists()

    @pytest.mark.asyncio
    async def test_list_skips_vcs_dirs(self, temp_dir):
        (temp_dir / ".jj").mkdir()
        (temp_dir / ".jj" / "store").write_text("x")
        (temp_dir / "src").mkdir()
        (temp_dir / "src" / "app.py").write_text("x")
        (temp_dir / "README.md").write_text("x")

        assert await list_files(temp_dir) == "README.md\nsrc/app.py"

    @pytest.mark.asyncio
    async def test_list_empty(self, temp_dir):
        assert await list_files(temp_dir) == "(no files)"


class TestShell:
    """Test shell execution."""

    @pytest.mark.asyncio
    async def test_runs_in_workspace(self, temp_dir):
        (temp_dir / "marker").write_text("x")

        assert (await execute_shell("ls", temp_dir)).strip() == "marker"

    @pytest.mark.asyncio
    async def test_exit_code_reported(self, temp_dir):
        result = await execute_shell("echo oops >&2; exit 3", temp_dir)

        assert "oops" in result
        assert result.endswith("(Exit code: 3)")

    @pytest.mark.asyncio
    async def test_no_output(self, temp_dir):
        assert await execute_shell("true", temp_dir) == "Command completed successfully (no output)"

    @pytest.mark.asyncio
    async def test_timeout(self, temp_dir):
        assert await execute_shell("sleep 5", temp_dir, timeout=0.1) == "Command timed out after 0.1 seconds"

    def test_truncate_output(self):
        assert truncate_output("abcdef", limit=3) == "abc\n... (truncated 3 characters)"
        assert truncate_output("abc", limit=3) == "abc"
