"""
Tests for jj workspace operations.

A small shell script stands in for the jj binary: it logs its arguments and
prints canned output for the commands the workspace parses.
"""
import os
import stat
from pathlib import Path

import pytest

from core import MergeResult, WorkspaceError
from core.workspace import JujutsuWorkspace

FAKE_JJ = """#!/bin/sh
echo "$@" >> "$(dirname "$0")/calls.log"
case "$1 $2" in
  "diff --name-only") printf 'src/app.py\\nREADME.md\\n' ;;
  "diff --stat") echo " 2 files changed, 3 insertions(+)" ;;
  "diff --git") echo "diff --git a/src/app.py b/src/app.py" ;;
  "log -r")
    case "$*" in
      *change_id*) echo "kxqpmzvu" ;;
      *) echo "${JJ_CHANGE_STATE:-has-changes}" ;;
    esac ;;
  "file list") printf 'src/app.py\\nREADME.md\\n' ;;
  "rebase -r")
    if [ -n "$JJ_FAIL_REBASE" ]; then echo "conflict in src/app.py" >&2; exit 1; fi ;;
esac
"""


@pytest.fixture
def fake_jj(temp_dir: Path) -> Path:
    path = temp_dir / "bin" / "jj"
    path.parent.mkdir()
    path.write_text(FAKE_JJ)
    path.chmod(path.stat().st_mode | stat.S_IEXEC)
    return path


@pytest.fixture
def jj(fake_jj: Path) -> JujutsuWorkspace:
    return JujutsuWorkspace(binary=str(fake_jj), timeout=10)


def calls(fake_jj: Path) -> list[str]:
    log = fake_jj.parent / "calls.log"
    return log.read_text().splitlines() if log.exists() else []


class TestLifecycle:
    """Test creating, deleting and merging workspaces."""

    @pytest.mark.asyncio
    async def test_create(self, jj, fake_jj, temp_dir):
        base = str(temp_dir)

        workspace = await jj.create(base, "abc12345", "Fix the bug")

        assert workspace == f"{base}/.pi/swarm/workspaces/abc12345"
        assert Path(base, ".pi/swarm/workspaces").is_dir()
        assert calls(fake_jj) == [
            f"workspace add {workspace} --name abc12345 -m Fix the bug -r default@"
        ]

    @pytest.mark.asyncio
    async def test_delete_forgets_and_removes(self, jj, fake_jj, temp_dir):
        workspace = temp_dir / "ws"
        workspace.mkdir()
        (workspace / "file.txt").write_text("x")

        await jj.delete(str(temp_dir), "abc12345", str(workspace))

        assert not workspace.exists()
        assert calls(fake_jj) == ["workspace forget abc12345"]

    @pytest.mark.asyncio
    async def test_merge_rebases_current_change(self, jj, fake_jj, temp_dir):
        result = await jj.merge(str(temp_dir), str(temp_dir))

        assert result == MergeResult(success=True)
        assert calls(fake_jj)[-1] == "rebase -r kxqpmzvu -d default@"

    @pytest.mark.asyncio
    async def test_merge_failure(self, jj, temp_dir, monkeypatch):
        monkeypatch.setenv("JJ_FAIL_REBASE", "1")

        result = await jj.merge(str(temp_dir), str(temp_dir))

        assert result.success is False
        assert "conflict in src/app.py" in result.error


class TestChanges:
    """Test describing and starting changes."""

    @pytest.mark.asyncio
    async def test_start_change_describes_empty_change(self, jj, fake_jj, temp_dir, monkeypatch):
        monkeypatch.setenv("JJ_CHANGE_STATE", "empty")

        await jj.start_change(str(temp_dir), "Next step")

        assert calls(fake_jj)[-1] == "describe -m Next step"

    @pytest.mark.asyncio
    async def test_start_change_creates_new_change(self, jj, fake_jj, temp_dir):
        await jj.start_change(str(temp_dir), "Next step")

        assert calls(fake_jj)[-1] == "new -m Next step"


class TestDiffs:
    """Test diff queries."""

    @pytest.mark.asyncio
    async def test_modified_files(self, jj, temp_dir):
        assert await jj.modified_files(str(temp_dir)) == ["src/app.py", "README.md"]

    @pytest.mark.asyncio
    async def test_diff_and_stat(self, jj, temp_dir):
        assert (await jj.diff_stat(str(temp_dir))).strip() == "2 files changed, 3 insertions(+)"
        assert (await jj.diff(str(temp_dir))).startswith("diff --git")

    @pytest.mark.asyncio
    async def test_diff_failure_is_empty(self, temp_dir):
        jj = JujutsuWorkspace(binary=os.path.join(str(temp_dir), "missing-jj"))

        assert await jj.diff(str(temp_dir)) == ""
        assert await jj.modified_files(str(temp_dir)) == []


class TestErrors:
    """Test command failures."""

    @pytest.mark.asyncio
    async def test_missing_binary(self, temp_dir):
        jj = JujutsuWorkspace(binary=os.path.join(str(temp_dir), "missing-jj"))

        with pytest.raises(WorkspaceError):
            await jj.describe(str(temp_dir), "x")


class TestFiles:
    """Test listing workspace files."""

    @pytest.mark.asyncio
    async def test_list_files_uses_jj(self, jj, fake_jj, temp_dir):
        assert await jj.list_files(str(temp_dir)) == ["README.md", "src/app.py"]
        assert calls(fake_jj)[-1] == "file list"

    @pytest.mark.asyncio
    async def test_list_files_walks_tree_without_jj(self, temp_dir):
        jj = JujutsuWorkspace(binary=os.path.join(str(temp_dir), "missing-jj"))
        (temp_dir / ".jj").mkdir()
        (temp_dir / ".jj" / "repo").write_text("x")
        (temp_dir / "node_modules").mkdir()
        (temp_dir / "node_modules" / "dep.js").write_text("x")
        (temp_dir / "src").mkdir()
        (temp_dir / "src" / "app.py").write_text("x")
        (temp_dir / "README.md").write_text("x")

        assert await jj.list_files(str(temp_dir)) == ["README.md", os.path.join("src", "app.py")]

    @pytest.mark.asyncio
    async def test_list_files_missing_directory(self, temp_dir):
        jj = JujutsuWorkspace(binary=os.path.join(str(temp_dir), "missing-jj"))

        assert await jj.list_files(str(temp_dir / "nope")) == []
