"""Unit tests for the GitPython worktree provider."""

from pathlib import Path
from unittest.mock import MagicMock, call, patch

import pytest
from git.exc import GitCommandError

from agtx.adapters.git_worktree import GitWorktreeProvider
from agtx.core.errors import WorktreeError, WorktreeMissingError


def _porcelain(*paths: Path) -> str:
    blocks = [f"worktree {path}\nHEAD 0123456789abcdef\nbranch refs/heads/main" for path in paths]
    return "\n\n".join(blocks) + "\n"


def _fake_repo(registered: list[Path], add_errors: list[Exception] | None = None, remove_error=None) -> MagicMock:
    """Repo mock whose `git.worktree` answers list/add/remove/prune."""
    pending_add_errors = list(add_errors or [])
    repo = MagicMock()

    def worktree(*args: str) -> str:
        command = args[0]
        if command == "list":
            return _porcelain(*registered)
        if command == "add" and pending_add_errors:
            raise pending_add_errors.pop(0)
        if command == "remove" and remove_error is not None:
            raise remove_error
        return ""

    repo.git.worktree.side_effect = worktree
    return repo


def _git_error(stderr: str) -> GitCommandError:
    return GitCommandError(["git", "worktree"], 128, stderr=stderr)


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    return tmp_path.resolve()


class TestCreateWorktree:
    @pytest.mark.asyncio
    async def test_creates_worktree_on_task_branch(self, project_root):
        repo = _fake_repo([project_root])
        expected = project_root / ".agtx" / "worktrees" / "abc123-my-feature"

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            path = await GitWorktreeProvider().create_worktree(project_root, "abc123-my-feature")

        assert path == str(expected)
        assert expected.parent.is_dir()
        assert call("add", str(expected), "-b", "task/abc123-my-feature") in repo.git.worktree.call_args_list

    @pytest.mark.asyncio
    async def test_existing_registered_worktree_is_returned_unchanged(self, project_root):
        existing = project_root / ".agtx" / "worktrees" / "abc123"
        existing.mkdir(parents=True)
        repo = _fake_repo([project_root, existing])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            path = await GitWorktreeProvider().create_worktree(project_root, "abc123")

        assert path == str(existing)
        assert all(c.args[0] != "add" for c in repo.git.worktree.call_args_list)

    @pytest.mark.asyncio
    async def test_reuses_branch_left_behind_by_earlier_removal(self, project_root):
        repo = _fake_repo([project_root], add_errors=[_git_error("fatal: a branch named 'task/abc' already exists")])
        expected = project_root / ".agtx" / "worktrees" / "abc"

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            await GitWorktreeProvider(branch_prefix="agtx/").create_worktree(project_root, "abc")

        add_calls = [c for c in repo.git.worktree.call_args_list if c.args[0] == "add"]
        assert add_calls == [
            call("add", str(expected), "-b", "agtx/abc"),
            call("add", str(expected), "agtx/abc"),
        ]

    @pytest.mark.asyncio
    async def test_checkout_failure_raises_worktree_error(self, project_root):
        repo = _fake_repo(
            [project_root],
            add_errors=[
                _git_error("fatal: a branch named 'task/abc' already exists"),
                _git_error("fatal: 'task/abc' is already checked out at '/elsewhere'"),
            ],
        )

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            with pytest.raises(WorktreeError, match="already checked out"):
                await GitWorktreeProvider().create_worktree(project_root, "abc")

    @pytest.mark.asyncio
    async def test_unregistered_directory_in_the_way_is_an_error(self, project_root):
        (project_root / ".agtx" / "worktrees" / "abc").mkdir(parents=True)
        repo = _fake_repo([project_root])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            with pytest.raises(WorktreeError, match="not a registered worktree"):
                await GitWorktreeProvider().create_worktree(project_root, "abc")

    @pytest.mark.asyncio
    async def test_not_a_git_repository(self, project_root):
        with pytest.raises(WorktreeError, match="not a git repository"):
            await GitWorktreeProvider().create_worktree(project_root, "abc")


class TestRemoveWorktree:
    @pytest.mark.asyncio
    async def test_removes_registered_worktree_without_force(self, project_root):
        worktree = project_root / ".agtx" / "worktrees" / "abc"
        worktree.mkdir(parents=True)
        repo = _fake_repo([project_root, worktree])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            await GitWorktreeProvider().remove_worktree(project_root, str(worktree))

        assert call("remove", str(worktree)) in repo.git.worktree.call_args_list

    @pytest.mark.asyncio
    async def test_force_remove_is_configurable(self, project_root):
        worktree = project_root / ".agtx" / "worktrees" / "abc"
        worktree.mkdir(parents=True)
        repo = _fake_repo([project_root, worktree])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            await GitWorktreeProvider(force_remove=True).remove_worktree(project_root, str(worktree))

        assert call("remove", str(worktree), "--force") in repo.git.worktree.call_args_list

    @pytest.mark.asyncio
    async def test_unknown_path_raises_missing(self, project_root):
        repo = _fake_repo([project_root])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            with pytest.raises(WorktreeMissingError):
                await GitWorktreeProvider().remove_worktree(project_root, str(project_root / "nope"))

    @pytest.mark.asyncio
    async def test_blocked_removal_is_not_reported_as_missing(self, project_root):
        worktree = project_root / ".agtx" / "worktrees" / "abc"
        worktree.mkdir(parents=True)
        repo = _fake_repo(
            [project_root, worktree],
            remove_error=_git_error("fatal: contains modified or untracked files, use --force to delete it"),
        )

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            with pytest.raises(WorktreeError) as exc_info:
                await GitWorktreeProvider().remove_worktree(project_root, str(worktree))

        assert not isinstance(exc_info.value, WorktreeMissingError)

    @pytest.mark.asyncio
    async def test_deleted_directory_is_pruned(self, project_root):
        worktree = project_root / ".agtx" / "worktrees" / "abc"
        repo = _fake_repo([project_root, worktree])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            await GitWorktreeProvider().remove_worktree(project_root, str(worktree))

        assert call("prune") in repo.git.worktree.call_args_list
        assert all(c.args[0] != "remove" for c in repo.git.worktree.call_args_list)


class TestWorktreeExists:
    @pytest.mark.asyncio
    async def test_registered_slug_exists(self, project_root):
        worktree = project_root / ".agtx" / "worktrees" / "abc"
        repo = _fake_repo([project_root, worktree])

        with patch("agtx.adapters.git_worktree.Repo", return_value=repo):
            assert await GitWorktreeProvider().worktree_exists(project_root, "abc") is True
            assert await GitWorktreeProvider().worktree_exists(project_root, "other") is False

    @pytest.mark.asyncio
    async def test_lookup_failure_is_false(self, project_root):
        assert await GitWorktreeProvider().worktree_exists(project_root, "abc") is False
