"""Git worktree provider backed by GitPython.

Worktrees live at `<project_root>/.agtx/worktrees/<slug>` on branch
`<branch_prefix><slug>`. GitPython calls block, so each operation runs in a
worker thread.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from git import Repo
from git.exc import GitCommandError, GitError, InvalidGitRepositoryError, NoSuchPathError

from agtx.constants import DEFAULT_BRANCH_PREFIX
from agtx.core.errors import WorktreeError, WorktreeMissingError
from agtx.core.models import worktree_path_for
from agtx.logging_config import get_logger

logger = get_logger(__name__)


def _open_repo(project_root: Path) -> Repo:
    try:
        return Repo(project_root)
    except (InvalidGitRepositoryError, NoSuchPathError) as exc:
        msg = f"Cannot manage worktrees: {project_root} is not a git repository"
        logger.error(msg)
        raise WorktreeError(msg) from exc


def _absolute(project_root: Path) -> Path:
    # git runs with the repository as cwd, so relative paths would resolve against it
    return Path(project_root).expanduser().absolute()


def registered_worktrees(repo: Repo) -> set[Path]:
    """Resolved paths of all worktrees git knows about (including the main checkout)."""
    porcelain = repo.git.worktree("list", "--porcelain")
    return {
        Path(line[len("worktree ") :]).resolve()
        for line in porcelain.splitlines()
        if line.startswith("worktree ")
    }


def _stderr(exc: GitCommandError) -> str:
    return str(exc.stderr or exc).strip()


class GitWorktreeProvider:
    """Creates and removes task worktrees with `git worktree`."""

    def __init__(self, *, branch_prefix: str = DEFAULT_BRANCH_PREFIX, force_remove: bool = False) -> None:
        self._branch_prefix = branch_prefix
        self._force_remove = force_remove

    def branch_for(self, slug: str) -> str:
        return f"{self._branch_prefix}{slug}"

    async def create_worktree(self, project_root: Path, slug: str) -> str:
        return await asyncio.to_thread(self._create_worktree, _absolute(project_root), slug)

    async def remove_worktree(self, project_root: Path, worktree_path: str) -> None:
        await asyncio.to_thread(self._remove_worktree, _absolute(project_root), Path(worktree_path))

    async def worktree_exists(self, project_root: Path, slug: str) -> bool:
        return await asyncio.to_thread(self._worktree_exists, _absolute(project_root), slug)

    def _create_worktree(self, project_root: Path, slug: str) -> str:
        worktree_path = worktree_path_for(project_root, slug)
        repo = _open_repo(project_root)

        try:
            known = registered_worktrees(repo)
        except GitCommandError as exc:
            raise WorktreeError(f"Failed to list worktrees in {project_root}: {_stderr(exc)}") from exc

        if worktree_path.resolve() in known:
            logger.info("Worktree {} exists, skipping creation", worktree_path)
            return str(worktree_path)
        if worktree_path.exists():
            raise WorktreeError(f"{worktree_path} exists but is not a registered worktree")

        try:
            worktree_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise WorktreeError(f"Cannot create {worktree_path.parent}: {exc}") from exc

        branch = self.branch_for(slug)
        try:
            repo.git.worktree("add", str(worktree_path), "-b", branch)
        except GitCommandError:
            # Branch may survive an earlier removal; check it out instead
            try:
                repo.git.worktree("add", str(worktree_path), branch)
            except GitCommandError as exc:
                msg = f"Failed to create worktree at {worktree_path}: {_stderr(exc)}"
                logger.error(msg)
                raise WorktreeError(msg) from exc

        logger.info("Created worktree at {} on branch {}", worktree_path, branch)
        return str(worktree_path)

    def _remove_worktree(self, project_root: Path, worktree_path: Path) -> None:
        repo = _open_repo(project_root)
        try:
            known = registered_worktrees(repo)
        except GitCommandError as exc:
            raise WorktreeError(f"Failed to list worktrees in {project_root}: {_stderr(exc)}") from exc

        if worktree_path.resolve() not in known:
            raise WorktreeMissingError(f"{worktree_path} is not a registered worktree")

        if not worktree_path.exists():
            # Directory deleted by hand; only the registration is left
            logger.info("Worktree {} directory missing, pruning registration", worktree_path)
            try:
                repo.git.worktree("prune")
            except GitCommandError as exc:
                raise WorktreeError(f"Failed to prune worktree {worktree_path}: {_stderr(exc)}") from exc
            return

        args = ["remove", str(worktree_path)]
        if self._force_remove:
            args.append("--force")
        try:
            repo.git.worktree(*args)
        except GitCommandError as exc:
            msg = f"Failed to remove worktree {worktree_path}: {_stderr(exc)}"
            logger.error(msg)
            raise WorktreeError(msg) from exc

        logger.info("Removed worktree {}", worktree_path)

    def _worktree_exists(self, project_root: Path, slug: str) -> bool:
        worktree_path = worktree_path_for(project_root, slug)
        try:
            return worktree_path.resolve() in registered_worktrees(Repo(project_root))
        except (GitError, OSError) as exc:
            logger.debug("Worktree lookup for {} failed: {}", slug, exc)
            return False
