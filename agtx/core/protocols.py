"""Capability protocols consumed by the transition orchestrator."""

from pathlib import Path
from typing import Protocol, runtime_checkable


@runtime_checkable
class WorktreeProvider(Protocol):
    """Creates and removes one isolated git worktree per task."""

    async def create_worktree(self, project_root: Path, slug: str) -> str:
        """Create (or return the already registered) worktree for `slug`.

        Returns:
            Absolute path of the worktree.

        Raises:
            WorktreeError: If git cannot produce the checkout.
        """
        ...

    async def remove_worktree(self, project_root: Path, worktree_path: str) -> None:
        """Remove a registered worktree.

        Raises:
            WorktreeMissingError: If the path is not a known worktree.
            WorktreeError: If removal is blocked (uncommitted changes, lock held).
        """
        ...

    async def worktree_exists(self, project_root: Path, slug: str) -> bool:
        """Return True if a worktree is registered for `slug`. Never raises."""
        ...


@runtime_checkable
class SessionProvider(Protocol):
    """Creates, kills, and writes to one terminal window per task."""

    async def create_window(self, session: str, window_name: str, working_dir: str) -> None:
        """Create `window_name` under `session` rooted at `working_dir`.

        Raises:
            SessionError: If the backend cannot create the window.
        """
        ...

    async def kill_window(self, target: str) -> None:
        """Destroy `session:window`. A missing target counts as success.

        Raises:
            SessionError: If the backend fails for any other reason.
        """
        ...

    async def send_keys(self, target: str, text: str) -> None:
        """Type `text` literally into `session:window`, then submit it.

        Raises:
            SessionError: If the target window does not exist or tmux fails.
        """
        ...

    async def window_exists(self, target: str) -> bool:
        """Return True if `session:window` exists. Never raises."""
        ...
