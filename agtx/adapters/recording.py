"""In-memory providers that record every call.

Both providers can share one `calls` list so the order of worktree and
window operations can be checked across providers. They honor the same
contracts as the real adapters: creation is idempotent, killing a missing
window succeeds, removing an unknown worktree raises `WorktreeMissingError`,
and typing into a missing window raises `WindowMissingError`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from agtx.core.errors import ProviderError, WindowMissingError, WorktreeMissingError
from agtx.core.models import worktree_path_for


@dataclass(frozen=True)
class ProviderCall:
    provider: str
    operation: str
    args: tuple[str, ...]


@dataclass
class _Failures:
    """One-shot failures keyed by operation name."""

    pending: dict[str, ProviderError] = field(default_factory=dict)

    def arm(self, operation: str, error: ProviderError) -> None:
        self.pending[operation] = error

    def check(self, operation: str) -> None:
        error = self.pending.pop(operation, None)
        if error is not None:
            raise error


class RecordingWorktreeProvider:
    def __init__(self, calls: Optional[list[ProviderCall]] = None) -> None:
        self.calls: list[ProviderCall] = calls if calls is not None else []
        self.worktrees: dict[str, str] = {}
        self._failures = _Failures()

    def fail_next(self, operation: str, error: ProviderError) -> None:
        """Make the next call to `operation` raise `error`."""
        self._failures.arm(operation, error)

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call.provider == "worktree" and call.operation == operation)

    def _record(self, operation: str, *args: str) -> None:
        self.calls.append(ProviderCall(provider="worktree", operation=operation, args=args))

    async def create_worktree(self, project_root: Path, slug: str) -> str:
        self._record("create_worktree", str(project_root), slug)
        self._failures.check("create_worktree")
        path = str(worktree_path_for(Path(project_root), slug))
        self.worktrees[path] = slug
        return path

    async def remove_worktree(self, project_root: Path, worktree_path: str) -> None:
        self._record("remove_worktree", str(project_root), worktree_path)
        self._failures.check("remove_worktree")
        if worktree_path not in self.worktrees:
            raise WorktreeMissingError(f"{worktree_path} is not a registered worktree")
        del self.worktrees[worktree_path]

    async def worktree_exists(self, project_root: Path, slug: str) -> bool:
        self._record("worktree_exists", str(project_root), slug)
        return str(worktree_path_for(Path(project_root), slug)) in self.worktrees


class RecordingSessionProvider:
    def __init__(self, calls: Optional[list[ProviderCall]] = None) -> None:
        self.calls: list[ProviderCall] = calls if calls is not None else []
        # target -> working directory
        self.windows: dict[str, str] = {}
        self.sent: dict[str, list[str]] = {}
        self._failures = _Failures()

    def fail_next(self, operation: str, error: ProviderError) -> None:
        """Make the next call to `operation` raise `error`."""
        self._failures.arm(operation, error)

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call.provider == "session" and call.operation == operation)

    def _record(self, operation: str, *args: str) -> None:
        self.calls.append(ProviderCall(provider="session", operation=operation, args=args))

    async def create_window(self, session: str, window_name: str, working_dir: str) -> None:
        self._record("create_window", session, window_name, working_dir)
        self._failures.check("create_window")
        self.windows.setdefault(f"{session}:{window_name}", working_dir)

    async def kill_window(self, target: str) -> None:
        self._record("kill_window", target)
        self._failures.check("kill_window")
        self.windows.pop(target, None)

    async def send_keys(self, target: str, text: str) -> None:
        self._record("send_keys", target, text)
        self._failures.check("send_keys")
        if target not in self.windows:
            raise WindowMissingError(f"Window {target} does not exist")
        self.sent.setdefault(target, []).append(text)

    async def window_exists(self, target: str) -> bool:
        self._record("window_exists", target)
        return target in self.windows
