"""Provider wrappers that bound every call with a timeout.

A timed-out call raises the provider's own error type, so the orchestrator
treats it exactly like that side effect failing. Existence checks return
False on timeout. The wrapped call is cancelled; a git call already running
in a worker thread finishes in the background.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, TypeVar

from agtx.core.errors import ProviderError, SessionError, WorktreeError
from agtx.core.protocols import SessionProvider, WorktreeProvider
from agtx.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


async def bounded(call: Awaitable[T], *, seconds: float, error_cls: type[ProviderError], operation: str) -> T:
    try:
        return await asyncio.wait_for(call, timeout=seconds)
    except asyncio.TimeoutError as exc:
        logger.error("{} timed out after {}s", operation, seconds)
        raise error_cls(f"{operation} timed out after {seconds}s") from exc


async def _probe(call: Awaitable[bool], *, seconds: float, operation: str) -> bool:
    try:
        return await asyncio.wait_for(call, timeout=seconds)
    except asyncio.TimeoutError:
        logger.warning("{} timed out after {}s, treating as absent", operation, seconds)
        return False


class TimeoutWorktreeProvider:
    def __init__(self, inner: WorktreeProvider, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("seconds must be > 0")
        self._inner = inner
        self._seconds = seconds

    async def create_worktree(self, project_root: Path, slug: str) -> str:
        return await bounded(
            self._inner.create_worktree(project_root, slug),
            seconds=self._seconds,
            error_cls=WorktreeError,
            operation=f"create_worktree {slug}",
        )

    async def remove_worktree(self, project_root: Path, worktree_path: str) -> None:
        await bounded(
            self._inner.remove_worktree(project_root, worktree_path),
            seconds=self._seconds,
            error_cls=WorktreeError,
            operation=f"remove_worktree {worktree_path}",
        )

    async def worktree_exists(self, project_root: Path, slug: str) -> bool:
        return await _probe(
            self._inner.worktree_exists(project_root, slug),
            seconds=self._seconds,
            operation=f"worktree_exists {slug}",
        )


class TimeoutSessionProvider:
    def __init__(self, inner: SessionProvider, seconds: float) -> None:
        if seconds <= 0:
            raise ValueError("seconds must be > 0")
        self._inner = inner
        self._seconds = seconds

    async def create_window(self, session: str, window_name: str, working_dir: str) -> None:
        await bounded(
            self._inner.create_window(session, window_name, working_dir),
            seconds=self._seconds,
            error_cls=SessionError,
            operation=f"create_window {session}:{window_name}",
        )

    async def kill_window(self, target: str) -> None:
        await bounded(
            self._inner.kill_window(target),
            seconds=self._seconds,
            error_cls=SessionError,
            operation=f"kill_window {target}",
        )

    async def send_keys(self, target: str, text: str) -> None:
        await bounded(
            self._inner.send_keys(target, text),
            seconds=self._seconds,
            error_cls=SessionError,
            operation=f"send_keys {target}",
        )

    async def window_exists(self, target: str) -> bool:
        return await _probe(
            self._inner.window_exists(target),
            seconds=self._seconds,
            operation=f"window_exists {target}",
        )
