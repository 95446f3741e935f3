"""Worktree and session provider implementations."""

from agtx.adapters.git_worktree import GitWorktreeProvider
from agtx.adapters.recording import ProviderCall, RecordingSessionProvider, RecordingWorktreeProvider
from agtx.adapters.timeouts import TimeoutSessionProvider, TimeoutWorktreeProvider
from agtx.adapters.tmux_window import TmuxSessionProvider

__all__ = [
    "GitWorktreeProvider",
    "ProviderCall",
    "RecordingSessionProvider",
    "RecordingWorktreeProvider",
    "TimeoutSessionProvider",
    "TimeoutWorktreeProvider",
    "TmuxSessionProvider",
]
