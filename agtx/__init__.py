"""agtx - task workflow orchestration over git worktrees and tmux windows."""

__version__ = "0.1.0"
