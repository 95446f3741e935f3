"""Wire configuration to the real git and tmux providers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from agtx.adapters.git_worktree import GitWorktreeProvider
from agtx.adapters.timeouts import TimeoutSessionProvider, TimeoutWorktreeProvider
from agtx.adapters.tmux_window import TmuxSessionProvider
from agtx.config import AgtxConfig, resolve_config
from agtx.core.agent_commands import AgentCommandBuilder
from agtx.core.models import Project
from agtx.core.orchestrator import TransitionOrchestrator
from agtx.core.protocols import SessionProvider, WorktreeProvider
from agtx.logging_config import get_logger

logger = get_logger(__name__)


def build_orchestrator(project_root: Path | str, config: Optional[AgtxConfig] = None) -> TransitionOrchestrator:
    """Create an orchestrator for the git checkout at `project_root`.

    Args:
        project_root: Main checkout of the project.
        config: Pre-loaded config; resolved from global + project files when omitted.
    """
    project = Project.from_root(project_root)
    resolved = config or resolve_config(project.root)

    worktrees: WorktreeProvider = GitWorktreeProvider(
        branch_prefix=resolved.git.branch_prefix,
        force_remove=resolved.git.force_remove,
    )
    sessions: SessionProvider = TmuxSessionProvider(binary=resolved.tmux.binary)

    seconds = resolved.timeouts.provider_seconds
    if seconds is not None:
        worktrees = TimeoutWorktreeProvider(worktrees, seconds)
        sessions = TimeoutSessionProvider(sessions, seconds)

    logger.info("Orchestrator ready for project {} at {}", project.name, project.root)
    return TransitionOrchestrator(
        project=project,
        worktrees=worktrees,
        sessions=sessions,
        commands=AgentCommandBuilder.from_config(resolved),
    )
