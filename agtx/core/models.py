"""Data models for agtx tasks and projects."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from agtx.constants import AGTX_DIR, SLUG_ID_LENGTH, SLUG_TITLE_MAX_LENGTH, WINDOW_PREFIX, WORKTREES_DIR
from agtx.utils import slugify


class TaskStatus(str, Enum):
    """Workflow states in board order."""

    BACKLOG = "backlog"
    PLANNING = "planning"
    RUNNING = "running"
    REVIEW = "review"
    DONE = "done"

    @property
    def position(self) -> int:
        return list(TaskStatus).index(self)

    @classmethod
    def columns(cls) -> tuple["TaskStatus", ...]:
        return tuple(cls)


def _utcnow() -> datetime:
    return datetime.now(UTC)


def make_slug(task_id: str, title: str) -> str:
    """Build `<id prefix>-<slugified title>`; falls back to the id prefix alone."""
    prefix = task_id[:SLUG_ID_LENGTH]
    title_part = slugify(title, SLUG_TITLE_MAX_LENGTH)
    return f"{prefix}-{title_part}" if title_part else prefix


def session_name_for(project_root: Path) -> str:
    """tmux session name for a project; tmux rejects "." and ":" in session names."""
    return project_root.name.replace(".", "_").replace(":", "_")


def window_name_for(slug: str) -> str:
    return f"{WINDOW_PREFIX}{slug}"


def window_target(session_name: str, slug: str) -> str:
    """tmux target for a task window: `<session>:task-<slug>`."""
    return f"{session_name}:{window_name_for(slug)}"


def worktree_path_for(project_root: Path, slug: str) -> Path:
    return project_root / AGTX_DIR / WORKTREES_DIR / slug


@dataclass
class Task:
    """One unit of work moving through the board.

    `worktree_path` and `session_target` are recorded when the task enters
    planning and cleared when its resources are removed.
    """

    id: str
    slug: str
    title: str
    agent: str
    project_id: str
    status: TaskStatus = TaskStatus.BACKLOG
    description: str = ""
    worktree_path: Optional[str] = None
    session_target: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    @classmethod
    def new(cls, title: str, agent: str, project_id: str, description: str = "") -> "Task":
        task_id = uuid.uuid4().hex
        return cls(
            id=task_id,
            slug=make_slug(task_id, title),
            title=title,
            agent=agent,
            project_id=project_id,
            description=description,
        )


@dataclass(frozen=True)
class Project:
    """A git checkout whose tasks share one tmux session named after it."""

    name: str
    root: Path

    @classmethod
    def from_root(cls, root: Path | str) -> "Project":
        resolved = Path(root).expanduser()
        return cls(name=session_name_for(resolved), root=resolved)

    def worktree_path(self, slug: str) -> Path:
        return worktree_path_for(self.root, slug)

    def window_target(self, slug: str) -> str:
        return window_target(self.name, slug)
