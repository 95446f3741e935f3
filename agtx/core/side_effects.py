"""Side-effect table: which provider calls each workflow edge performs, in order."""

from __future__ import annotations

from enum import Enum

from agtx.core.models import TaskStatus


class SideEffect(str, Enum):
    CREATE_WORKTREE = "create_worktree"
    CREATE_WINDOW = "create_window"
    SEND_PLAN_COMMAND = "send_plan_command"
    SEND_IMPLEMENT_COMMAND = "send_implement_command"
    KILL_WINDOW = "kill_window"
    REMOVE_WORKTREE = "remove_worktree"


EDGE_SIDE_EFFECTS: dict[tuple[TaskStatus, TaskStatus], tuple[SideEffect, ...]] = {
    (TaskStatus.BACKLOG, TaskStatus.PLANNING): (
        SideEffect.CREATE_WORKTREE,
        SideEffect.CREATE_WINDOW,
        SideEffect.SEND_PLAN_COMMAND,
    ),
    (TaskStatus.PLANNING, TaskStatus.RUNNING): (SideEffect.SEND_IMPLEMENT_COMMAND,),
    # Window and worktree stay open for review
    (TaskStatus.RUNNING, TaskStatus.REVIEW): (),
    (TaskStatus.REVIEW, TaskStatus.DONE): (
        SideEffect.KILL_WINDOW,
        SideEffect.REMOVE_WORKTREE,
    ),
    # Resume reuses the existing window and worktree
    (TaskStatus.REVIEW, TaskStatus.RUNNING): (),
}

DELETE_SIDE_EFFECTS: tuple[SideEffect, ...] = (
    SideEffect.KILL_WINDOW,
    SideEffect.REMOVE_WORKTREE,
)


def side_effects_for(source: TaskStatus, target: TaskStatus) -> tuple[SideEffect, ...] | None:
    """Ordered side effects for a legal edge, or None when the edge is not in the table."""
    return EDGE_SIDE_EFFECTS.get((source, target))


def delete_side_effects(status: TaskStatus) -> tuple[SideEffect, ...]:
    """Cleanup for deleting a task; backlog tasks never had resources."""
    if status == TaskStatus.BACKLOG:
        return ()
    return DELETE_SIDE_EFFECTS
