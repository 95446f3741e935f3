"""Error types raised by providers and the transition orchestrator."""

from __future__ import annotations

from typing import Literal, Optional

from agtx.core.models import TaskStatus
from agtx.core.side_effects import SideEffect

ResourceKind = Literal["worktree", "window"]


class ProviderError(RuntimeError):
    """Raised by a worktree or session provider when an external call fails."""


class WorktreeError(ProviderError):
    """git could not create or remove a worktree."""


class WorktreeMissingError(WorktreeError):
    """The path is not a registered worktree."""


class SessionError(ProviderError):
    """tmux could not create, kill, or write to a window."""


class WindowMissingError(SessionError):
    """The target window (or its session) does not exist."""


class TransitionError(RuntimeError):
    """Base class for failed transition or delete requests.

    `step` is the side effect that failed (None when nothing ran), `resource`
    the resource it touched and `cause` the provider error behind it. The
    task's recorded status is unchanged.
    """

    def __init__(
        self,
        message: str,
        *,
        task_slug: str,
        source: TaskStatus,
        target: Optional[TaskStatus],
        step: Optional[SideEffect] = None,
        resource: Optional[ResourceKind] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.task_slug = task_slug
        self.source = source
        self.target = target
        self.step = step
        self.resource = resource
        self.cause = cause


class InvalidTransitionError(TransitionError):
    """The requested edge is neither a forward step nor the review->running resume."""


class ResourceCreationFailedError(TransitionError):
    """Creating the worktree or the window failed; `resource` says which."""


class ResourceRemovalFailedError(TransitionError):
    """Removal failed for a reason other than the resource already being gone."""


class InjectionFailedError(TransitionError):
    """Sending a command into the task window failed."""
