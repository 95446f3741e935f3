"""Transition orchestrator: couples the board workflow to worktree and tmux side effects.

Every status change goes through `TransitionOrchestrator.request_transition()`:

1. The edge is validated against the workflow (illegal edges raise before any
   provider call).
2. The edge's side effects from `EDGE_SIDE_EFFECTS` run in order and stop at
   the first failure.
3. Only when every step succeeded is an updated copy of the task returned.

Partial failures are not rolled back. The caller sees which step failed on the
raised `TransitionError` and can retry the same transition: worktree and
window creation accept an already satisfied state, removals accept absence.

Transitions on one task are serialized by a per-task `asyncio.Lock` owned by
the orchestrator instance; different tasks proceed in parallel.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import AsyncIterator, Awaitable, Callable, Optional

from agtx.core.agent_commands import AgentCommandBuilder
from agtx.core.errors import (
    InjectionFailedError,
    InvalidTransitionError,
    ProviderError,
    ResourceCreationFailedError,
    ResourceRemovalFailedError,
    TransitionError,
    WindowMissingError,
    WorktreeMissingError,
)
from agtx.core.models import Project, Task, TaskStatus, window_name_for
from agtx.core.protocols import SessionProvider, WorktreeProvider
from agtx.core.side_effects import SideEffect, delete_side_effects, side_effects_for
from agtx.core.workflow import classify, successor
from agtx.logging_config import get_logger

logger = get_logger(__name__)

_Step = Callable[[Task], Awaitable[Task]]


@dataclass(frozen=True)
class ResourceState:
    """Observed external resources of one task."""

    worktree_exists: bool
    window_exists: bool

    def matches(self, status: TaskStatus) -> bool:
        """True when resources agree with the status (both present iff planning/running/review)."""
        expected = status in (TaskStatus.PLANNING, TaskStatus.RUNNING, TaskStatus.REVIEW)
        return self.worktree_exists == expected and self.window_exists == expected


@dataclass
class _EdgeRun:
    """The edge currently executing; used to label failures."""

    source: TaskStatus
    target: Optional[TaskStatus]


class TransitionOrchestrator:
    """Runs workflow transitions and deletions for the tasks of one project."""

    def __init__(
        self,
        *,
        project: Project,
        worktrees: WorktreeProvider,
        sessions: SessionProvider,
        commands: Optional[AgentCommandBuilder] = None,
    ) -> None:
        self._project = project
        self._worktrees = worktrees
        self._sessions = sessions
        self._commands = commands or AgentCommandBuilder()
        self._locks: dict[str, asyncio.Lock] = {}
        # holders plus waiters per task; the lock is dropped when this reaches zero
        self._lock_users: dict[str, int] = {}

    @property
    def project(self) -> Project:
        return self._project

    def is_busy(self, task_id: str) -> bool:
        """Whether a transition or delete for `task_id` is in flight."""
        lock = self._locks.get(task_id)
        return lock is not None and lock.locked()

    @asynccontextmanager
    async def _serialized(self, task_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(task_id, asyncio.Lock())
        self._lock_users[task_id] = self._lock_users.get(task_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[task_id] -= 1
            if self._lock_users[task_id] == 0:
                del self._lock_users[task_id]
                del self._locks[task_id]

    async def request_transition(self, task: Task, target: TaskStatus) -> Task:
        """Move `task` to `target`, running the edge's side effects.

        Returns:
            A copy of the task with the new status and recorded resources.

        Raises:
            InvalidTransitionError: The edge is not legal; nothing ran.
            ResourceCreationFailedError, ResourceRemovalFailedError,
            InjectionFailedError: A side effect failed; earlier steps are kept.
        """
        target = TaskStatus(target)
        async with self._serialized(task.id):
            kind = classify(task.status, target)
            effects = side_effects_for(task.status, target)
            if kind is None or effects is None:
                logger.warning("Rejected transition {} -> {} for task {}", task.status.value, target.value, task.slug)
                raise InvalidTransitionError(
                    f"Cannot move task {task.slug} from {task.status.value} to {target.value}",
                    task_slug=task.slug,
                    source=task.status,
                    target=target,
                )

            logger.info(
                "Task {}: {} transition {} -> {} ({} side effects)",
                task.slug,
                kind.value,
                task.status.value,
                target.value,
                len(effects),
            )
            updated = await self._run(task, effects, _EdgeRun(source=task.status, target=target))
            return replace(updated, status=target, updated_at=datetime.now(UTC))

    async def advance(self, task: Task) -> Task:
        """Move `task` one step forward."""
        target = successor(task.status)
        if target is None:
            raise InvalidTransitionError(
                f"Task {task.slug} is {task.status.value}; nothing follows it",
                task_slug=task.slug,
                source=task.status,
                target=None,
            )
        return await self.request_transition(task, target)

    async def resume(self, task: Task) -> Task:
        """Send a reviewed task back to running, reusing its window and worktree."""
        return await self.request_transition(task, TaskStatus.RUNNING)

    async def delete_task(self, task: Task) -> None:
        """Tear down the task's window and worktree.

        Backlog tasks never had resources and make no provider calls. Any other
        status kills the window and removes the worktree; resources that are
        already gone count as removed.
        """
        async with self._serialized(task.id):
            effects = delete_side_effects(task.status)
            logger.info("Deleting task {} from {} ({} side effects)", task.slug, task.status.value, len(effects))
            await self._run(task, effects, _EdgeRun(source=task.status, target=None))

    async def inspect_resources(self, task: Task) -> ResourceState:
        """Probe the providers so callers can spot a half-finished edge."""
        worktree_exists, window_exists = await asyncio.gather(
            self._worktrees.worktree_exists(self._project.root, task.slug),
            self._sessions.window_exists(self._target(task)),
        )
        return ResourceState(worktree_exists=worktree_exists, window_exists=window_exists)

    async def _run(self, task: Task, effects: tuple[SideEffect, ...], edge: _EdgeRun) -> Task:
        steps: dict[SideEffect, _Step] = {
            SideEffect.CREATE_WORKTREE: lambda t: self._create_worktree(t, edge),
            SideEffect.CREATE_WINDOW: lambda t: self._create_window(t, edge),
            SideEffect.SEND_PLAN_COMMAND: lambda t: self._send(
                t, edge, SideEffect.SEND_PLAN_COMMAND, self._commands.plan_command(t)
            ),
            SideEffect.SEND_IMPLEMENT_COMMAND: lambda t: self._send(
                t, edge, SideEffect.SEND_IMPLEMENT_COMMAND, self._commands.implement_command(t)
            ),
            SideEffect.KILL_WINDOW: lambda t: self._kill_window(t, edge),
            SideEffect.REMOVE_WORKTREE: lambda t: self._remove_worktree(t, edge),
        }
        current = task
        for effect in effects:
            logger.debug("Task {}: running {}", task.slug, effect.value)
            current = await steps[effect](current)
        return current

    def _target(self, task: Task) -> str:
        return task.session_target or self._project.window_target(task.slug)

    def _worktree_path(self, task: Task) -> str:
        return task.worktree_path or str(self._project.worktree_path(task.slug))

    def _failure(
        self,
        error_cls: type[TransitionError],
        task: Task,
        edge: _EdgeRun,
        step: SideEffect,
        exc: ProviderError,
        resource: str,
    ) -> TransitionError:
        edge_label = f"{edge.source.value} -> {edge.target.value}" if edge.target else f"delete from {edge.source.value}"
        logger.error("Task {}: {} failed during {}: {}", task.slug, step.value, edge_label, exc)
        return error_cls(
            f"{step.value} failed for task {task.slug} ({edge_label}): {exc}",
            task_slug=task.slug,
            source=edge.source,
            target=edge.target,
            step=step,
            resource=resource,  # type: ignore[arg-type]
            cause=exc,
        )

    async def _create_worktree(self, task: Task, edge: _EdgeRun) -> Task:
        try:
            path = await self._worktrees.create_worktree(self._project.root, task.slug)
        except ProviderError as exc:
            raise self._failure(
                ResourceCreationFailedError, task, edge, SideEffect.CREATE_WORKTREE, exc, "worktree"
            ) from exc
        logger.info("Task {}: worktree ready at {}", task.slug, path)
        return replace(task, worktree_path=path)

    async def _create_window(self, task: Task, edge: _EdgeRun) -> Task:
        working_dir = self._worktree_path(task)
        try:
            await self._sessions.create_window(self._project.name, window_name_for(task.slug), working_dir)
        except ProviderError as exc:
            raise self._failure(
                ResourceCreationFailedError, task, edge, SideEffect.CREATE_WINDOW, exc, "window"
            ) from exc
        target = self._project.window_target(task.slug)
        logger.info("Task {}: window {} ready", task.slug, target)
        return replace(task, session_target=target)

    async def _send(self, task: Task, edge: _EdgeRun, step: SideEffect, text: str) -> Task:
        try:
            await self._sessions.send_keys(self._target(task), text)
        except ProviderError as exc:
            raise self._failure(InjectionFailedError, task, edge, step, exc, "window") from exc
        return task

    async def _kill_window(self, task: Task, edge: _EdgeRun) -> Task:
        target = self._target(task)
        try:
            await self._sessions.kill_window(target)
        except WindowMissingError:
            logger.info("Task {}: window {} already gone", task.slug, target)
        except ProviderError as exc:
            raise self._failure(
                ResourceRemovalFailedError, task, edge, SideEffect.KILL_WINDOW, exc, "window"
            ) from exc
        return replace(task, session_target=None)

    async def _remove_worktree(self, task: Task, edge: _EdgeRun) -> Task:
        path = self._worktree_path(task)
        try:
            await self._worktrees.remove_worktree(self._project.root, path)
        except WorktreeMissingError:
            logger.info("Task {}: worktree {} already gone", task.slug, path)
        except ProviderError as exc:
            raise self._failure(
                ResourceRemovalFailedError, task, edge, SideEffect.REMOVE_WORKTREE, exc, "worktree"
            ) from exc
        return replace(task, worktree_path=None)
