"""Board workflow: status order and legal transitions.

    Backlog -> Planning -> Running -> Review -> Done
                              ^__________|   (resume)
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from agtx.core.models import TaskStatus

_ORDER: tuple[TaskStatus, ...] = TaskStatus.columns()


class TransitionKind(str, Enum):
    FORWARD = "forward"
    RESUME = "resume"


def columns() -> tuple[TaskStatus, ...]:
    """Fixed board column order."""
    return _ORDER


def successor(status: TaskStatus) -> Optional[TaskStatus]:
    """Next status in the workflow, or None for the terminal status."""
    position = _ORDER.index(status)
    if position + 1 >= len(_ORDER):
        return None
    return _ORDER[position + 1]


def is_valid_forward(source: TaskStatus, target: TaskStatus) -> bool:
    return successor(source) == target


def is_valid_resume(source: TaskStatus, target: TaskStatus) -> bool:
    return source == TaskStatus.REVIEW and target == TaskStatus.RUNNING


def classify(source: TaskStatus, target: TaskStatus) -> Optional[TransitionKind]:
    """Label a (source, target) pair, or None when the edge is illegal."""
    if is_valid_forward(source, target):
        return TransitionKind.FORWARD
    if is_valid_resume(source, target):
        return TransitionKind.RESUME
    return None
