"""Unit tests for the board workflow rules."""

import pytest

from agtx.core.models import TaskStatus
from agtx.core.workflow import TransitionKind, classify, columns, is_valid_forward, is_valid_resume, successor


def test_successor_walks_board_order():
    assert successor(TaskStatus.BACKLOG) == TaskStatus.PLANNING
    assert successor(TaskStatus.PLANNING) == TaskStatus.RUNNING
    assert successor(TaskStatus.RUNNING) == TaskStatus.REVIEW
    assert successor(TaskStatus.REVIEW) == TaskStatus.DONE
    assert successor(TaskStatus.DONE) is None


@pytest.mark.parametrize("status", list(TaskStatus))
def test_successor_is_none_only_for_done(status):
    nxt = successor(status)
    if status == TaskStatus.DONE:
        assert nxt is None
    else:
        assert nxt is not None
        assert nxt.position == status.position + 1


def test_column_indices():
    cols = columns()

    assert cols == (
        TaskStatus.BACKLOG,
        TaskStatus.PLANNING,
        TaskStatus.RUNNING,
        TaskStatus.REVIEW,
        TaskStatus.DONE,
    )
    assert cols == TaskStatus.columns()


def test_valid_forward_transitions():
    assert is_valid_forward(TaskStatus.BACKLOG, TaskStatus.PLANNING)
    assert is_valid_forward(TaskStatus.PLANNING, TaskStatus.RUNNING)
    assert is_valid_forward(TaskStatus.RUNNING, TaskStatus.REVIEW)
    assert is_valid_forward(TaskStatus.REVIEW, TaskStatus.DONE)


@pytest.mark.parametrize(
    ("source", "target"),
    [
        (TaskStatus.BACKLOG, TaskStatus.RUNNING),
        (TaskStatus.BACKLOG, TaskStatus.REVIEW),
        (TaskStatus.BACKLOG, TaskStatus.DONE),
        (TaskStatus.PLANNING, TaskStatus.REVIEW),
        (TaskStatus.PLANNING, TaskStatus.DONE),
        (TaskStatus.RUNNING, TaskStatus.DONE),
    ],
)
def test_skipping_columns_is_never_forward(source, target):
    assert not is_valid_forward(source, target)
    assert classify(source, target) is None


@pytest.mark.parametrize("target", list(TaskStatus))
def test_done_cannot_move_forward(target):
    assert not is_valid_forward(TaskStatus.DONE, target)


def test_review_can_resume_to_running():
    assert is_valid_resume(TaskStatus.REVIEW, TaskStatus.RUNNING)
    assert classify(TaskStatus.REVIEW, TaskStatus.RUNNING) == TransitionKind.RESUME


@pytest.mark.parametrize(
    ("source", "target"),
    [
        (TaskStatus.DONE, TaskStatus.REVIEW),
        (TaskStatus.RUNNING, TaskStatus.PLANNING),
        (TaskStatus.PLANNING, TaskStatus.BACKLOG),
        (TaskStatus.REVIEW, TaskStatus.PLANNING),
        (TaskStatus.DONE, TaskStatus.RUNNING),
    ],
)
def test_invalid_backward_transitions(source, target):
    assert not is_valid_resume(source, target)
    assert classify(source, target) is None


def test_resume_is_the_only_backward_edge():
    backward = [
        (source, target)
        for source in TaskStatus
        for target in TaskStatus
        if target.position < source.position and classify(source, target) is not None
    ]

    assert backward == [(TaskStatus.REVIEW, TaskStatus.RUNNING)]


def test_forward_edges_classify_as_forward():
    for status in TaskStatus:
        nxt = successor(status)
        if nxt is not None:
            assert classify(status, nxt) == TransitionKind.FORWARD
