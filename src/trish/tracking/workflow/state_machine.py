"""Label-based workflow states and the transition catalogue.

The workflow state of an issue is never stored locally; it is derived from the
labels and open/closed state of the latest snapshot. `on-deck` and
`in-progress` are kept mutually exclusive by the transitions themselves, and
`blocked` is an orthogonal flag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from trish.labels import LABEL_BLOCKED, LABEL_IN_PROGRESS, LABEL_ON_DECK
from trish.tracking.models import Issue, IssueState

from .actions import (
    AddComment,
    AddLabels,
    RemoveAssignee,
    RemoveLabel,
    SetAssignee,
    SetState,
    Step,
)


class WorkflowState(str, Enum):
    BACKLOG = "backlog"
    ON_DECK = "on_deck"
    IN_PROGRESS = "in_progress"
    CLOSED = "closed"


class Transition(str, Enum):
    MKONDECK = "mkondeck"
    WORKON = "workon"
    TAKE = "take"
    DROP = "drop"
    BLOCKED = "blocked"
    UNBLOCKED = "unblocked"
    TAG = "tag"
    UNTAG = "untag"
    CLOSE = "close"
    COMMENT = "comment"


@dataclass(frozen=True, slots=True)
class WorkflowStatus:
    state: WorkflowState
    blocked: bool


def workflow_status(issue: Issue) -> WorkflowStatus:
    if issue.is_closed:
        state = WorkflowState.CLOSED
    elif issue.has_label(LABEL_IN_PROGRESS):
        state = WorkflowState.IN_PROGRESS
    elif issue.has_label(LABEL_ON_DECK):
        state = WorkflowState.ON_DECK
    else:
        state = WorkflowState.BACKLOG
    return WorkflowStatus(state=state, blocked=issue.has_label(LABEL_BLOCKED))


def plan_transition(
    transition: Transition,
    issue: Issue,
    *,
    operator: str,
    tag: str | None = None,
    comment: str | None = None,
) -> list[Step]:
    """Return the ordered remote mutations for `transition` on `issue`.

    Order matters: the calls are not atomic and intermediate states are
    visible on the tracker.
    """

    if transition is Transition.MKONDECK:
        return [AddLabels((LABEL_ON_DECK,)), RemoveLabel(LABEL_IN_PROGRESS)]

    if transition is Transition.WORKON:
        steps: list[Step] = []
        if issue.is_closed:
            steps.append(SetState(IssueState.OPEN))
        steps += [
            AddLabels((LABEL_IN_PROGRESS,)),
            RemoveLabel(LABEL_ON_DECK),
            RemoveLabel(LABEL_BLOCKED),
            SetAssignee(operator),
        ]
        return steps

    if transition is Transition.TAKE:
        return [SetAssignee(operator)]

    if transition is Transition.DROP:
        return [
            RemoveAssignee(operator),
            RemoveLabel(LABEL_IN_PROGRESS),
            RemoveLabel(LABEL_ON_DECK),
        ]

    if transition is Transition.BLOCKED:
        return [AddLabels((LABEL_BLOCKED,))]

    if transition is Transition.UNBLOCKED:
        return [RemoveLabel(LABEL_BLOCKED)]

    if transition in {Transition.TAG, Transition.UNTAG}:
        if not tag or not tag.strip():
            raise ValueError(f"{transition.value} requires a tag")
        if transition is Transition.TAG:
            return [AddLabels((tag.strip(),))]
        return [RemoveLabel(tag.strip())]

    if transition is Transition.CLOSE:
        return [
            RemoveLabel(LABEL_IN_PROGRESS),
            RemoveLabel(LABEL_ON_DECK),
            RemoveLabel(LABEL_BLOCKED),
            SetState(IssueState.CLOSED),
        ]

    if transition is Transition.COMMENT:
        if comment is None:
            raise ValueError("comment requires text")
        return [AddComment(comment)]

    raise ValueError(f"Unknown transition: {transition}")
