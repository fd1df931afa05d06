from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from trish.tracking.github.port import RemovalResult, RemovalStatus, TrackerPort
from trish.tracking.models import Issue, IssueState


@dataclass(frozen=True, slots=True)
class StepResult:
    ok: bool
    message: str
    details: dict[str, object] | None = None


class Step(Protocol):
    """A single remote mutation within a workflow transition.

    Steps do not retry and do not compensate. Tracker exceptions propagate to
    the engine, which stops the transition there.
    """

    @property
    def description(self) -> str: ...

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult: ...


def _removal_step_result(result: RemovalResult) -> StepResult:
    details: dict[str, object] = {"removal": result.status.value}
    if result.status is RemovalStatus.REMOVED:
        return StepResult(ok=True, message="Removed", details=details)
    if result.status is RemovalStatus.ALREADY_ABSENT:
        return StepResult(ok=True, message="Already absent", details=details)
    return StepResult(ok=False, message=result.reason or "Removal failed", details=details)


@dataclass(frozen=True, slots=True)
class AddLabels:
    """Add labels. Duplicates are left to the tracker to ignore."""

    labels: tuple[str, ...]

    @property
    def description(self) -> str:
        return "add label " + ", ".join(self.labels)

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        tracker.add_labels(issue.repository, issue.number, list(self.labels))
        return StepResult(ok=True, message="Added")


@dataclass(frozen=True, slots=True)
class RemoveLabel:
    """Remove a label; an absent label counts as success."""

    label: str

    @property
    def description(self) -> str:
        return f"remove label {self.label}"

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        result = tracker.remove_label(issue.repository, issue.number, self.label)
        return _removal_step_result(result)


@dataclass(frozen=True, slots=True)
class SetAssignee:
    identity: str

    @property
    def description(self) -> str:
        return f"assign {self.identity}"

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        tracker.set_assignee(issue.repository, issue.number, self.identity)
        return StepResult(ok=True, message="Assigned")


@dataclass(frozen=True, slots=True)
class RemoveAssignee:
    """Unassign someone; not being assigned counts as success."""

    identity: str

    @property
    def description(self) -> str:
        return f"unassign {self.identity}"

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        return _removal_step_result(
            tracker.remove_assignee(issue.repository, issue.number, self.identity)
        )


@dataclass(frozen=True, slots=True)
class SetState:
    state: IssueState

    @property
    def description(self) -> str:
        return f"set state {self.state.value}"

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        tracker.set_state(issue.repository, issue.number, self.state)
        return StepResult(ok=True, message=f"State set to {self.state.value}")


@dataclass(frozen=True, slots=True)
class AddComment:
    text: str

    @property
    def description(self) -> str:
        return "add comment"

    def execute(self, tracker: TrackerPort, issue: Issue) -> StepResult:
        comment_id = tracker.add_comment(issue.repository, issue.number, self.text)
        return StepResult(ok=True, message="Commented", details={"comment_id": comment_id})
