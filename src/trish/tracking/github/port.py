"""The remote operations the tracking core depends on.

The core never talks HTTP itself. Anything that satisfies `TrackerPort` can be
plugged in: the GitHub client in production, an in-memory fake in tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from trish.tracking.models import Issue, IssueState


class RemovalStatus(str, Enum):
    REMOVED = "removed"
    ALREADY_ABSENT = "already_absent"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RemovalResult:
    """Outcome of removing a label or assignee.

    `ALREADY_ABSENT` is a success: workflow transitions routinely remove
    labels that were never there.
    """

    status: RemovalStatus
    reason: str = ""

    @property
    def ok(self) -> bool:
        return self.status is not RemovalStatus.FAILED

    @staticmethod
    def removed() -> RemovalResult:
        return RemovalResult(status=RemovalStatus.REMOVED)

    @staticmethod
    def already_absent() -> RemovalResult:
        return RemovalResult(status=RemovalStatus.ALREADY_ABSENT)

    @staticmethod
    def failed(reason: str) -> RemovalResult:
        return RemovalResult(status=RemovalStatus.FAILED, reason=reason)


class TrackerPort(Protocol):
    def list_issues(
        self,
        repository: str,
        *,
        state: IssueState,
        assignee: str | None,
        since_days: int,
    ) -> list[Issue]: ...

    def add_labels(self, repository: str, number: int, labels: Sequence[str]) -> None: ...

    def remove_label(self, repository: str, number: int, label: str) -> RemovalResult: ...

    def set_assignee(self, repository: str, number: int, identity: str) -> None: ...

    def remove_assignee(self, repository: str, number: int, identity: str) -> RemovalResult: ...

    def set_state(self, repository: str, number: int, state: IssueState) -> None: ...

    def add_comment(self, repository: str, number: int, text: str) -> int: ...
