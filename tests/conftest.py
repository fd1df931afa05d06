"""Test configuration and fixtures."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from trish.tracking.github.port import RemovalResult
from trish.tracking.models import Issue, IssueState

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


@dataclass
class RemoteIssue:
    """Mutable remote-side state of one issue in the fake tracker."""

    issue: Issue
    labels: set[str] = field(default_factory=set)
    assignees: set[str] = field(default_factory=set)
    state: IssueState = IssueState.OPEN
    comments: list[str] = field(default_factory=list)


class InMemoryTracker:
    """A tracker port fake that records calls and applies them to remote state."""

    def __init__(self, issues: Sequence[Issue] = ()) -> None:
        self.calls: list[tuple] = []
        self.remote: dict[tuple[str, int], RemoteIssue] = {}
        self.fail_on: set[str] = set()
        self.fail_listing_for: set[str] = set()
        for issue in issues:
            self.add(issue)

    def add(self, issue: Issue, *, assignees: Sequence[str] = ()) -> None:
        self.remote[issue.key] = RemoteIssue(
            issue=issue,
            labels=set(issue.labels),
            assignees=set(assignees),
            state=IssueState.CLOSED if issue.is_closed else IssueState.OPEN,
        )

    def state_of(self, repository: str, number: int) -> RemoteIssue:
        return self.remote[(repository.lower(), number)]

    def _check(self, op: str) -> None:
        if op in self.fail_on:
            raise RuntimeError(f"{op} exploded")

    def list_issues(
        self,
        repository: str,
        *,
        state: IssueState,
        assignee: str | None,
        since_days: int,
    ) -> list[Issue]:
        self.calls.append(("list_issues", repository, state, assignee, since_days))
        if repository in self.fail_listing_for:
            raise RuntimeError(f"{repository} is down")
        out = []
        for (repo, _number), remote in self.remote.items():
            if repo != repository.lower():
                continue
            if state is not IssueState.ALL and remote.state is not state:
                continue
            if assignee is not None and assignee not in remote.assignees:
                continue
            out.append(remote.issue)
        return out

    def add_labels(self, repository: str, number: int, labels: Sequence[str]) -> None:
        self.calls.append(("add_labels", repository, number, tuple(labels)))
        self._check("add_labels")
        self.state_of(repository, number).labels.update(labels)

    def remove_label(self, repository: str, number: int, label: str) -> RemovalResult:
        self.calls.append(("remove_label", repository, number, label))
        if "remove_label" in self.fail_on:
            return RemovalResult.failed("HTTP 500")
        labels = self.state_of(repository, number).labels
        if label not in labels:
            return RemovalResult.already_absent()
        labels.discard(label)
        return RemovalResult.removed()

    def set_assignee(self, repository: str, number: int, identity: str) -> None:
        self.calls.append(("set_assignee", repository, number, identity))
        self._check("set_assignee")
        self.state_of(repository, number).assignees.add(identity)

    def remove_assignee(self, repository: str, number: int, identity: str) -> RemovalResult:
        self.calls.append(("remove_assignee", repository, number, identity))
        assignees = self.state_of(repository, number).assignees
        if identity not in assignees:
            return RemovalResult.already_absent()
        assignees.discard(identity)
        return RemovalResult.removed()

    def set_state(self, repository: str, number: int, state: IssueState) -> None:
        self.calls.append(("set_state", repository, number, state))
        self._check("set_state")
        self.state_of(repository, number).state = state

    def add_comment(self, repository: str, number: int, text: str) -> int:
        self.calls.append(("add_comment", repository, number, text))
        self._check("add_comment")
        comments = self.state_of(repository, number).comments
        comments.append(text)
        return 1000 + len(comments)

    def mutation_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] != "list_issues"]

    def close(self) -> None:
        pass


IssueFactory = Callable[..., Issue]


@pytest.fixture
def make_issue() -> IssueFactory:
    """Build Issue snapshots with sensible defaults."""

    def _make(
        number: int = 1,
        repository: str = "org/repo",
        *,
        title: str = "An issue",
        labels: Sequence[str] = (),
        closed_days_ago: float | None = None,
        updated_days_ago: float = 1,
        closed_by: str | None = None,
        is_pull_request: bool = False,
    ) -> Issue:
        closed_at = NOW - timedelta(days=closed_days_ago) if closed_days_ago is not None else None
        return Issue(
            repository=repository,
            number=number,
            title=title,
            author="someone",
            labels=frozenset(labels),
            created_at=NOW - timedelta(days=200),
            updated_at=NOW - timedelta(days=updated_days_ago),
            closed_at=closed_at,
            closed_by=closed_by if closed_at is not None else None,
            is_pull_request=is_pull_request,
        )

    return _make


@pytest.fixture
def tracker() -> InMemoryTracker:
    return InMemoryTracker()


@pytest.fixture
def make_tracker() -> Callable[..., InMemoryTracker]:
    def _make(issues: Sequence[Issue] = ()) -> InMemoryTracker:
        return InMemoryTracker(issues)

    return _make


@pytest.fixture
def now() -> datetime:
    """The reference "now" that `make_issue` ages are relative to."""
    return NOW
