"""Issue snapshot types shared by the read and write paths."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class IssueState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"


@dataclass(frozen=True, slots=True)
class Issue:
    """An issue as fetched from the tracker at a point in time.

    Instances are immutable snapshots. Workflow transitions never update them;
    the next fetch reflects whatever the remote mutations did.

    `closed_at` is set iff the issue is currently closed. `closed_by` is only
    ever set alongside it.
    """

    repository: str
    number: int
    title: str
    author: str
    created_at: datetime
    updated_at: datetime
    labels: frozenset[str] = field(default_factory=frozenset)
    closed_at: datetime | None = None
    closed_by: str | None = None
    is_pull_request: bool = False

    @property
    def is_closed(self) -> bool:
        return self.closed_at is not None

    @property
    def key(self) -> tuple[str, int]:
        """Globally unique identity; repository compared case-insensitively."""

        return (self.repository.lower(), self.number)

    def has_label(self, name: str) -> bool:
        return name in self.labels

    def to_json(self) -> dict[str, object]:
        return {
            "repository": self.repository,
            "number": self.number,
            "title": self.title,
            "author": self.author,
            "labels": sorted(self.labels),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "closed_at": self.closed_at.isoformat() if self.closed_at else None,
            "closed_by": self.closed_by,
            "is_pull_request": self.is_pull_request,
        }


def issue_url(web_url: str, repository: str, number: int) -> str:
    """Permalink for an issue: https://<host>/<repository>/issues/<number>."""

    return f"{web_url.rstrip('/')}/{repository}/issues/{number}"


def new_issue_url(web_url: str, repository: str) -> str:
    return f"{web_url.rstrip('/')}/{repository}/issues/new"
