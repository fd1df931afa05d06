"""Composable predicates and sort keys over issue collections.

Everything here is pure. Predicates are built once and can be reused across
calls with different option sets.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import UTC, datetime, timedelta

from trish.labels import LABEL_BUG, LABEL_IN_PROGRESS, LABEL_ON_DECK
from trish.tracking.models import Issue

IssuePredicate = Callable[[Issue], bool]
SortKey = Callable[[Issue], datetime]


def _now(now: datetime | None) -> datetime:
    return now if now is not None else datetime.now(tz=UTC)


def exclude_pull_requests(issues: Iterable[Issue]) -> list[Issue]:
    """Drop pull requests, preserving the relative order of everything else."""

    return [issue for issue in issues if not issue.is_pull_request]


def has_label(name: str) -> IssuePredicate:
    def _predicate(issue: Issue) -> bool:
        return issue.has_label(name)

    return _predicate


def is_open(issue: Issue) -> bool:
    return not issue.is_closed


def closed_within(days: int, *, now: datetime | None = None) -> IssuePredicate:
    """True iff the issue is closed and was closed less than `days` ago."""

    window = timedelta(days=days)

    def _predicate(issue: Issue) -> bool:
        if issue.closed_at is None:
            return False
        return _now(now) - issue.closed_at < window

    return _predicate


def updated_within(days: int, *, now: datetime | None = None) -> IssuePredicate:
    window = timedelta(days=days)

    def _predicate(issue: Issue) -> bool:
        return _now(now) - issue.updated_at < window

    return _predicate


def closed_by(identity: str) -> IssuePredicate:
    def _predicate(issue: Issue) -> bool:
        return issue.closed_by == identity

    return _predicate


def by_updated_at(issue: Issue) -> datetime:
    return issue.updated_at


def by_closed_at(issue: Issue) -> datetime:
    # Open issues sort first; callers normally filter them out beforehand.
    return issue.closed_at or datetime.min.replace(tzinfo=UTC)


def on_deck(issue: Issue) -> bool:
    return is_open(issue) and issue.has_label(LABEL_ON_DECK)


in_progress = has_label(LABEL_IN_PROGRESS)
is_bug = has_label(LABEL_BUG)


def apply_filters(
    issues: Iterable[Issue],
    predicates: Sequence[IssuePredicate] = (),
    *,
    sort_key: SortKey | None = None,
) -> list[Issue]:
    """Exclude pull requests, apply each predicate in turn, then optionally sort.

    Sorting is ascending and stable: ties keep aggregation order, which is
    registry order (see `trish.tracking.aggregation`).
    """

    selected = exclude_pull_requests(issues)
    for predicate in predicates:
        selected = [issue for issue in selected if predicate(issue)]
    if sort_key is not None:
        selected = sorted(selected, key=sort_key)
    return selected
