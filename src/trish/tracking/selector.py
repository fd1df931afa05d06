"""Parse user-supplied issue selectors and resolve them against a snapshot.

Grammar:

    selector  := number | qualified
    number    := [0-9]+            (value > 0)
    qualified := org "/" repo "/" number

A bare number is ambiguous across repositories; the first match in
aggregation order (registry order) wins. Anything else is invalid, which
resolves to "not found" rather than raising.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from trish.tracking.filters import exclude_pull_requests
from trish.tracking.models import Issue

_NUMBER_RE = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class BareNumber:
    number: int


@dataclass(frozen=True, slots=True)
class Qualified:
    repository: str
    number: int


@dataclass(frozen=True, slots=True)
class InvalidSelector:
    token: str


Selector = BareNumber | Qualified | InvalidSelector


def _positive_int(text: str) -> int | None:
    if not _NUMBER_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value > 0 else None


def parse_selector(token: str) -> Selector:
    text = token.strip()

    number = _positive_int(text)
    if number is not None:
        return BareNumber(number)

    parts = text.split("/")
    if len(parts) == 3:
        org, repo, num_str = parts
        number = _positive_int(num_str)
        if org and repo and number is not None:
            return Qualified(repository=f"{org}/{repo}", number=number)

    return InvalidSelector(token)


def matches(selector: Selector, issue: Issue) -> bool:
    if isinstance(selector, BareNumber):
        return issue.number == selector.number
    if isinstance(selector, Qualified):
        return (
            issue.repository.lower() == selector.repository.lower()
            and issue.number == selector.number
        )
    return False


def resolve(token: str, issues: Iterable[Issue]) -> Issue | None:
    """Return the issue `token` selects, or None when nothing matches.

    Pull requests are never candidates.
    """

    selector = parse_selector(token)
    if isinstance(selector, InvalidSelector):
        return None
    for issue in exclude_pull_requests(issues):
        if matches(selector, issue):
            return issue
    return None
