"""Error taxonomy for the read and write paths.

Selector parse failures and unresolved selectors are not exceptions: they
are ordinary outcomes every caller handles (see
`trish.tracking.selector`). Label/assignee absence on removal is likewise a
result value, not an exception (see `trish.tracking.github.port`).
"""

from __future__ import annotations

from collections.abc import Sequence


class TrishError(Exception):
    """Base class for errors surfaced to the operator."""


class ConfigurationError(TrishError):
    pass


class AggregationError(TrishError):
    """A repository fetch failed, so the aggregate read produced nothing."""

    def __init__(self, repository: str, cause: BaseException) -> None:
        super().__init__(f"Fetching issues from {repository} failed: {cause}")
        self.repository = repository
        self.cause = cause


class RemoteMutationError(TrishError):
    """A step of a workflow transition failed.

    Steps applied before the failing one stay applied; there is no rollback.
    `applied_steps` tells the operator what state the issue was left in.
    """

    def __init__(
        self,
        *,
        transition: str,
        step: str,
        applied_steps: Sequence[str],
        reason: str,
    ) -> None:
        applied = ", ".join(applied_steps) if applied_steps else "none"
        super().__init__(
            f"{transition} failed at step '{step}': {reason} (already applied: {applied})"
        )
        self.transition = transition
        self.step = step
        self.applied_steps = list(applied_steps)
        self.reason = reason
