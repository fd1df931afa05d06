"""Fan a list-issues request out to every configured repository.

The read path is complete-or-nothing: either every repository answers and the
results are concatenated in registry order, or the whole fetch fails.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TypeVar

from trish.tracking.errors import AggregationError
from trish.tracking.github.port import TrackerPort
from trish.tracking.models import Issue, IssueState

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOOKBACK_DAYS = 100


def gather_all_or_fail(
    repositories: Sequence[str],
    fetch: Callable[[str], list[T]],
    *,
    max_workers: int | None = None,
) -> list[list[T]]:
    """Run `fetch` once per repository concurrently and join on all of them.

    Results come back in the order of `repositories`, regardless of which task
    finished first. If any task raises, tasks that have not started are
    cancelled and `AggregationError` is raised for the first failure in
    repository order; no partial result is returned.
    """

    if not repositories:
        return []

    workers = max_workers or len(repositories)
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="trish-fetch") as pool:
        futures: list[Future[list[T]]] = [pool.submit(fetch, repo) for repo in repositories]
        _, not_done = wait(futures, return_when=FIRST_EXCEPTION)
        for future in not_done:
            future.cancel()
        # Leaving the executor blocks until tasks already running have finished.

    for repo, future in zip(repositories, futures, strict=True):
        if future.cancelled():
            continue
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Repository fetch failed", extra={"repo": repo, "error": str(exc)}
            )
            raise AggregationError(repo, exc) from exc

    return [future.result() for future in futures]


@dataclass(frozen=True, slots=True)
class FetchOptions:
    state: IssueState = IssueState.ALL
    assignee: str | None = None


class IssueAggregator:
    """Merge per-repository listings into one snapshot."""

    def __init__(
        self,
        *,
        tracker: TrackerPort,
        registry: Sequence[str],
        lookback_days: int = DEFAULT_LOOKBACK_DAYS,
    ) -> None:
        self._tracker = tracker
        self._registry = tuple(registry)
        self._lookback_days = lookback_days

    @property
    def registry(self) -> tuple[str, ...]:
        return self._registry

    def fetch(self, options: FetchOptions | None = None) -> list[Issue]:
        opts = options or FetchOptions()

        def _fetch_one(repository: str) -> list[Issue]:
            logger.debug(
                "Fetching issues",
                extra={"repo": repository, "state": opts.state.value, "assignee": opts.assignee},
            )
            return self._tracker.list_issues(
                repository,
                state=opts.state,
                assignee=opts.assignee,
                since_days=self._lookback_days,
            )

        per_repo = gather_all_or_fail(self._registry, _fetch_one)
        issues = [issue for batch in per_repo for issue in batch]
        logger.debug(
            "Aggregated issues",
            extra={"repositories": len(self._registry), "issues": len(issues)},
        )
        return issues
