"""GitHub implementation of the tracker port.

Reads (issue listings) go through a plain `requests` session so pagination and
the per-request timeout stay explicit. Mutations go through PyGithub issue
objects.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

import requests
from github import Auth, Github, GithubException, UnknownObjectException
from github.Issue import Issue as GithubIssue

from trish.tracking.github.port import RemovalResult
from trish.tracking.models import Issue, IssueState

logger = logging.getLogger(__name__)


class GitHubTracker:
    """Tracker port backed by the GitHub REST API, spanning many repositories."""

    def __init__(
        self,
        *,
        token: str,
        base_url: str = "https://api.github.com",
        timeout_seconds: float = 30,
        session: requests.Session | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")

        self._rest_base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "trish",
            }
        )
        self._github = github_api or Github(
            auth=Auth.Token(token), base_url=base_url, timeout=timeout_seconds, lazy=True
        )
        self._issue_handles: dict[tuple[str, int], GithubIssue] = {}

    def _issues_list_url(self, repository: str) -> str:
        return f"{self._rest_base_url}/repos/{repository.strip().strip('/')}/issues"

    @staticmethod
    def _parse_datetime(value: object) -> datetime:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("Invalid datetime value")
        # GitHub returns timestamps like "2025-01-01T00:00:00Z".
        return datetime.fromisoformat(value.replace("Z", "+00:00"))

    @staticmethod
    def _safe_login(value: object) -> str | None:
        if isinstance(value, dict):
            login = value.get("login")
            if isinstance(login, str) and login.strip():
                return login
        return None

    @staticmethod
    def _repository_from_json(data: dict[str, Any], fallback: str) -> str:
        # repository_url looks like https://api.github.com/repos/<org>/<name>
        repo_url = data.get("repository_url")
        if isinstance(repo_url, str) and "/repos/" in repo_url:
            tail = repo_url.split("/repos/", 1)[1].strip("/")
            parts = tail.split("/")
            if len(parts) == 2 and all(parts):
                return tail
        return fallback

    @classmethod
    def _parse_issue_json(cls, data: dict[str, Any], *, repository: str) -> Issue:
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            raise ValueError("Invalid issue response: missing number")

        title = data.get("title")
        if not isinstance(title, str):
            title = ""

        labels: set[str] = set()
        raw_labels = data.get("labels")
        if isinstance(raw_labels, list):
            for label in raw_labels:
                if isinstance(label, dict) and isinstance(label.get("name"), str):
                    labels.add(label["name"])
                elif isinstance(label, str):
                    labels.add(label)

        closed_at_raw = data.get("closed_at")
        closed_at = cls._parse_datetime(closed_at_raw) if closed_at_raw else None

        return Issue(
            repository=cls._repository_from_json(data, repository),
            number=number,
            title=title,
            author=cls._safe_login(data.get("user")) or "unknown",
            labels=frozenset(labels),
            created_at=cls._parse_datetime(data.get("created_at")),
            updated_at=cls._parse_datetime(data.get("updated_at")),
            closed_at=closed_at,
            closed_by=cls._safe_login(data.get("closed_by")) if closed_at else None,
            is_pull_request=data.get("pull_request") is not None,
        )

    def list_issues(
        self,
        repository: str,
        *,
        state: IssueState,
        assignee: str | None,
        since_days: int,
    ) -> list[Issue]:
        """List issues (and pull requests) touched within the lookback window.

        Pages of 100 are followed until a short page, so the listing is never
        silently truncated.
        """

        url = self._issues_list_url(repository)
        since = datetime.now(tz=UTC) - timedelta(days=since_days)
        params: dict[str, Any] = {
            "per_page": 100,
            "state": state.value,
            "since": since.isoformat().replace("+00:00", "Z"),
        }
        if assignee:
            params["assignee"] = assignee

        issues: list[Issue] = []
        page = 0
        while True:
            page += 1
            logger.debug("GET issues", extra={"url": url, "repo": repository, "page": page})
            resp = self._session.get(url, params={**params, "page": page}, timeout=self._timeout)
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                break

            for item in payload:
                if isinstance(item, dict):
                    issues.append(self._parse_issue_json(item, repository=repository))

            if len(payload) < params["per_page"]:
                break
        return issues

    def _issue(self, repository: str, number: int) -> GithubIssue:
        key = (repository.lower(), number)
        handle = self._issue_handles.get(key)
        if handle is None:
            repo = self._github.get_repo(repository)
            handle = repo.get_issue(number)
            self._issue_handles[key] = handle
        return handle

    def add_labels(self, repository: str, number: int, labels: Sequence[str]) -> None:
        normalized = [label.strip() for label in labels if label.strip()]
        if not normalized:
            raise ValueError("At least one label is required")
        self._issue(repository, number).add_to_labels(*normalized)
        logger.info(
            "Labels added",
            extra={"repo": repository, "issue_number": number, "labels": normalized},
        )

    def remove_label(self, repository: str, number: int, label: str) -> RemovalResult:
        issue = self._issue(repository, number)
        try:
            issue.remove_from_labels(label)
        except UnknownObjectException:
            logger.debug(
                "Label not present on issue (ignoring)",
                extra={"repo": repository, "issue_number": number, "label": label},
            )
            return RemovalResult.already_absent()
        except GithubException as e:
            return RemovalResult.failed(f"HTTP {e.status}: {e.data}")

        logger.info(
            "Label removed", extra={"repo": repository, "issue_number": number, "label": label}
        )
        return RemovalResult.removed()

    def set_assignee(self, repository: str, number: int, identity: str) -> None:
        if not identity.strip():
            raise ValueError("An assignee is required")
        self._issue(repository, number).add_to_assignees(identity.strip())
        logger.info(
            "Issue assigned",
            extra={"repo": repository, "issue_number": number, "assignee": identity},
        )

    def remove_assignee(self, repository: str, number: int, identity: str) -> RemovalResult:
        issue = self._issue(repository, number)
        current = {a.login.lower() for a in issue.assignees}
        if identity.strip().lower() not in current:
            logger.debug(
                "Assignee not present on issue (ignoring)",
                extra={"repo": repository, "issue_number": number, "assignee": identity},
            )
            return RemovalResult.already_absent()
        try:
            issue.remove_from_assignees(identity.strip())
        except UnknownObjectException:
            return RemovalResult.already_absent()
        except GithubException as e:
            return RemovalResult.failed(f"HTTP {e.status}: {e.data}")

        logger.info(
            "Issue assignee removed",
            extra={"repo": repository, "issue_number": number, "assignee": identity},
        )
        return RemovalResult.removed()

    def set_state(self, repository: str, number: int, state: IssueState) -> None:
        if state is IssueState.ALL:
            raise ValueError("Issue state must be 'open' or 'closed'")
        self._issue(repository, number).edit(state=state.value)
        logger.info(
            "Issue state set",
            extra={"repo": repository, "issue_number": number, "state": state.value},
        )

    def add_comment(self, repository: str, number: int, text: str) -> int:
        comment = self._issue(repository, number).create_comment(text)
        logger.info(
            "Comment added",
            extra={"repo": repository, "issue_number": number, "comment_id": comment.id},
        )
        return int(comment.id)

    def close(self) -> None:
        self._session.close()
        self._github.close()
