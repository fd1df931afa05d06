"""Configuration for trish.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

The repository registry comes from `TRISH_REPOS` (comma separated) and/or a
file named by `TRISH_REPOS_FILE` (one `org/name` per line). Registry order is
significant: it decides which repository wins when a bare issue number exists
in more than one of them.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from trish.tracking.errors import ConfigurationError


def _parse_repo_entry(raw: str) -> str | None:
    entry = raw.split("#", 1)[0].strip().strip("/")
    if not entry:
        return None
    parts = entry.split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ConfigurationError(f"Invalid repository '{raw.strip()}' (expected 'org/name')")
    return entry


class TrishSettings(BaseSettings):
    """Settings for trish.

    Environment variables:
    - TRISH_GITHUB_TOKEN (or GH_PERS_PAT)
    - TRISH_OPERATOR
    - TRISH_REPOS / TRISH_REPOS_FILE
    - TRISH_SLACK_WEBHOOK   (optional)
    - TRISH_LOOKBACK_DAYS   (optional)
    - TRISH_REQUEST_TIMEOUT (optional)
    - GITHUB_BASE_URL / GITHUB_WEB_URL (optional)
    - LOG_LEVEL             (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `TrishSettings(_env_file=path_to_env)`.
    """

    github_token: str = Field(
        default="",
        validation_alias=AliasChoices("TRISH_GITHUB_TOKEN", "GH_PERS_PAT"),
        description="GitHub token used for API authentication",
    )
    github_base_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_BASE_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )
    github_web_url: str = Field(
        default="https://github.com",
        validation_alias="GITHUB_WEB_URL",
        description="Host used for issue permalinks",
    )

    operator: str = Field(
        default="",
        validation_alias="TRISH_OPERATOR",
        description="Login assigned by workon/take and used for 'closed by me' reports",
    )

    repos: str = Field(
        default="",
        validation_alias="TRISH_REPOS",
        description="Comma-separated repositories, e.g. 'org/a,org/b'",
    )
    repos_file: Path | None = Field(
        default=None,
        validation_alias="TRISH_REPOS_FILE",
        description="File listing one repository per line",
    )

    lookback_days: int = Field(
        default=100,
        gt=0,
        validation_alias="TRISH_LOOKBACK_DAYS",
        description="Only issues updated within this many days are fetched",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        validation_alias="TRISH_REQUEST_TIMEOUT",
        description="Per-request timeout for tracker and webhook calls",
    )

    slack_webhook: str | None = Field(
        default=None,
        validation_alias="TRISH_SLACK_WEBHOOK",
        description="Slack incoming webhook for transition notifications",
    )

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _require_auth_and_operator(self) -> TrishSettings:
        if not self.github_token.strip():
            raise ValueError("TRISH_GITHUB_TOKEN (or GH_PERS_PAT) is required")
        if not self.operator.strip():
            raise ValueError("TRISH_OPERATOR is required")
        return self

    def registry(self) -> tuple[str, ...]:
        """Return the ordered repository registry.

        Raises:
            ConfigurationError: if an entry is malformed, the repos file is
                unreadable, or the registry ends up empty.
        """

        entries: list[str] = []
        for raw in self.repos.split(","):
            entry = _parse_repo_entry(raw)
            if entry is not None:
                entries.append(entry)

        if self.repos_file is not None:
            try:
                text = self.repos_file.read_text(encoding="utf-8")
            except OSError as e:
                raise ConfigurationError(f"Cannot read repos file {self.repos_file}: {e}") from e
            for line in text.splitlines():
                entry = _parse_repo_entry(line)
                if entry is not None:
                    entries.append(entry)

        seen: set[str] = set()
        registry: list[str] = []
        for entry in entries:
            if entry.lower() in seen:
                continue
            seen.add(entry.lower())
            registry.append(entry)

        if not registry:
            raise ConfigurationError(
                "No repositories configured (set TRISH_REPOS or TRISH_REPOS_FILE)"
            )
        return tuple(registry)
