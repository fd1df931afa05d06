"""Render issue listings for the terminal and open issues in a browser."""

from __future__ import annotations

import json
import logging
import webbrowser
from collections.abc import Iterable
from typing import TextIO

from trish.tracking.models import Issue, issue_url

logger = logging.getLogger(__name__)

TITLE_SEGMENT_LENGTH = 35
OPEN_TITLE_INDENT = 42
CLOSED_TITLE_INDENT = 56


def wrap_title(second_line_indent: int, title: str) -> str:
    """Wrap `title` into lines of at most TITLE_SEGMENT_LENGTH characters.

    Continuation lines are indented by `second_line_indent` spaces so they line
    up under the title column. A single word longer than the segment length is
    kept whole on its own line. The result always ends with a newline.
    """

    lines = [""]
    for word in title.split():
        candidate = f"{lines[-1]} {word}" if lines[-1] else word
        if len(candidate) <= TITLE_SEGMENT_LENGTH:
            lines[-1] = candidate
        else:
            lines.append(word)

    out = lines[0] + "\n"
    for line in lines[1:]:
        out += " " * second_line_indent + line + "\n"
    return out


def format_issue(issue: Issue) -> str:
    if issue.closed_at is not None:
        closed = issue.closed_at.date().isoformat()
        return f"{issue.repository:>36} {issue.number:4d} {closed:>10} -- " + wrap_title(
            CLOSED_TITLE_INDENT, issue.title
        )

    tags = " (" + " / ".join(sorted(issue.labels)) + ")"
    return f"{issue.repository:>36} {issue.number:4d} " + wrap_title(
        OPEN_TITLE_INDENT, issue.title + tags
    )


def open_in_browser(url: str) -> None:
    logger.debug("Opening in browser", extra={"url": url})
    webbrowser.open(url)


def present_issues(
    issues: Iterable[Issue],
    *,
    out: TextIO,
    web_url: str,
    open_web: bool = False,
    raw: bool = False,
) -> int:
    """Write each issue to `out`, opening it in the browser if asked.

    Returns the number of issues written.
    """

    count = 0
    for issue in issues:
        if open_web:
            open_in_browser(issue_url(web_url, issue.repository, issue.number))
        if raw:
            out.write(json.dumps(issue.to_json(), ensure_ascii=False) + "\n")
        else:
            out.write(format_issue(issue))
        count += 1
    out.flush()
    return count
