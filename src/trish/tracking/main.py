"""CLI entrypoint.

Every command takes a fresh snapshot of the configured repositories, then
either lists issues or resolves one selector and runs a workflow transition.
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from trish import __version__
from trish.tracking.aggregation import FetchOptions, IssueAggregator
from trish.tracking.config import TrishSettings
from trish.tracking.errors import AggregationError, ConfigurationError, RemoteMutationError
from trish.tracking.filters import (
    IssuePredicate,
    SortKey,
    apply_filters,
    by_closed_at,
    by_updated_at,
    closed_by,
    closed_within,
    in_progress,
    is_bug,
    on_deck,
    updated_within,
)
from trish.tracking.github.client import GitHubTracker
from trish.tracking.logging import configure_logging
from trish.tracking.models import Issue, IssueState, issue_url, new_issue_url
from trish.tracking.notify import Notifier, NullNotifier, SlackNotifier
from trish.tracking.presenter import open_in_browser, present_issues
from trish.tracking.selector import resolve
from trish.tracking.workflow import Transition, WorkflowEngine

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_NOT_FOUND = 3

RECENTLY_CLOSED_DAYS = 63
RECENTLY_UPDATED_DAYS = 30


@dataclass(frozen=True, slots=True)
class Listing:
    """A listing command: what to fetch, how to filter it, how to sort it."""

    help: str
    state: IssueState
    predicates: Callable[[str], list[IssuePredicate]] = field(default=lambda _operator: [])
    sort_key: SortKey | None = None
    assigned_to_operator: bool = False


LISTINGS: dict[str, Listing] = {
    "closed": Listing(
        help=f"Issues you closed in the last {RECENTLY_CLOSED_DAYS} days",
        state=IssueState.CLOSED,
        predicates=lambda operator: [
            closed_by(operator),
            closed_within(RECENTLY_CLOSED_DAYS),
        ],
        sort_key=by_closed_at,
    ),
    "on-deck": Listing(
        help="Open issues labelled 'on-deck'",
        state=IssueState.ALL,
        predicates=lambda _operator: [on_deck],
    ),
    "in-progress": Listing(
        help="Open issues labelled 'in-progress'",
        state=IssueState.OPEN,
        predicates=lambda _operator: [in_progress],
    ),
    "recent": Listing(
        help=f"Open issues updated in the last {RECENTLY_UPDATED_DAYS} days",
        state=IssueState.OPEN,
        predicates=lambda _operator: [updated_within(RECENTLY_UPDATED_DAYS)],
        sort_key=by_updated_at,
    ),
    "mine": Listing(
        help="Open issues assigned to you",
        state=IssueState.OPEN,
        sort_key=by_updated_at,
        assigned_to_operator=True,
    ),
}

TRANSITION_COMMANDS: dict[str, tuple[Transition, str]] = {
    "workon": (Transition.WORKON, "Reopen if needed, mark 'in-progress' and assign to you"),
    "take": (Transition.TAKE, "Assign the issue to you"),
    "drop": (Transition.DROP, "Unassign yourself and clear 'in-progress'/'on-deck'"),
    "mkondeck": (Transition.MKONDECK, "Mark the issue 'on-deck'"),
    "close": (Transition.CLOSE, "Clear workflow labels and close the issue"),
    "blocked": (Transition.BLOCKED, "Tag the issue 'blocked'"),
    "unblocked": (Transition.UNBLOCKED, "Remove the 'blocked' tag"),
    "comment": (Transition.COMMENT, "Add a comment read from stdin (end with EOF)"),
}

TAG_COMMANDS: dict[str, tuple[Transition, str]] = {
    "tag": (Transition.TAG, "Add an arbitrary label to the issue"),
    "untag": (Transition.UNTAG, "Remove an arbitrary label from the issue"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="trish",
        description="trish - TRack ISsues Helpfully, across many repositories",
    )
    parser.add_argument("--version", action="version", version=f"trish {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose (DEBUG) logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    listing_flags = argparse.ArgumentParser(add_help=False)
    listing_flags.add_argument(
        "-b", "--bugs", action="store_true", help="Only show issues labelled 'bug'"
    )
    listing_flags.add_argument(
        "-w", "--web", action="store_true", help="Open matching issues in the browser"
    )
    listing_flags.add_argument(
        "--raw", action="store_true", help="Print issue records as JSON lines"
    )

    for name, listing in LISTINGS.items():
        subparsers.add_parser(name, help=listing.help, parents=[listing_flags])

    open_issues = subparsers.add_parser("open", help="Open issues in the browser")
    open_issues.add_argument("selectors", nargs="+", metavar="ISSUE")

    sibling = subparsers.add_parser(
        "sibling", help="Open the new-issue page of the issue's repository"
    )
    sibling.add_argument("selector", metavar="ISSUE")

    for name, (_transition, help_text) in TRANSITION_COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("selector", metavar="ISSUE", help="Issue number or org/repo/number")

    for name, (_transition, help_text) in TAG_COMMANDS.items():
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("tag", metavar="TAG")
        sub.add_argument("selector", metavar="ISSUE", help="Issue number or org/repo/number")

    return parser


def _build_notifier(settings: TrishSettings) -> Notifier:
    if settings.slack_webhook and settings.slack_webhook.strip():
        return SlackNotifier(
            settings.slack_webhook, timeout_seconds=settings.request_timeout_seconds
        )
    return NullNotifier()


def _read_comment() -> str:
    print("Type your comment below (end with Ctrl-D)...", file=sys.stderr)
    return sys.stdin.read().rstrip("\n")


def _report_not_found(token: str) -> None:
    print(f"No issue found: {token}", file=sys.stderr)


def _run_listing(
    listing: Listing,
    args: argparse.Namespace,
    *,
    settings: TrishSettings,
    aggregator: IssueAggregator,
) -> int:
    options = FetchOptions(
        state=listing.state,
        assignee=settings.operator if listing.assigned_to_operator else None,
    )
    predicates = listing.predicates(settings.operator)
    if args.bugs:
        predicates.append(is_bug)

    issues = apply_filters(aggregator.fetch(options), predicates, sort_key=listing.sort_key)
    present_issues(
        issues,
        out=sys.stdout,
        web_url=settings.github_web_url,
        open_web=args.web,
        raw=args.raw,
    )
    return EXIT_OK


def _snapshot(aggregator: IssueAggregator) -> list[Issue]:
    return apply_filters(aggregator.fetch(FetchOptions(state=IssueState.ALL)))


def _run_open(
    args: argparse.Namespace, *, settings: TrishSettings, aggregator: IssueAggregator
) -> int:
    issues = _snapshot(aggregator)
    exit_code = EXIT_OK
    for token in args.selectors:
        issue = resolve(token, issues)
        if issue is None:
            _report_not_found(token)
            exit_code = EXIT_NOT_FOUND
            continue
        open_in_browser(issue_url(settings.github_web_url, issue.repository, issue.number))
    return exit_code


def _run_sibling(
    args: argparse.Namespace, *, settings: TrishSettings, aggregator: IssueAggregator
) -> int:
    issue = resolve(args.selector, _snapshot(aggregator))
    if issue is None:
        _report_not_found(args.selector)
        return EXIT_NOT_FOUND
    open_in_browser(new_issue_url(settings.github_web_url, issue.repository))
    return EXIT_OK


def _run_transition(
    transition: Transition,
    args: argparse.Namespace,
    *,
    engine: WorkflowEngine,
    aggregator: IssueAggregator,
) -> int:
    issue = resolve(args.selector, _snapshot(aggregator))
    if issue is None:
        _report_not_found(args.selector)
        return EXIT_NOT_FOUND

    tag = getattr(args, "tag", None)
    comment: str | None = None
    if transition is Transition.COMMENT:
        comment = _read_comment()
        if not comment.strip():
            print("Empty comment; nothing posted.", file=sys.stderr)
            return EXIT_USAGE

    report = engine.run(transition, issue, tag=tag, comment=comment)

    summary = f"{transition.value}: {issue.repository}#{issue.number} {issue.title}"
    if report.comment_id is not None:
        summary += f"\n{engine.comment_url(issue, report.comment_id)}"
    print(summary)
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = TrishSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check your environment or .env):", file=sys.stderr)
        print(e, file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.log_level, verbose=args.verbose)

    try:
        registry = settings.registry()
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return EXIT_USAGE

    logger.debug("Parsed arguments", extra={"args": vars(args), "repositories": list(registry)})

    tracker = GitHubTracker(
        token=settings.github_token,
        base_url=settings.github_base_url,
        timeout_seconds=settings.request_timeout_seconds,
    )
    try:
        aggregator = IssueAggregator(
            tracker=tracker, registry=registry, lookback_days=settings.lookback_days
        )

        if args.command in LISTINGS:
            return _run_listing(
                LISTINGS[args.command], args, settings=settings, aggregator=aggregator
            )

        if args.command == "open":
            return _run_open(args, settings=settings, aggregator=aggregator)

        if args.command == "sibling":
            return _run_sibling(args, settings=settings, aggregator=aggregator)

        commands = {**TRANSITION_COMMANDS, **TAG_COMMANDS}
        if args.command in commands:
            engine = WorkflowEngine(
                tracker=tracker,
                operator=settings.operator,
                web_url=settings.github_web_url,
                notifier=_build_notifier(settings),
            )
            transition, _help = commands[args.command]
            return _run_transition(transition, args, engine=engine, aggregator=aggregator)

        logger.error("Unknown command", extra={"command": args.command})
        return EXIT_USAGE

    except (AggregationError, RemoteMutationError) as e:
        print(str(e), file=sys.stderr)
        return EXIT_FAILURE

    except Exception as e:
        logger.exception("Command failed")
        print(f"Command failed: {e}", file=sys.stderr)
        return EXIT_FAILURE

    finally:
        tracker.close()


if __name__ == "__main__":
    raise SystemExit(main())
