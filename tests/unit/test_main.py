"""CLI tests: command dispatch, output and exit codes against a fake tracker."""

from __future__ import annotations

import io
import sys
from unittest.mock import Mock

import pytest

from trish.tracking import main as main_module
from trish.tracking import presenter
from trish.tracking.models import IssueState


@pytest.fixture
def fake_env(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TRISH_GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("TRISH_OPERATOR", "me")
    monkeypatch.setenv("TRISH_REPOS", "org/a,org/b")
    monkeypatch.delenv("TRISH_SLACK_WEBHOOK", raising=False)
    monkeypatch.delenv("TRISH_REPOS_FILE", raising=False)
    monkeypatch.setattr(main_module, "configure_logging", Mock())


@pytest.fixture
def cli_tracker(fake_env, make_issue, make_tracker, monkeypatch: pytest.MonkeyPatch):
    tracker = make_tracker(
        [
            make_issue(5, "org/a", title="Alpha five", labels=["on-deck"]),
            make_issue(5, "org/b", title="Beta five", closed_days_ago=3),
            make_issue(9, "org/b", title="Beta nine", labels=["in-progress", "bug"]),
            make_issue(11, "org/a", title="A pull request", is_pull_request=True),
        ]
    )
    monkeypatch.setattr(main_module, "GitHubTracker", lambda **_kwargs: tracker)
    return tracker


def test_workon_bare_number_acts_on_first_registry_repository(cli_tracker, capsys) -> None:
    assert main_module.main(["workon", "5"]) == main_module.EXIT_OK

    assert cli_tracker.mutation_calls() == [
        ("add_labels", "org/a", 5, ("in-progress",)),
        ("remove_label", "org/a", 5, "on-deck"),
        ("remove_label", "org/a", 5, "blocked"),
        ("set_assignee", "org/a", 5, "me"),
    ]
    assert "workon: org/a#5 Alpha five" in capsys.readouterr().out


def test_qualified_selector_is_case_insensitive(cli_tracker) -> None:
    assert main_module.main(["close", "ORG/B/9"]) == main_module.EXIT_OK

    assert cli_tracker.state_of("org/b", 9).state is IssueState.CLOSED
    assert cli_tracker.state_of("org/b", 9).labels == {"bug"}


def test_unknown_issue_reports_and_mutates_nothing(cli_tracker, capsys) -> None:
    assert main_module.main(["take", "404"]) == main_module.EXIT_NOT_FOUND

    assert cli_tracker.mutation_calls() == []
    assert "No issue found: 404" in capsys.readouterr().err


def test_pull_requests_cannot_be_selected(cli_tracker) -> None:
    assert main_module.main(["take", "11"]) == main_module.EXIT_NOT_FOUND
    assert cli_tracker.mutation_calls() == []


def test_selection_fetches_every_repository_in_all_states(cli_tracker) -> None:
    main_module.main(["blocked", "9"])

    listings = sorted(c for c in cli_tracker.calls if c[0] == "list_issues")
    assert listings == [
        ("list_issues", "org/a", IssueState.ALL, None, 100),
        ("list_issues", "org/b", IssueState.ALL, None, 100),
    ]


def test_tag_command_takes_tag_then_issue(cli_tracker) -> None:
    assert main_module.main(["tag", "needs-design", "org/a/5"]) == main_module.EXIT_OK

    assert cli_tracker.state_of("org/a", 5).labels == {"on-deck", "needs-design"}


def test_comment_reads_stdin(cli_tracker, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("First line\nSecond line\n"))

    assert main_module.main(["comment", "9"]) == main_module.EXIT_OK

    assert cli_tracker.state_of("org/b", 9).comments == ["First line\nSecond line"]
    assert "#issuecomment-1001" in capsys.readouterr().out


def test_empty_comment_is_not_posted(cli_tracker, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(sys, "stdin", io.StringIO("\n"))

    assert main_module.main(["comment", "9"]) == main_module.EXIT_USAGE
    assert cli_tracker.mutation_calls() == []


def test_mutation_failure_exits_nonzero_with_one_line(cli_tracker, capsys) -> None:
    cli_tracker.fail_on.add("set_assignee")

    assert main_module.main(["workon", "9"]) == main_module.EXIT_FAILURE

    err = capsys.readouterr().err
    assert "workon failed at step 'assign me'" in err


def test_aggregation_failure_exits_nonzero(cli_tracker, capsys) -> None:
    cli_tracker.fail_listing_for.add("org/b")

    assert main_module.main(["in-progress"]) == main_module.EXIT_FAILURE

    assert "org/b" in capsys.readouterr().err
    assert cli_tracker.mutation_calls() == []


def test_in_progress_listing(cli_tracker, capsys) -> None:
    assert main_module.main(["in-progress"]) == main_module.EXIT_OK

    out = capsys.readouterr().out
    assert "Beta nine (bug / in-progress)" in out
    assert "Alpha five" not in out


def test_on_deck_listing_with_bugs_flag_filters_everything(cli_tracker, capsys) -> None:
    assert main_module.main(["on-deck", "--bugs"]) == main_module.EXIT_OK
    assert capsys.readouterr().out == ""


def test_mine_listing_asks_tracker_for_operator_assignments(cli_tracker) -> None:
    main_module.main(["mine"])

    listings = {c[3] for c in cli_tracker.calls if c[0] == "list_issues"}
    assert listings == {"me"}


def test_open_opens_found_issues_and_reports_missing(
    cli_tracker, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    opened = Mock()
    monkeypatch.setattr(main_module, "open_in_browser", opened)

    assert main_module.main(["open", "org/b/5", "77"]) == main_module.EXIT_NOT_FOUND

    opened.assert_called_once_with("https://github.com/org/b/issues/5")
    assert "No issue found: 77" in capsys.readouterr().err


def test_on_deck_web_flag_opens_each_issue(cli_tracker, monkeypatch: pytest.MonkeyPatch) -> None:
    opened = Mock()
    monkeypatch.setattr(presenter, "open_in_browser", opened)

    main_module.main(["on-deck", "--web"])

    opened.assert_called_once_with("https://github.com/org/a/issues/5")


def test_sibling_opens_new_issue_page(cli_tracker, monkeypatch: pytest.MonkeyPatch) -> None:
    opened = Mock()
    monkeypatch.setattr(main_module, "open_in_browser", opened)

    assert main_module.main(["sibling", "9"]) == main_module.EXIT_OK

    opened.assert_called_once_with("https://github.com/org/b/issues/new")


def test_missing_configuration_exits_with_usage_code(
    tmp_path, monkeypatch: pytest.MonkeyPatch, capsys
) -> None:
    monkeypatch.chdir(tmp_path)
    for name in ("TRISH_GITHUB_TOKEN", "GH_PERS_PAT", "TRISH_OPERATOR"):
        monkeypatch.delenv(name, raising=False)

    assert main_module.main(["in-progress"]) == main_module.EXIT_USAGE
    assert "Configuration error" in capsys.readouterr().err


def test_empty_registry_exits_with_usage_code(fake_env, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRISH_REPOS", "")

    assert main_module.main(["in-progress"]) == main_module.EXIT_USAGE
