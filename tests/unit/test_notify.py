"""Unit tests for best-effort Slack notifications."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests

from trish.tracking.notify import NullNotifier, SlackNotifier, slack_link


def test_slack_notifier_posts_text_payload() -> None:
    session = Mock(spec=requests.Session)
    session.post.return_value = Mock(status_code=200)

    notifier = SlackNotifier("https://hooks.example/T0/B0", timeout_seconds=5, session=session)

    assert notifier.notify("hello") is True
    session.post.assert_called_once_with(
        "https://hooks.example/T0/B0", json={"text": "hello"}, timeout=5
    )


def test_slack_notifier_swallows_http_errors(caplog: pytest.LogCaptureFixture) -> None:
    session = Mock(spec=requests.Session)
    response = Mock()
    response.raise_for_status.side_effect = requests.HTTPError("500 Server Error")
    session.post.return_value = response

    notifier = SlackNotifier("https://hooks.example/T0/B0", session=session)

    assert notifier.notify("hello") is False
    assert "Slack notification failed" in caplog.text


def test_slack_notifier_swallows_connection_errors() -> None:
    session = Mock(spec=requests.Session)
    session.post.side_effect = requests.ConnectionError("no route")

    assert SlackNotifier("https://hooks.example/x", session=session).notify("hi") is False


def test_slack_notifier_requires_url() -> None:
    with pytest.raises(ValueError):
        SlackNotifier("  ")


def test_null_notifier_reports_not_sent() -> None:
    assert NullNotifier().notify("anything") is False


def test_slack_link_format() -> None:
    assert slack_link("https://github.com/o/r/issues/1", "o/r#1") == (
        "<https://github.com/o/r/issues/1|o/r#1>"
    )
