"""Best-effort chat notifications for workflow transitions."""

from __future__ import annotations

import logging
from typing import Protocol

import requests

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify(self, message: str) -> bool: ...


class NullNotifier:
    """Used when no webhook is configured."""

    def notify(self, message: str) -> bool:
        logger.debug("Notifications disabled; dropping message", extra={"chat_message": message})
        return False


class SlackNotifier:
    """Post messages to a Slack incoming webhook.

    Failures are logged and reported as False, never raised.
    """

    def __init__(
        self,
        webhook_url: str,
        *,
        timeout_seconds: float = 10,
        session: requests.Session | None = None,
    ) -> None:
        if not webhook_url.strip():
            raise ValueError("Webhook URL is required")
        self._webhook_url = webhook_url
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def notify(self, message: str) -> bool:
        try:
            resp = self._session.post(
                self._webhook_url,
                json={"text": message},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("Slack notification failed", extra={"error": str(e)})
            return False
        return True


def slack_link(url: str, text: str) -> str:
    return f"<{url}|{text}>"
