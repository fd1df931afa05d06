"""Run workflow transitions against the tracker.

A transition is an ordered list of remote mutations (see `plan_transition`).
They run strictly one after another. The first failing step stops the
transition and raises `RemoteMutationError`; earlier steps stay applied. Once
every step succeeded, a notification is sent on a best-effort basis.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from trish.tracking.errors import RemoteMutationError
from trish.tracking.github.port import RemovalStatus, TrackerPort
from trish.tracking.models import Issue, issue_url
from trish.tracking.notify import Notifier, NullNotifier, slack_link

from .actions import Step, StepResult
from .state_machine import Transition, plan_transition, workflow_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepOutcome:
    step: str
    result: StepResult


@dataclass(frozen=True, slots=True)
class TransitionReport:
    transition: Transition
    issue: Issue
    outcomes: list[StepOutcome] = field(default_factory=list)
    comment_id: int | None = None
    notified: bool = False


class WorkflowEngine:
    def __init__(
        self,
        *,
        tracker: TrackerPort,
        operator: str,
        web_url: str = "https://github.com",
        notifier: Notifier | None = None,
    ) -> None:
        if not operator.strip():
            raise ValueError("operator is required")
        self._tracker = tracker
        self._operator = operator.strip()
        self._web_url = web_url
        self._notifier = notifier or NullNotifier()

    @property
    def operator(self) -> str:
        return self._operator

    def issue_url(self, issue: Issue) -> str:
        return issue_url(self._web_url, issue.repository, issue.number)

    def comment_url(self, issue: Issue, comment_id: int) -> str:
        return f"{self.issue_url(issue)}#issuecomment-{comment_id}"

    def run(
        self,
        transition: Transition,
        issue: Issue,
        *,
        tag: str | None = None,
        comment: str | None = None,
    ) -> TransitionReport:
        steps = plan_transition(
            transition, issue, operator=self._operator, tag=tag, comment=comment
        )
        status = workflow_status(issue)
        logger.info(
            "Starting transition",
            extra={
                "transition": transition.value,
                "repo": issue.repository,
                "issue_number": issue.number,
                "from_state": status.state.value,
                "blocked": status.blocked,
                "steps": [s.description for s in steps],
            },
        )

        outcomes = self._execute(transition, issue, steps)

        comment_id: int | None = None
        for outcome in outcomes:
            raw_id = (outcome.result.details or {}).get("comment_id")
            if isinstance(raw_id, int):
                comment_id = raw_id

        message = self._message(transition, issue, tag=tag, comment=comment, comment_id=comment_id)
        notified = self._notify(message)

        return TransitionReport(
            transition=transition,
            issue=issue,
            outcomes=outcomes,
            comment_id=comment_id,
            notified=notified,
        )

    def _execute(
        self, transition: Transition, issue: Issue, steps: list[Step]
    ) -> list[StepOutcome]:
        outcomes: list[StepOutcome] = []
        for step in steps:
            applied = [o.step for o in outcomes]
            try:
                result = step.execute(self._tracker, issue)
            except Exception as e:
                logger.error(
                    "Transition step raised",
                    extra={
                        "transition": transition.value,
                        "repo": issue.repository,
                        "issue_number": issue.number,
                        "step": step.description,
                        "applied_steps": applied,
                    },
                )
                raise RemoteMutationError(
                    transition=transition.value,
                    step=step.description,
                    applied_steps=applied,
                    reason=str(e),
                ) from e

            if not result.ok:
                logger.error(
                    "Transition step failed",
                    extra={
                        "transition": transition.value,
                        "repo": issue.repository,
                        "issue_number": issue.number,
                        "step": step.description,
                        "reason": result.message,
                        "applied_steps": applied,
                    },
                )
                raise RemoteMutationError(
                    transition=transition.value,
                    step=step.description,
                    applied_steps=applied,
                    reason=result.message,
                )

            log_extra = {
                "repo": issue.repository,
                "issue_number": issue.number,
                "step": step.description,
            }
            if (result.details or {}).get("removal") == RemovalStatus.ALREADY_ABSENT.value:
                logger.info("Nothing to remove", extra=log_extra)
            else:
                logger.info("Step applied", extra=log_extra)
            outcomes.append(StepOutcome(step=step.description, result=result))
        return outcomes

    def _notify(self, message: str) -> bool:
        try:
            return self._notifier.notify(message)
        except Exception:
            logger.warning("Notification failed", exc_info=True)
            return False

    def _message(
        self,
        transition: Transition,
        issue: Issue,
        *,
        tag: str | None,
        comment: str | None,
        comment_id: int | None,
    ) -> str:
        link = slack_link(self.issue_url(issue), f"{issue.repository}#{issue.number}")
        title = issue.title

        if transition is Transition.MKONDECK:
            return f"Moved {link} to on-deck: {title}"
        if transition is Transition.WORKON:
            return f"Started work on {link}: {title}"
        if transition is Transition.TAKE:
            return f"Self-assigned {link}"
        if transition is Transition.DROP:
            return f"Self-unassigned {link}"
        if transition is Transition.BLOCKED:
            return f"Tagged {link} as blocked."
        if transition is Transition.UNBLOCKED:
            return f"Removed 'blocked' tag from {link}"
        if transition is Transition.TAG:
            return f"Tagged {link} with '{tag}': {title}"
        if transition is Transition.UNTAG:
            return f"Removed tag '{tag}' from {link}: {title}"
        if transition is Transition.CLOSE:
            return f"Closed {link}: {title}"
        lines = [f"Commented on {link}: {title}", comment or ""]
        if comment_id is not None:
            lines.append(self.comment_url(issue, comment_id))
        return "\n".join(lines)

    def mkondeck(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.MKONDECK, issue)

    def workon(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.WORKON, issue)

    def take(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.TAKE, issue)

    def drop(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.DROP, issue)

    def block(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.BLOCKED, issue)

    def unblock(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.UNBLOCKED, issue)

    def tag(self, issue: Issue, tag: str) -> TransitionReport:
        return self.run(Transition.TAG, issue, tag=tag)

    def untag(self, issue: Issue, tag: str) -> TransitionReport:
        return self.run(Transition.UNTAG, issue, tag=tag)

    def close(self, issue: Issue) -> TransitionReport:
        return self.run(Transition.CLOSE, issue)

    def comment(self, issue: Issue, text: str) -> TransitionReport:
        return self.run(Transition.COMMENT, issue, comment=text)
