"""Run every rule evaluator once and feed the results to the factory.

This module holds no timer: a cron job or an operator calls the trigger
endpoint, which calls :func:`run_notification_checks` once per request.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from crm_notifications.application.errors import ApplicationError
from crm_notifications.utils import ensure_app_timezone, now_in_app_timezone

from .factory import create_notification
from .rules import RuleConfig, RuleEvaluator, build_rule_evaluators

logger = logging.getLogger(__name__)

RULE_STATUS_SUCCESS = "success"
RULE_STATUS_PARTIAL = "partial"
RULE_STATUS_ERROR = "error"


@dataclass
class RuleRunResult:
    rule: str
    created: int = 0
    skipped: int = 0
    failed: int = 0
    error: str | None = None

    @property
    def status(self) -> str:
        if self.error is not None:
            return RULE_STATUS_ERROR
        if self.failed and not (self.created or self.skipped):
            return RULE_STATUS_ERROR
        if self.failed:
            return RULE_STATUS_PARTIAL
        return RULE_STATUS_SUCCESS


@dataclass
class TriggerRunSummary:
    ran_at: datetime
    rules: list[RuleRunResult] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(result.created for result in self.rules)

    @property
    def skipped(self) -> int:
        return sum(result.skipped for result in self.rules)

    @property
    def failed(self) -> int:
        return sum(result.failed for result in self.rules)

    @property
    def total_failure(self) -> bool:
        """``True`` when no rule completed, even partially."""

        return bool(self.rules) and all(
            result.status == RULE_STATUS_ERROR for result in self.rules
        )


def run_notification_checks(
    session: Session,
    *,
    now: datetime | None = None,
    config: RuleConfig | None = None,
    evaluators: Sequence[RuleEvaluator] | None = None,
) -> TriggerRunSummary:
    """Evaluate every rule and create the resulting notifications.

    A rule that raises is recorded as failed and the remaining rules still
    run. Store failures on individual notifications are counted per rule.
    """

    now = ensure_app_timezone(now) if now is not None else now_in_app_timezone()
    if evaluators is None:
        evaluators = build_rule_evaluators(config or RuleConfig.from_settings())

    summary = TriggerRunSummary(ran_at=now)
    for evaluator in evaluators:
        summary.rules.append(_run_rule(session, evaluator, now))

    logger.info(
        "Notification checks finished: %s created, %s skipped, %s failed across %s rules",
        summary.created,
        summary.skipped,
        summary.failed,
        len(summary.rules),
    )
    return summary


def _run_rule(session: Session, evaluator: RuleEvaluator, now: datetime) -> RuleRunResult:
    result = RuleRunResult(rule=evaluator.name)
    try:
        events = evaluator.evaluate(session, now)
    except Exception as exc:  # one failing rule must not stop the others
        session.rollback()
        logger.exception("Rule %s failed during evaluation", evaluator.name)
        result.error = str(exc) or exc.__class__.__name__
        return result

    for event in events:
        try:
            outcome = create_notification(session, event, now=now)
        except ApplicationError as exc:
            session.rollback()
            logger.error(
                "Rule %s could not notify user %s about %s: %s (%s)",
                evaluator.name,
                event.user_id,
                event.source_entity_id,
                exc.message,
                exc.details,
            )
            result.failed += 1
            continue
        if outcome.created:
            result.created += 1
        else:
            result.skipped += 1
    return result


__all__ = [
    "RULE_STATUS_ERROR",
    "RULE_STATUS_PARTIAL",
    "RULE_STATUS_SUCCESS",
    "RuleRunResult",
    "TriggerRunSummary",
    "run_notification_checks",
]
