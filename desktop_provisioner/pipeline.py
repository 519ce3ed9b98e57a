from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional, Set

from .actions.base import Action
from .errors import PrerequisiteFailed, ProvisionError
from .plan import ExecutionPlan
from .report import ActionResult, Outcome, Report

if TYPE_CHECKING:
    from .context import ProvisionCtx

logger = logging.getLogger(__name__)

OnResult = Callable[[ActionResult], None]


def _kind(action: Action) -> str:
    kind = action.kind
    return getattr(kind, "value", str(kind))


def _is_fatal(exc: BaseException) -> bool:
    return isinstance(exc, ProvisionError) and exc.fatal


def run_action(action: Action, ctx: "ProvisionCtx") -> ActionResult:
    """Check, then apply if needed. Fatal errors propagate; everything else becomes a result."""

    kind = _kind(action)
    try:
        if action.check(ctx):
            logger.info("Skipping %s (already satisfied)", action.action_id)
            return ActionResult(action.action_id, kind, Outcome.SKIPPED, detail="already satisfied")

        logger.info("Applying %s: %s", action.action_id, action.describe())
        detail = action.apply(ctx)
    except Exception as e:
        if _is_fatal(e):
            raise
        logger.warning("%s failed: %s", action.action_id, e)
        logger.debug("Failure details for %s", action.action_id, exc_info=True)
        return ActionResult(action.action_id, kind, Outcome.FAILED_RECOVERABLE, error=str(e))

    return ActionResult(action.action_id, kind, Outcome.APPLIED, detail=detail or "")


def run_plan(
    plan: ExecutionPlan,
    ctx: "ProvisionCtx",
    *,
    report: Optional[Report] = None,
    on_result: Optional[OnResult] = None,
) -> Report:
    """Run the plan in order and collect a report.

    A recoverable failure only affects the actions that (transitively)
    require the failed one; they are recorded as failed without being
    applied. A fatal failure is recorded and halts the run.
    """

    report = report if report is not None else Report()
    failed: Set[str] = set()

    for action in plan:
        blocked = [dep for dep in action.requires if dep in failed]
        if blocked:
            err = PrerequisiteFailed(action.action_id, blocked)
            logger.warning("%s", err)
            result = ActionResult(action.action_id, _kind(action), Outcome.FAILED_RECOVERABLE, error=str(err))
        else:
            try:
                result = run_action(action, ctx)
            except ProvisionError as e:
                logger.error("Fatal: %s failed: %s", action.action_id, e)
                report.add(ActionResult(action.action_id, _kind(action), Outcome.FAILED_FATAL, error=str(e)))
                report.halted = True
                if on_result:
                    on_result(report.results[-1])
                break

        if result.failed:
            failed.add(action.action_id)
        report.add(result)
        if on_result:
            on_result(result)

    return report
