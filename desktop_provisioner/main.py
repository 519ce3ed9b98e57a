from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Optional, Sequence

from .context import ProvisionCtx
from .descriptor import TargetState, closing_notes, default_target
from .errors import ProvisionError
from .finalize import finalize
from .lib.env import Paths, user_paths
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import run_plan
from .plan import build_plan
from .preflight import run_preflight
from .report import ActionResult, Outcome, Report, render_report, save_report

logger = logging.getLogger(__name__)


def _echo(result: ActionResult) -> None:
    print(f"[{result.outcome.value}] {result.action_id}", flush=True)


def _halt(report: Report, stage: str, error: ProvisionError) -> Report:
    logger.error("Fatal: %s", error)
    report.add(ActionResult(stage, stage, Outcome.FAILED_FATAL, error=str(error)))
    report.halted = True
    return report


def run(
    ctx: ProvisionCtx,
    *,
    target: Optional[TargetState] = None,
    only: Optional[Sequence[str]] = None,
    launch: bool = True,
    geteuid: Callable[[], int] = os.geteuid,
    on_result: Optional[Callable[[ActionResult], None]] = None,
) -> Report:
    """Run one provisioning pass and return its report.

    Fatal errors raised before any action runs (root, no package manager,
    a broken descriptor) are turned into a halted report as well, so the
    caller always has something to show.
    """

    report = Report()
    try:
        run_preflight(ctx, geteuid=geteuid)
    except ProvisionError as e:
        return _halt(report, "preflight", e)

    target = target or default_target(ctx.paths)
    try:
        plan = build_plan(target.actions, only=only)
    except ProvisionError as e:
        return _halt(report, "plan", e)

    logger.info("Plan: %s", ", ".join(plan.ids))
    run_plan(plan, ctx, report=report, on_result=on_result)

    if report.halted:
        logger.error("Run halted; skipping finalization")
        return report

    if only is None:
        finalize(target, ctx, report, launch=launch, on_result=on_result)
    return report


def list_plan(paths: Paths, only: Optional[Sequence[str]] = None) -> str:
    plan = build_plan(default_target(paths).actions, only=only)
    lines = []
    for i, action in enumerate(plan, start=1):
        req = f"  (after {', '.join(action.requires)})" if action.requires else ""
        lines.append(f"{i:>2}. {action.action_id:<24} {action.kind.value:<15} {action.describe()}{req}")
    return "\n".join(lines)


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="desktop-provision", description="Provision the desktop shell environment.")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the provisioning log")
    p.add_argument("--dry-run", action="store_true", help="Check state and log what would change, change nothing")
    p.add_argument("--update", action="store_true", help="Pull existing source checkouts")
    p.add_argument(
        "--only",
        action="append",
        default=None,
        metavar="ACTION_ID",
        help="Run only this action and its prerequisites (repeatable, skips finalization)",
    )
    p.add_argument("--list", action="store_true", help="Print the execution plan and exit")
    p.add_argument("--no-launch", action="store_true", help="Do not run the config step or (re)start the shell")
    p.add_argument("--timeout", type=float, default=None, help="Per-command timeout in seconds")
    p.add_argument("--report", default=None, help="Also write the report to this file (.json or .yaml)")
    p.add_argument("-v", "--verbose", action="store_true", help="Log to the console at DEBUG level")

    args = p.parse_args(argv)
    paths = user_paths()

    if args.list:
        try:
            print(list_plan(paths, only=args.only))
        except ProvisionError as e:
            print(f"error: {e}", file=sys.stderr)
            return 1
        return 0

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    ctx = ProvisionCtx(
        paths=paths,
        dry_run=bool(args.dry_run),
        update_repos=bool(args.update),
        timeout=args.timeout,
    )

    report = run(ctx, only=args.only, launch=not args.no_launch, on_result=_echo)

    print()
    print(render_report(report))
    if not report.halted:
        for note in closing_notes(paths):
            logger.info("Note: %s", note)
            print(f"Note: {note}")
    if args.report:
        save_report(args.report, report)
    return report.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
