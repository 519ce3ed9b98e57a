"""Environment finalizer: the steps that run after the plan.

PATH mutation, launcher script, the app's own config generation and
finally stopping any old instance and starting a detached new one.
"""

from __future__ import annotations

import logging
import os
import shlex
from typing import TYPE_CHECKING, Callable, List, Optional

from .actions.file_write import FileWriteAction
from .descriptor import AppSpec, PathExport, TargetState
from .lib.files import write_file
from .lib.process import start_detached, stop_process
from .pipeline import run_action
from .report import ActionResult, Outcome, Report

if TYPE_CHECKING:
    from .context import ProvisionCtx

logger = logging.getLogger(__name__)


def path_export_action(mutation: PathExport) -> FileWriteAction:
    return FileWriteAction(
        f"env:path:{mutation.entry}",
        path=mutation.rc_file,
        content=mutation.line,
    )


def apply_path_export(mutation: PathExport, ctx: "ProvisionCtx") -> ActionResult:
    """Persist the PATH entry once and make it visible to this process too."""

    result = run_action(path_export_action(mutation), ctx)

    entry = str(mutation.entry)
    current = os.environ.get("PATH", "")
    if entry not in current.split(os.pathsep) and not ctx.dry_run:
        os.environ["PATH"] = entry + (os.pathsep + current if current else "")
    return result


def render_launcher(app: AppSpec) -> str:
    lines = [
        "#!/usr/bin/env bash",
        "# Generated by desktop-provision; rewritten on every run.",
    ]
    if app.process_name:
        lines.append(f"killall {shlex.quote(app.process_name)} 2>/dev/null || true")
    lines += [
        f"cd {shlex.quote(str(app.install_dir))}",
        f"setsid {shlex.quote(app.interpreter)} {shlex.quote(str(app.entrypoint_path))} >/dev/null 2>&1 < /dev/null &",
        "disown",
        "",
    ]
    return "\n".join(lines)


def write_launcher(app: AppSpec, ctx: "ProvisionCtx") -> ActionResult:
    action_id = f"launcher:{app.name}"
    if app.launcher is None:
        return ActionResult(action_id, "launcher", Outcome.SKIPPED, detail="no launcher configured")
    try:
        write_file(app.launcher, render_launcher(app), mode=0o755, dry_run=ctx.dry_run)
    except OSError as e:
        logger.warning("Unable to write launcher %s: %s", str(app.launcher), e)
        return ActionResult(action_id, "launcher", Outcome.FAILED_RECOVERABLE, error=str(e))
    return ActionResult(action_id, "launcher", Outcome.APPLIED, detail=f"wrote {app.launcher}")


def generate_config(app: AppSpec, ctx: "ProvisionCtx") -> ActionResult:
    action_id = f"config:{app.name}"
    if not app.config_script:
        return ActionResult(action_id, "config", Outcome.SKIPPED, detail="no config step")
    script = app.install_dir / app.config_script
    if not script.is_file() and not ctx.dry_run:
        return ActionResult(action_id, "config", Outcome.FAILED_RECOVERABLE, error=f"{script} not found")

    # The app's config step reports nothing useful back; run it and move on.
    r = ctx.run([app.interpreter, str(script)], check=False, cwd=str(app.install_dir))
    if not r.ok:
        logger.warning("Config generation exited with %s", r.returncode)
    return ActionResult(action_id, "config", Outcome.APPLIED, detail=f"ran {app.config_script}")


def relaunch(app: AppSpec, ctx: "ProvisionCtx") -> ActionResult:
    action_id = f"launch:{app.name}"
    if not app.entrypoint_path.is_file() and not ctx.dry_run:
        return ActionResult(
            action_id, "launch", Outcome.FAILED_RECOVERABLE, error=f"{app.entrypoint_path} not found"
        )

    if app.process_name:
        if stop_process(ctx, app.process_name):
            logger.info("Stopped running %s", app.process_name)

    try:
        pid = start_detached(ctx, app.command(), cwd=app.install_dir)
    except OSError as e:
        logger.warning("Unable to start %s: %s", app.name, e)
        return ActionResult(action_id, "launch", Outcome.FAILED_RECOVERABLE, error=str(e))
    return ActionResult(action_id, "launch", Outcome.APPLIED, detail=f"started pid {pid}" if pid else "started")


def finalize(
    target: TargetState,
    ctx: "ProvisionCtx",
    report: Report,
    *,
    launch: bool = True,
    on_result: Optional[Callable[[ActionResult], None]] = None,
) -> Report:
    """Apply terminal state. Results are appended to ``report``."""

    steps: List[Callable[[], ActionResult]] = [
        *[(lambda m=m: apply_path_export(m, ctx)) for m in target.environment],
        lambda: write_launcher(target.app, ctx),
    ]
    if launch:
        steps += [
            lambda: generate_config(target.app, ctx),
            lambda: relaunch(target.app, ctx),
        ]

    for step in steps:
        result = report.add(step())
        if on_result:
            on_result(result)
    return report
