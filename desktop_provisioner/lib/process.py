from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


def stop_process(ctx: "ProvisionCtx", name: str) -> bool:
    """Stop every process called ``name``. Returns True if something was signalled.

    killall exits non-zero when nothing matched; that is not an error here.
    """

    r = ctx.run(["killall", name], check=False)
    return r.returncode == 0


def start_detached(ctx: "ProvisionCtx", argv: Sequence[str], *, cwd: Path | None = None) -> int | None:
    """Start ``argv`` in its own session so it outlives the provisioning run."""

    if ctx.dry_run:
        logger.info("Would start %s", " ".join(argv))
        return None

    proc = ctx.spawn(
        list(argv),
        cwd=str(cwd) if cwd else None,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
        close_fds=True,
    )
    pid = getattr(proc, "pid", None)
    logger.info("Started %s (pid=%s)", argv[0], pid)
    return pid
