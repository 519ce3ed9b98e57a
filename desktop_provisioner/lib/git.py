from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .command import CmdResult

if TYPE_CHECKING:
    from ..context import ProvisionCtx


def is_checkout(path: Path) -> bool:
    return (path / ".git").exists()


def shallow_clone(ctx: "ProvisionCtx", url: str, dest: Path, *, branch: str | None = None) -> CmdResult:
    argv = ["git", "clone", "--depth=1"]
    if branch:
        argv += ["--branch", branch]
    argv += [url, str(dest)]
    return ctx.run(argv, check=False)


def pull(ctx: "ProvisionCtx", dest: Path) -> CmdResult:
    return ctx.run(["git", "-C", str(dest), "pull", "--ff-only"], check=False)
