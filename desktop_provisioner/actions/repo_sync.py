from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..errors import SourceUnavailable
from ..lib import git
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RepoSyncAction:
    action_id: str
    url: str
    dest: Path
    branch: str | None = None
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.REPO_SYNC

    def describe(self) -> str:
        return f"sync {self.url} -> {self.dest}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        if ctx.update_repos:
            return False
        return self.dest.is_dir()

    def apply(self, ctx: "ProvisionCtx") -> str:
        if git.is_checkout(self.dest):
            logger.info("Updating %s", str(self.dest))
            r = git.pull(ctx, self.dest)
            if r.ok:
                return "updated"
            # The checkout may hold user data; never remove it.
            raise SourceUnavailable(
                f"{self.url}: update of {self.dest} failed, checkout left untouched: "
                f"{r.stderr.strip() or r.returncode}"
            )

        if self.dest.is_dir() and any(self.dest.iterdir()):
            raise SourceUnavailable(f"{self.dest} exists but is not a git checkout")

        if not ctx.dry_run:
            self.dest.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Cloning %s", self.url)
        r = git.shallow_clone(ctx, self.url, self.dest, branch=self.branch)
        if not r.ok:
            raise SourceUnavailable(f"{self.url}: clone failed: {r.stderr.strip() or r.returncode}")
        return "cloned"
