from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..errors import SourceUnavailable
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LinkInstallAction:
    """Expose an executable from a checkout as a symlink (e.g. into ~/.local/bin)."""

    action_id: str
    target: Path
    link: Path
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.LINK_INSTALL

    def describe(self) -> str:
        return f"link {self.link} -> {self.target}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        if not self.link.is_symlink():
            return False
        if Path(os.readlink(self.link)) != self.target:
            return False
        return os.access(self.target, os.X_OK)

    def apply(self, ctx: "ProvisionCtx") -> str:
        if ctx.dry_run:
            logger.info("Would link %s -> %s", str(self.link), str(self.target))
            return self.describe()
        if not self.target.is_file():
            raise SourceUnavailable(f"{self.target} does not exist")

        mode = self.target.stat().st_mode
        self.target.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

        self.link.parent.mkdir(parents=True, exist_ok=True)
        if self.link.is_symlink() or self.link.exists():
            self.link.unlink()
        self.link.symlink_to(self.target)
        return self.describe()
