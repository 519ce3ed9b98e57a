from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..errors import SourceUnavailable
from ..lib.assets import copy_tree
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreeCopyAction:
    """Copy bundled assets once.

    ``marker`` existing means the assets are in place. The marker directory
    is created after the copy if the assets did not bring it along.
    """

    action_id: str
    src: Path
    dest: Path
    marker: Path
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.TREE_COPY

    def describe(self) -> str:
        return f"copy {self.src} -> {self.dest}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        return self.marker.exists()

    def apply(self, ctx: "ProvisionCtx") -> str:
        if ctx.dry_run and not self.src.is_dir():
            # Its source would be fetched earlier in a real run.
            logger.info("Would copy %s -> %s", str(self.src), str(self.dest))
            return self.describe()
        if not self.src.is_dir():
            raise SourceUnavailable(f"{self.src} does not exist")
        count = copy_tree(self.src, self.dest, dry_run=ctx.dry_run)
        if not ctx.dry_run:
            self.marker.mkdir(parents=True, exist_ok=True)
        return f"copied {count} file(s)"
