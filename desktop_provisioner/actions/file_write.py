from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..lib.files import append_once, contains_marker
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx


@dataclass(frozen=True)
class FileWriteAction:
    """Append ``content`` to ``path`` exactly once.

    ``marker`` is what is looked for to decide whether the content is
    already there; it defaults to the content itself.
    """

    action_id: str
    path: Path
    content: str
    marker: str | None = None
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.FILE_WRITE

    @property
    def needle(self) -> str:
        return self.marker if self.marker is not None else self.content.strip()

    def describe(self) -> str:
        return f"write {self.needle!r} to {self.path}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        return contains_marker(self.path, self.needle)

    def apply(self, ctx: "ProvisionCtx") -> str:
        changed = append_once(self.path, self.content, marker=self.needle, dry_run=ctx.dry_run)
        return f"appended to {self.path}" if changed else "already present"
