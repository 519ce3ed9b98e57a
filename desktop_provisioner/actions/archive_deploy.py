from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Tuple

from ..errors import ArchiveDownloadFailure
from ..lib.command import CommandError
from ..lib.download import ExtractError, fetch_and_extract
from ..lib.files import is_nonempty_dir
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx


@dataclass(frozen=True)
class ArchiveDeployAction:
    action_id: str
    url: str
    dest: Path
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.ARCHIVE_DEPLOY

    def describe(self) -> str:
        return f"deploy {self.url} -> {self.dest}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        return is_nonempty_dir(self.dest)

    def apply(self, ctx: "ProvisionCtx") -> str:
        try:
            count = fetch_and_extract(ctx, self.url, self.dest)
        except (CommandError, ExtractError) as e:
            raise ArchiveDownloadFailure(f"{self.url}: {e}") from e

        if not ctx.dry_run and not is_nonempty_dir(self.dest):
            raise ArchiveDownloadFailure(f"{self.url}: archive was empty")
        return f"deployed {count} file(s)"
