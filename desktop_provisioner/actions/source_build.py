from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Optional, Tuple

from ..errors import BuildFailed
from ..lib.command import CommandTimeout
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


MESON_CONFIGURE = ("meson", "setup", "--prefix=/usr", "build")
MESON_RECONFIGURE = ("meson", "setup", "--reconfigure", "--prefix=/usr", "build")
MESON_COMPILE = ("ninja", "-C", "build")
MESON_INSTALL = ("ninja", "-C", "build", "install")

STAMP_NAME = ".desktop-provision-installed"


@dataclass(frozen=True)
class SourceBuildAction:
    """Configure, compile and install a checked-out source tree.

    The install stage runs with root privileges since it writes into the
    system prefix. When ``build_dir`` already exists (an earlier run got
    at least as far as configure) ``reconfigure_cmd`` is used instead.

    Satisfaction is judged by ``creates`` when the build installs a
    well-known file, otherwise by a stamp written into the build directory
    after a successful install.
    """

    action_id: str
    source_dir: Path
    creates: Optional[Path] = None
    requires: Tuple[str, ...] = ()
    build_dir: str = "build"
    configure_cmd: Tuple[str, ...] = MESON_CONFIGURE
    reconfigure_cmd: Tuple[str, ...] = MESON_RECONFIGURE
    compile_cmd: Tuple[str, ...] = MESON_COMPILE
    install_cmd: Tuple[str, ...] = MESON_INSTALL

    kind: ClassVar[ActionKind] = ActionKind.SOURCE_BUILD

    @property
    def stamp(self) -> Path:
        return self.source_dir / self.build_dir / STAMP_NAME

    def describe(self) -> str:
        return f"build and install {self.source_dir.name}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        if self.creates is not None:
            return self.creates.exists()
        return self.stamp.exists()

    def apply(self, ctx: "ProvisionCtx") -> str:
        if not self.source_dir.is_dir() and not ctx.dry_run:
            raise BuildFailed("configure", f"source directory missing: {self.source_dir}")

        configure = self.configure_cmd
        if self.reconfigure_cmd and (self.source_dir / self.build_dir).is_dir():
            configure = self.reconfigure_cmd

        self._stage(ctx, "configure", configure, root=False)
        self._stage(ctx, "compile", self.compile_cmd, root=False)
        self._stage(ctx, "install", self.install_cmd, root=True)

        if ctx.dry_run:
            return f"would install {self.source_dir.name}"

        if self.creates is not None:
            if not self.creates.exists():
                raise BuildFailed("install", f"{self.creates} not present after install")
            return f"installed {self.creates}"

        self.stamp.parent.mkdir(parents=True, exist_ok=True)
        self.stamp.touch()
        return f"installed {self.source_dir.name}"

    def _stage(self, ctx: "ProvisionCtx", stage: str, argv: Tuple[str, ...], *, root: bool) -> None:
        if not argv:
            return
        logger.info("[%s] %s", self.action_id, stage)
        cwd = str(self.source_dir)
        try:
            if root:
                r = ctx.run_root(argv, check=False, cwd=cwd)
            else:
                r = ctx.run(argv, check=False, cwd=cwd)
        except CommandTimeout as e:
            raise BuildFailed(stage, str(e)) from e
        if not r.ok:
            tail = (r.stderr or r.stdout or "").strip().splitlines()[-5:]
            raise BuildFailed(stage, "\n".join(tail) or f"exit status {r.returncode}")
