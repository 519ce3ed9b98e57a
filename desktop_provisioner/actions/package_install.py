from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, List, Sequence, Tuple

from ..errors import PackageInstallPartialFailure
from .base import ActionKind

if TYPE_CHECKING:
    from ..context import ProvisionCtx

logger = logging.getLogger(__name__)


def missing_packages(ctx: "ProvisionCtx", packages: Sequence[str]) -> List[str]:
    pm = ctx.package_manager
    return [p for p in packages if not pm.is_installed(ctx.probe(pm.query_argv(p)))]


@dataclass(frozen=True)
class PackageInstallAction:
    action_id: str
    packages: Tuple[str, ...]
    requires: Tuple[str, ...] = ()

    kind: ClassVar[ActionKind] = ActionKind.PACKAGE_INSTALL

    def describe(self) -> str:
        return f"install {len(self.packages)} package(s): {' '.join(self.packages)}"

    def check(self, ctx: "ProvisionCtx") -> bool:
        return not missing_packages(ctx, self.packages)

    def apply(self, ctx: "ProvisionCtx") -> str:
        pm = ctx.package_manager
        wanted = missing_packages(ctx, self.packages)
        if not wanted:
            return "nothing to install"

        ctx.refresh_package_index()

        batch = ctx.run_root(pm.install_argv(wanted), check=False)
        if ctx.dry_run:
            return f"would install {len(wanted)} package(s)"

        if not batch.ok:
            # One unknown package makes most managers reject the whole batch.
            logger.warning("Batch install failed; retrying %d package(s) one by one", len(wanted))
            for p in missing_packages(ctx, wanted):
                ctx.run_root(pm.install_argv([p]), check=False)

        unresolved = missing_packages(ctx, wanted)
        if unresolved:
            for p in unresolved:
                logger.warning("Package %s could not be installed", p)
            raise PackageInstallPartialFailure(unresolved)

        return f"installed {len(wanted)} package(s)"
